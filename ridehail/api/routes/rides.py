"""
Ride endpoints
==============

POST  /api/v1/rides/estimate                  -- fare quote for two points
POST  /api/v1/rides/order                     -- create a pending ride
GET   /api/v1/rides/my-rides                  -- rider history
GET   /api/v1/rides/driver/my-rides           -- rides assigned to the driver
GET   /api/v1/rides/active                    -- rider's current ride, if any
GET   /api/v1/rides/{ride_id}                 -- one ride
POST  /api/v1/rides/{ride_id}/search          -- pending -> searching
GET   /api/v1/rides/{ride_id}/available-drivers
POST  /api/v1/rides/{ride_id}/cancel
POST  /api/v1/rides/{ride_id}/accept          -- assigned driver confirms
POST  /api/v1/rides/{ride_id}/decline         -- assigned driver declines
PATCH /api/v1/rides/{ride_id}/status          -- capability-checked move
POST  /api/v1/rides/{ride_id}/rate            -- rider rates a completed ride
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_current_actor, get_db, require_driver
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    DriverProfileResponse,
    EstimateRequest,
    EstimateResponse,
    RateRideRequest,
    RideOrderRequest,
    RideResponse,
    StatusUpdateRequest,
    driver_profile_response,
)
from ridehail.domain.entities import Actor, Location
from ridehail.services.rides import RideService

router = APIRouter(prefix="/rides", tags=["rides"])


# ── Estimate & order ──────────────────────────────────────────────────


@router.post(
    "/estimate",
    response_model=EstimateResponse,
    summary="Estimate distance, duration and fare",
)
@limiter.limit(RATE_LIMIT)
async def estimate_ride(
    request: Request,
    body: EstimateRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    quote = RideService(db).estimate(
        Location(body.pickup_lat, body.pickup_lng),
        Location(body.destination_lat, body.destination_lng),
        body.category,
    )
    response = EstimateResponse.model_validate(quote)
    # Display precision only; fares above use the unrounded distance
    response.distance_km = round(quote.distance_km, 2)
    return response


@router.post(
    "/order",
    status_code=201,
    response_model=RideResponse,
    summary="Order a ride using a previously shown estimate",
)
@limiter.limit(RATE_LIMIT)
async def order_ride(
    request: Request,
    body: RideOrderRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).create_order(
        actor,
        category=body.category,
        pickup_address=body.pickup_address,
        pickup=Location(body.pickup_lat, body.pickup_lng),
        destination_address=body.destination_address,
        destination=Location(body.destination_lat, body.destination_lng),
        payment_method=body.payment_method,
        phone_number=body.phone_number,
        instructions=body.instructions,
        distance_km=body.distance_km,
        estimated_duration_minutes=body.estimated_duration_minutes,
        base_fare=body.base_fare,
        distance_fare=body.distance_fare,
        total_fare=body.total_fare,
    )


# ── Listings ──────────────────────────────────────────────────────────


@router.get("/my-rides", response_model=list[RideResponse], summary="Rider history")
@limiter.limit(RATE_LIMIT)
async def my_rides(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).rider_history(actor)


@router.get(
    "/driver/my-rides",
    response_model=list[RideResponse],
    summary="Rides assigned to the calling driver",
)
@limiter.limit(RATE_LIMIT)
async def driver_rides(
    request: Request,
    actor: Actor = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).driver_history(actor)


@router.get(
    "/active",
    response_model=Optional[RideResponse],
    summary="Rider's latest non-terminal ride (null when none)",
)
@limiter.limit(RATE_LIMIT)
async def active_ride(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).active_ride(actor)


@router.get("/{ride_id}", response_model=RideResponse, summary="Get one ride")
@limiter.limit(RATE_LIMIT)
async def get_ride(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).get_visible(actor, ride_id)


# ── Transitions ───────────────────────────────────────────────────────


@router.post(
    "/{ride_id}/search",
    response_model=RideResponse,
    summary="Start looking for a driver",
)
@limiter.limit(RATE_LIMIT)
async def search_driver(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).request_search(actor, ride_id)


@router.get(
    "/{ride_id}/available-drivers",
    response_model=list[DriverProfileResponse],
    summary="Drivers able to serve a searching ride",
)
@limiter.limit(RATE_LIMIT)
async def available_drivers(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    profiles = await service.available_drivers_for_rider(actor, ride_id)
    described = await service.directory.describe(profiles)
    return [driver_profile_response(p, u, v) for p, u, v in described]


@router.post(
    "/{ride_id}/cancel",
    response_model=RideResponse,
    summary="Cancel a ride",
    description="Allowed from any non-terminal state; completed or cancelled rides conflict.",
)
@limiter.limit(RATE_LIMIT)
async def cancel_ride(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).cancel(actor, ride_id)


@router.post(
    "/{ride_id}/accept",
    response_model=RideResponse,
    summary="Assigned driver accepts the ride",
)
@limiter.limit(RATE_LIMIT)
async def accept_ride(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).accept(actor, ride_id)


@router.post(
    "/{ride_id}/decline",
    response_model=RideResponse,
    summary="Assigned driver declines the ride",
)
@limiter.limit(RATE_LIMIT)
async def decline_ride(
    request: Request,
    ride_id: str,
    actor: Actor = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).decline(actor, ride_id)


@router.patch(
    "/{ride_id}/status",
    response_model=RideResponse,
    summary="Move a ride along its lifecycle",
)
@limiter.limit(RATE_LIMIT)
async def update_status(
    request: Request,
    ride_id: str,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).update_status(actor, ride_id, body.status)


@router.post(
    "/{ride_id}/rate",
    response_model=RideResponse,
    summary="Rate a completed ride",
)
@limiter.limit(RATE_LIMIT)
async def rate_ride(
    request: Request,
    ride_id: str,
    body: RateRideRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await RideService(db).rate(actor, ride_id, body.rating, body.feedback)
