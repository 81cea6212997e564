"""
Admin ride endpoints
====================

GET   /api/v1/admin/health                            -- simple health check
GET   /api/v1/admin/rides                             -- every ride, with names
PUT   /api/v1/admin/rides/{ride_id}/assign            -- pending -> awaiting driver
PUT   /api/v1/admin/rides/{ride_id}/complete          -- finish a ride under way
PUT   /api/v1/admin/rides/{ride_id}/decline           -- cancel a non-terminal ride
PATCH /api/v1/admin/rides/{ride_id}/status            -- forward-only override
GET   /api/v1/admin/rides/{ride_id}/available-drivers -- assignment candidates
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_db, require_admin
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    AdminRideResponse,
    AssignDriverRequest,
    DriverProfileResponse,
    HealthResponse,
    StatusUpdateRequest,
    admin_ride_response,
    driver_profile_response,
)
from ridehail.domain.entities import Actor
from ridehail.domain.enums import RideStatus
from ridehail.services.rides import RideService

router = APIRouter(prefix="/admin", tags=["admin"])


async def _described(service: RideService, ride) -> AdminRideResponse:
    [view] = await service.describe([ride])
    return admin_ride_response(view)


@router.get(
    "/rides",
    response_model=list[AdminRideResponse],
    summary="List all rides with rider and driver names",
)
@limiter.limit(RATE_LIMIT)
async def list_rides(
    request: Request,
    status: Optional[RideStatus] = None,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    rides = await service.list_all(status)
    return [admin_ride_response(v) for v in await service.describe(rides)]


@router.put(
    "/rides/{ride_id}/assign",
    response_model=AdminRideResponse,
    summary="Assign a driver to a pending ride",
)
@limiter.limit(RATE_LIMIT)
async def assign_driver(
    request: Request,
    ride_id: str,
    body: AssignDriverRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    ride = await service.assign_driver(ride_id, body.driver_id)
    return await _described(service, ride)


@router.put(
    "/rides/{ride_id}/complete",
    response_model=AdminRideResponse,
    summary="Mark an accepted or in-progress ride completed",
)
@limiter.limit(RATE_LIMIT)
async def complete_ride(
    request: Request,
    ride_id: str,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    ride = await service.complete(ride_id)
    return await _described(service, ride)


@router.put(
    "/rides/{ride_id}/decline",
    response_model=AdminRideResponse,
    summary="Cancel a ride on the rider's behalf",
)
@limiter.limit(RATE_LIMIT)
async def decline_ride(
    request: Request,
    ride_id: str,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    ride = await service.cancel(admin, ride_id)
    return await _described(service, ride)


@router.patch(
    "/rides/{ride_id}/status",
    response_model=AdminRideResponse,
    summary="Override a ride's status",
    description=(
        "Jumps forward along pending -> ... -> completed, re-enters the "
        "current state, or cancels. Terminal rides cannot be changed."
    ),
)
@limiter.limit(RATE_LIMIT)
async def override_status(
    request: Request,
    ride_id: str,
    body: StatusUpdateRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    ride = await service.admin_set_status(ride_id, body.status)
    return await _described(service, ride)


@router.get(
    "/rides/{ride_id}/available-drivers",
    response_model=list[DriverProfileResponse],
    summary="Drivers eligible for assignment to this ride",
)
@limiter.limit(RATE_LIMIT)
async def available_drivers(
    request: Request,
    ride_id: str,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = RideService(db)
    profiles = await service.admin_available_drivers(ride_id)
    described = await service.directory.describe(profiles)
    return [driver_profile_response(p, u, v) for p, u, v in described]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
