"""
Driver endpoints
================

POST  /api/v1/admin/drivers                          -- create a driver profile
GET   /api/v1/admin/drivers                          -- list profiles
GET   /api/v1/admin/drivers/without-vehicles         -- profiles with no vehicle
GET   /api/v1/admin/drivers/{driver_id}              -- one profile
PATCH /api/v1/admin/drivers/{driver_id}/status       -- active / suspended / inactive
PATCH /api/v1/admin/drivers/{driver_id}/verify       -- mark verified
POST  /api/v1/admin/drivers/{driver_id}/assign-vehicle
POST  /api/v1/admin/drivers/{driver_id}/unassign-vehicle
GET   /api/v1/driver/profile                         -- the calling driver

``driver_id`` may be a profile id or the owning user id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_current_actor, get_db, require_admin, require_driver
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    AssignVehicleRequest,
    DriverProfileCreateRequest,
    DriverProfileResponse,
    DriverStatusRequest,
    DriverVerifyRequest,
    driver_profile_response,
)
from ridehail.domain.entities import Actor
from ridehail.domain.enums import DriverStatus
from ridehail.domain.errors import AuthorizationError, NotFoundError
from ridehail.services.drivers import DriverDirectory

router = APIRouter(tags=["drivers"])


async def _respond(directory: DriverDirectory, profile) -> DriverProfileResponse:
    [(p, user, vehicle)] = await directory.describe([profile])
    return driver_profile_response(p, user, vehicle)


@router.post(
    "/admin/drivers",
    status_code=201,
    response_model=DriverProfileResponse,
    summary="Create the driver profile for a driver-role user",
)
@limiter.limit(RATE_LIMIT)
async def create_driver(
    request: Request,
    body: DriverProfileCreateRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.create_profile(
        user_id=body.user_id,
        license_number=body.license_number,
        address_street=body.address_street,
        address_city=body.address_city,
    )
    return await _respond(directory, profile)


@router.get(
    "/admin/drivers",
    response_model=list[DriverProfileResponse],
    summary="List driver profiles",
)
@limiter.limit(RATE_LIMIT)
async def list_drivers(
    request: Request,
    status: Optional[DriverStatus] = None,
    is_verified: Optional[bool] = None,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profiles = await directory.list_profiles(status=status, is_verified=is_verified)
    return [driver_profile_response(p, u, v) for p, u, v in await directory.describe(profiles)]


@router.get(
    "/admin/drivers/without-vehicles",
    response_model=list[DriverProfileResponse],
    summary="Driver profiles that hold no vehicle",
)
@limiter.limit(RATE_LIMIT)
async def drivers_without_vehicles(
    request: Request,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profiles = await directory.list_profiles(without_vehicle=True)
    return [driver_profile_response(p, u, v) for p, u, v in await directory.describe(profiles)]


@router.get(
    "/admin/drivers/{driver_id}",
    response_model=DriverProfileResponse,
    summary="Get one driver profile",
)
@limiter.limit(RATE_LIMIT)
async def get_driver(
    request: Request,
    driver_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.resolve(driver_id)
    if not actor.is_admin and profile.user_id != actor.user_id:
        raise AuthorizationError("Not authorized to view this driver")
    return await _respond(directory, profile)


@router.patch(
    "/admin/drivers/{driver_id}/status",
    response_model=DriverProfileResponse,
    summary="Activate, suspend or deactivate a driver",
)
@limiter.limit(RATE_LIMIT)
async def set_driver_status(
    request: Request,
    driver_id: str,
    body: DriverStatusRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.set_status(driver_id, body.status)
    return await _respond(directory, profile)


@router.patch(
    "/admin/drivers/{driver_id}/verify",
    response_model=DriverProfileResponse,
    summary="Mark a driver as verified",
)
@limiter.limit(RATE_LIMIT)
async def verify_driver(
    request: Request,
    driver_id: str,
    body: Optional[DriverVerifyRequest] = None,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.verify(driver_id, body.notes if body else None)
    return await _respond(directory, profile)


@router.post(
    "/admin/drivers/{driver_id}/assign-vehicle",
    response_model=DriverProfileResponse,
    summary="Give an available vehicle to a driver",
)
@limiter.limit(RATE_LIMIT)
async def assign_vehicle(
    request: Request,
    driver_id: str,
    body: AssignVehicleRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.assign_vehicle(driver_id, body.vehicle_id)
    return await _respond(directory, profile)


@router.post(
    "/admin/drivers/{driver_id}/unassign-vehicle",
    response_model=DriverProfileResponse,
    summary="Take the vehicle back from a driver",
)
@limiter.limit(RATE_LIMIT)
async def unassign_vehicle(
    request: Request,
    driver_id: str,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.unassign_vehicle(driver_id)
    return await _respond(directory, profile)


@router.get(
    "/driver/profile",
    response_model=DriverProfileResponse,
    summary="The calling driver's profile and vehicle",
)
@limiter.limit(RATE_LIMIT)
async def my_profile(
    request: Request,
    actor: Actor = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    directory = DriverDirectory(db)
    profile = await directory.profile_for_user(actor.user_id)
    if profile is None:
        raise NotFoundError("Driver profile not found")
    return await _respond(directory, profile)
