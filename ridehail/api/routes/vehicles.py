"""
Vehicle endpoints (administrators only)
=======================================

POST   /api/v1/admin/vehicles              -- register a vehicle
GET    /api/v1/admin/vehicles              -- list, optionally filtered
GET    /api/v1/admin/vehicles/available    -- vehicles free for assignment
GET    /api/v1/admin/vehicles/{vehicle_id}
PUT    /api/v1/admin/vehicles/{vehicle_id}
DELETE /api/v1/admin/vehicles/{vehicle_id} -- refused while assigned
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_db, require_admin
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    VehicleCreateRequest,
    VehicleResponse,
    VehicleUpdateRequest,
)
from ridehail.domain.enums import VehicleStatus, VehicleType
from ridehail.services.vehicles import VehicleService

router = APIRouter(
    prefix="/admin/vehicles",
    tags=["vehicles"],
    dependencies=[Depends(require_admin)],
)


@router.post("", status_code=201, response_model=VehicleResponse, summary="Register a vehicle")
@limiter.limit(RATE_LIMIT)
async def create_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    return await VehicleService(db).create(**body.model_dump())


@router.get("", response_model=list[VehicleResponse], summary="List vehicles")
@limiter.limit(RATE_LIMIT)
async def list_vehicles(
    request: Request,
    status: Optional[VehicleStatus] = None,
    vehicle_type: Optional[VehicleType] = None,
    db: AsyncSession = Depends(get_db),
):
    return await VehicleService(db).find(status=status, vehicle_type=vehicle_type)


@router.get(
    "/available",
    response_model=list[VehicleResponse],
    summary="Vehicles not assigned to any driver",
)
@limiter.limit(RATE_LIMIT)
async def available_vehicles(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    return await VehicleService(db).find(status=VehicleStatus.AVAILABLE)


@router.get("/{vehicle_id}", response_model=VehicleResponse, summary="Get a vehicle")
@limiter.limit(RATE_LIMIT)
async def get_vehicle(
    request: Request,
    vehicle_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await VehicleService(db).get(vehicle_id)


@router.put("/{vehicle_id}", response_model=VehicleResponse, summary="Update a vehicle")
@limiter.limit(RATE_LIMIT)
async def update_vehicle(
    request: Request,
    vehicle_id: str,
    body: VehicleUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    return await VehicleService(db).update(vehicle_id, **changes)


@router.delete("/{vehicle_id}", status_code=204, summary="Delete a vehicle")
@limiter.limit(RATE_LIMIT)
async def delete_vehicle(
    request: Request,
    vehicle_id: str,
    db: AsyncSession = Depends(get_db),
):
    await VehicleService(db).delete(vehicle_id)
    return Response(status_code=204)
