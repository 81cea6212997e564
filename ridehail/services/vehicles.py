"""Vehicle inventory management."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain.enums import VehicleStatus, VehicleType
from ridehail.domain.errors import ConflictError, NotFoundError
from ridehail.infrastructure.models import VehicleModel
from ridehail.infrastructure.repositories import (
    DriverProfileRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)


class VehicleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.vehicles = VehicleRepository(session)
        self.profiles = DriverProfileRepository(session)

    async def get(self, vehicle_id: str) -> VehicleModel:
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle

    async def find(
        self,
        status: VehicleStatus | None = None,
        vehicle_type: VehicleType | None = None,
    ) -> list[VehicleModel]:
        return await self.vehicles.find(status=status, vehicle_type=vehicle_type)

    async def create(self, **fields: Any) -> VehicleModel:
        fields["license_plate"] = fields["license_plate"].strip().upper()
        vehicle = await self.vehicles.add(VehicleModel(**fields))
        logger.info("Vehicle %s (%s) created", vehicle.id, vehicle.license_plate)
        return vehicle

    async def update(self, vehicle_id: str, **changes: Any) -> VehicleModel:
        vehicle = await self.get(vehicle_id)
        plate = changes.get("license_plate")
        if plate is not None:
            changes["license_plate"] = plate.strip().upper()
            await self.vehicles.ensure_plate_free(
                changes["license_plate"], exclude_id=vehicle.id
            )
        if "status" in changes:
            holder = await self.profiles.get_by_vehicle(vehicle.id)
            if holder is not None and changes["status"] != VehicleStatus.ASSIGNED:
                raise ConflictError(
                    "Vehicle is assigned to a driver; unassign it first"
                )
            if holder is None and changes["status"] == VehicleStatus.ASSIGNED:
                raise ConflictError(
                    "Assign the vehicle to a driver instead of setting its status"
                )
        for key, value in changes.items():
            setattr(vehicle, key, value)
        await self.session.flush()
        return vehicle

    async def delete(self, vehicle_id: str) -> None:
        vehicle = await self.get(vehicle_id)
        holder = await self.profiles.get_by_vehicle(vehicle.id)
        if VehicleStatus(vehicle.status) == VehicleStatus.ASSIGNED or holder:
            raise ConflictError("Cannot delete vehicle that is assigned to a driver")
        await self.vehicles.delete(vehicle)
        logger.info("Vehicle %s deleted", vehicle_id)
