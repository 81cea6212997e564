"""
Driver Directory
================

Owns driver profiles and their vehicle link.

* Driver references arriving from clients may be a profile id *or* the
  owning user id; :meth:`DriverDirectory.resolve` normalises both to the
  profile so rides only ever store profile ids.
* Vehicle assignment updates both sides (``profile.vehicle_id`` and
  ``vehicle.status``) in the caller's transaction, with the vehicle row
  locked ``FOR UPDATE`` so two concurrent assignments cannot both succeed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain.enums import (
    DriverStatus,
    RideCategory,
    UserRole,
    VehicleStatus,
)
from ridehail.domain.errors import ConflictError, NotFoundError, ValidationError
from ridehail.domain.matching import (
    admin_assignment_vehicle_type,
    rider_search_vehicle_types,
)
from ridehail.infrastructure.models import DriverProfileModel, UserModel, VehicleModel
from ridehail.infrastructure.repositories import (
    DriverProfileRepository,
    UserRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)

SETTABLE_STATUSES = frozenset(
    {DriverStatus.ACTIVE, DriverStatus.SUSPENDED, DriverStatus.INACTIVE}
)


class DriverDirectory:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.profiles = DriverProfileRepository(session)
        self.users = UserRepository(session)
        self.vehicles = VehicleRepository(session)

    # ── Lookup ────────────────────────────────────────────────────

    async def resolve(self, reference: str) -> DriverProfileModel:
        """Profile for a profile id, falling back to an owning user id."""
        profile = await self.profiles.get_by_id(reference)
        if profile is None:
            profile = await self.profiles.get_by_user_id(reference)
        if profile is None:
            raise NotFoundError("Driver not found")
        return profile

    async def profile_for_user(self, user_id: str) -> Optional[DriverProfileModel]:
        return await self.profiles.get_by_user_id(user_id)

    async def list_profiles(
        self,
        status: DriverStatus | None = None,
        is_verified: bool | None = None,
        without_vehicle: bool = False,
    ) -> list[DriverProfileModel]:
        return await self.profiles.find(
            status=status, is_verified=is_verified, without_vehicle=without_vehicle
        )

    async def describe(
        self, profiles: list[DriverProfileModel]
    ) -> list[tuple[DriverProfileModel, Optional[UserModel], Optional[VehicleModel]]]:
        """Attach owning user and vehicle to each profile (two batch queries)."""
        users = await self.users.get_many({p.user_id for p in profiles})
        vehicles = await self.vehicles.get_many(
            {p.vehicle_id for p in profiles if p.vehicle_id}
        )
        return [
            (p, users.get(p.user_id), vehicles.get(p.vehicle_id) if p.vehicle_id else None)
            for p in profiles
        ]

    # ── Candidate rules ───────────────────────────────────────────

    async def rider_search_candidates(
        self, category: RideCategory
    ) -> list[DriverProfileModel]:
        return await self.profiles.rider_search_candidates(
            rider_search_vehicle_types(category)
        )

    async def admin_assignment_candidates(
        self, category: RideCategory
    ) -> list[DriverProfileModel]:
        return await self.profiles.admin_assignment_candidates(
            admin_assignment_vehicle_type(category)
        )

    # ── Profile management ────────────────────────────────────────

    async def create_profile(
        self,
        *,
        user_id: str,
        license_number: str,
        address_street: str,
        address_city: str,
    ) -> DriverProfileModel:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if UserRole(user.role) != UserRole.DRIVER:
            raise ValidationError("User must have driver role")

        profile = await self.profiles.add(
            DriverProfileModel(
                user_id=user.id,
                license_number=license_number.strip(),
                address_street=address_street,
                address_city=address_city,
                status=DriverStatus.ACTIVE if user.is_active else DriverStatus.INACTIVE,
            )
        )
        logger.info("Driver profile %s created for user %s", profile.id, user.id)
        return profile

    async def set_status(
        self, reference: str, status: DriverStatus
    ) -> DriverProfileModel:
        status = DriverStatus(status)
        if status not in SETTABLE_STATUSES:
            raise ValidationError(
                "Status must be one of: active, suspended, inactive"
            )
        profile = await self.resolve(reference)
        profile.status = status

        user = await self.users.get_by_id(profile.user_id)
        if user is not None:
            user.is_active = status == DriverStatus.ACTIVE
        logger.info("Driver %s status set to %s", profile.id, status.value)
        return profile

    async def verify(
        self, reference: str, notes: str | None = None
    ) -> DriverProfileModel:
        profile = await self.resolve(reference)
        profile.is_verified = True
        profile.verified_at = datetime.now(timezone.utc)
        if notes is not None:
            profile.verification_notes = notes
        logger.info("Driver %s verified", profile.id)
        return profile

    # ── Vehicle link ──────────────────────────────────────────────

    async def assign_vehicle(
        self, reference: str, vehicle_id: str
    ) -> DriverProfileModel:
        profile = await self.resolve(reference)
        if profile.vehicle_id:
            raise ConflictError("Driver already has a vehicle assigned")

        vehicle = await self.vehicles.get_for_update(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        if VehicleStatus(vehicle.status) != VehicleStatus.AVAILABLE:
            raise ConflictError("Vehicle is not available for assignment")

        profile.vehicle_id = vehicle.id
        vehicle.status = VehicleStatus.ASSIGNED
        await self.session.flush()
        logger.info("Vehicle %s assigned to driver %s", vehicle.id, profile.id)
        return profile

    async def unassign_vehicle(self, reference: str) -> DriverProfileModel:
        profile = await self.resolve(reference)
        if not profile.vehicle_id:
            raise ConflictError("Driver does not have a vehicle assigned")

        vehicle = await self.vehicles.get_for_update(profile.vehicle_id)
        if vehicle is not None:
            vehicle.status = VehicleStatus.AVAILABLE
        released = profile.vehicle_id
        profile.vehicle_id = None
        await self.session.flush()
        logger.info("Vehicle %s released from driver %s", released, profile.id)
        return profile
