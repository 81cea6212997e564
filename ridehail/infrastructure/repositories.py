"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Updates happen by mutating loaded models;
the session flushes / commits them at the end of the request.

Unique columns are pre-checked so the caller gets a ``ConflictError`` naming
the offending field; a race that slips past the check still surfaces as a
generic ``ConflictError`` from :func:`flush_or_conflict`.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DriverProfileModel, RideModel, UserModel, VehicleModel
from ridehail.domain.enums import (
    TERMINAL_STATUSES,
    DriverStatus,
    RideStatus,
    VehicleStatus,
    VehicleType,
)
from ridehail.domain.errors import ConflictError
from ridehail.domain.matching import MAX_CANDIDATES


async def flush_or_conflict(session: AsyncSession) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("Record conflicts with an existing record") from exc


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user: UserModel) -> UserModel:
        if await self.get_by_email(user.email):
            raise ConflictError("User with this email already exists")
        if await self.get_by_phone(user.phone):
            raise ConflictError("User with this phone already exists")
        self.session.add(user)
        await flush_or_conflict(self.session)
        return user

    async def get_by_id(self, user_id: str) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.phone == phone)
        )
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: set[str]) -> dict[str, UserModel]:
        if not user_ids:
            return {}
        result = await self.session.execute(
            select(UserModel).where(UserModel.id.in_(user_ids))
        )
        return {u.id: u for u in result.scalars().all()}


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, vehicle: VehicleModel) -> VehicleModel:
        await self.ensure_plate_free(vehicle.license_plate)
        self.session.add(vehicle)
        await flush_or_conflict(self.session)
        return vehicle

    async def ensure_plate_free(
        self, license_plate: str, exclude_id: str | None = None
    ) -> None:
        query = select(VehicleModel.id).where(
            VehicleModel.license_plate == license_plate
        )
        if exclude_id:
            query = query.where(VehicleModel.id != exclude_id)
        result = await self.session.execute(query)
        if result.first() is not None:
            raise ConflictError("Vehicle with this license plate already exists")

    async def get_by_id(self, vehicle_id: str) -> Optional[VehicleModel]:
        return await self.session.get(VehicleModel, vehicle_id)

    async def get_for_update(self, vehicle_id: str) -> Optional[VehicleModel]:
        """SELECT ... FOR UPDATE so two assignments cannot both see it free."""
        result = await self.session.execute(
            select(VehicleModel)
            .where(VehicleModel.id == vehicle_id)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        status: VehicleStatus | None = None,
        vehicle_type: VehicleType | None = None,
    ) -> list[VehicleModel]:
        query = select(VehicleModel).order_by(VehicleModel.created_at.desc())
        if status is not None:
            query = query.where(VehicleModel.status == status)
        if vehicle_type is not None:
            query = query.where(VehicleModel.vehicle_type == vehicle_type)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_many(self, vehicle_ids: set[str]) -> dict[str, VehicleModel]:
        if not vehicle_ids:
            return {}
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.id.in_(vehicle_ids))
        )
        return {v.id: v for v in result.scalars().all()}

    async def delete(self, vehicle: VehicleModel) -> None:
        await self.session.delete(vehicle)
        await self.session.flush()


class DriverProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, profile: DriverProfileModel) -> DriverProfileModel:
        if await self.get_by_user_id(profile.user_id):
            raise ConflictError("Driver profile already exists for this user")
        if await self.get_by_license(profile.license_number):
            raise ConflictError("Driver with this license number already exists")
        self.session.add(profile)
        await flush_or_conflict(self.session)
        return profile

    async def get_by_id(self, profile_id: str) -> Optional[DriverProfileModel]:
        return await self.session.get(DriverProfileModel, profile_id)

    async def get_by_user_id(self, user_id: str) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel).where(DriverProfileModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_license(
        self, license_number: str
    ) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel).where(
                DriverProfileModel.license_number == license_number
            )
        )
        return result.scalar_one_or_none()

    async def get_by_vehicle(self, vehicle_id: str) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel).where(
                DriverProfileModel.vehicle_id == vehicle_id
            )
        )
        return result.scalars().first()

    async def find(
        self,
        status: DriverStatus | None = None,
        is_verified: bool | None = None,
        without_vehicle: bool = False,
    ) -> list[DriverProfileModel]:
        query = select(DriverProfileModel).order_by(
            DriverProfileModel.created_at.desc()
        )
        if status is not None:
            query = query.where(DriverProfileModel.status == status)
        if is_verified is not None:
            query = query.where(DriverProfileModel.is_verified.is_(is_verified))
        if without_vehicle:
            query = query.where(DriverProfileModel.vehicle_id.is_(None))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def rider_search_candidates(
        self, vehicle_types: Optional[frozenset[VehicleType]]
    ) -> list[DriverProfileModel]:
        """Active, verified profiles; ``None`` types means vehicle-less only."""
        query = (
            select(DriverProfileModel)
            .where(
                DriverProfileModel.status == DriverStatus.ACTIVE,
                DriverProfileModel.is_verified.is_(True),
            )
            .order_by(DriverProfileModel.created_at, DriverProfileModel.id)
            .limit(MAX_CANDIDATES)
        )
        if vehicle_types is None:
            query = query.where(DriverProfileModel.vehicle_id.is_(None))
        else:
            query = query.join(
                VehicleModel, VehicleModel.id == DriverProfileModel.vehicle_id
            ).where(VehicleModel.vehicle_type.in_(list(vehicle_types)))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def admin_assignment_candidates(
        self, vehicle_type: VehicleType
    ) -> list[DriverProfileModel]:
        """Profiles of active users holding a vehicle of exactly this type."""
        result = await self.session.execute(
            select(DriverProfileModel)
            .join(UserModel, UserModel.id == DriverProfileModel.user_id)
            .join(VehicleModel, VehicleModel.id == DriverProfileModel.vehicle_id)
            .where(
                UserModel.is_active.is_(True),
                VehicleModel.vehicle_type == vehicle_type,
            )
            .order_by(DriverProfileModel.created_at, DriverProfileModel.id)
            .limit(MAX_CANDIDATES)
        )
        return list(result.scalars().all())

    async def get_many(self, profile_ids: set[str]) -> dict[str, DriverProfileModel]:
        if not profile_ids:
            return {}
        result = await self.session.execute(
            select(DriverProfileModel).where(DriverProfileModel.id.in_(profile_ids))
        )
        return {p.id: p for p in result.scalars().all()}


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: str) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def list_for_rider(self, rider_id: str) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.rider_id == rider_id)
            .order_by(RideModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_driver(self, profile_id: str) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.driver_id == profile_id)
            .order_by(RideModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_active_for_rider(self, rider_id: str) -> Optional[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(
                RideModel.rider_id == rider_id,
                RideModel.status.not_in(list(TERMINAL_STATUSES)),
            )
            .order_by(RideModel.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_all(self, status: RideStatus | None = None) -> list[RideModel]:
        query = select(RideModel).order_by(RideModel.created_at.desc())
        if status is not None:
            query = query.where(RideModel.status == status)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def rider_ratings_for_driver(self, profile_id: str) -> list[int]:
        result = await self.session.execute(
            select(RideModel.rider_rating).where(
                RideModel.driver_id == profile_id,
                RideModel.rider_rating.is_not(None),
            )
        )
        return list(result.scalars().all())
