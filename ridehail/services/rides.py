"""
Ride service -- orchestrates one ride operation per request.

Loads the ride, delegates the rule to :class:`RideLifecycle`, applies the
cross-entity side effects (driver trip counter, rating aggregate) and lets
the request's unit of work commit everything together.

Concurrency
-----------
Two requests touching the same ride are not serialised: each reads, checks
and writes in its own transaction and the last commit wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.config import settings
from ridehail.domain.entities import Actor, Location
from ridehail.domain.enums import (
    PaymentMethod,
    PaymentStatus,
    RideCategory,
    RideStatus,
    UserRole,
)
from ridehail.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ridehail.domain.lifecycle import RideLifecycle
from ridehail.domain.pricing import FareEstimator, FareQuote
from ridehail.domain.rating import average_rating
from ridehail.infrastructure.models import DriverProfileModel, RideModel
from ridehail.infrastructure.repositories import RideRepository, UserRepository
from ridehail.services.drivers import DriverDirectory

logger = logging.getLogger(__name__)


@dataclass
class RideView:
    """A ride plus the display names the listings show next to it."""

    ride: RideModel
    rider_name: Optional[str] = None
    driver_name: Optional[str] = None


class RideService:
    def __init__(
        self,
        session: AsyncSession,
        lifecycle: RideLifecycle | None = None,
        estimator: FareEstimator | None = None,
    ):
        self.session = session
        self.rides = RideRepository(session)
        self.users = UserRepository(session)
        self.directory = DriverDirectory(session)
        self.lifecycle = lifecycle or RideLifecycle()
        self.estimator = estimator or FareEstimator(currency=settings.currency)

    # ── Estimate & order ──────────────────────────────────────────

    def estimate(
        self, pickup: Location, destination: Location, category: RideCategory
    ) -> FareQuote:
        return self.estimator.estimate(pickup, destination, category)

    async def create_order(
        self,
        actor: Actor,
        *,
        category: RideCategory,
        pickup_address: str,
        pickup: Location,
        destination_address: str,
        destination: Location,
        payment_method: PaymentMethod,
        phone_number: str,
        distance_km: float,
        estimated_duration_minutes: int,
        total_fare: float,
        base_fare: float | None = None,
        distance_fare: float | None = None,
        instructions: str | None = None,
    ) -> RideModel:
        """Persist a ``pending`` ride with the client's estimate as given."""
        tariff = self.estimator.tariff_for(category)

        ride = await self.rides.add(
            RideModel(
                rider_id=actor.user_id,
                status=RideStatus.PENDING,
                category=RideCategory(category),
                pickup_address=pickup_address,
                pickup_lat=pickup.latitude,
                pickup_lng=pickup.longitude,
                destination_address=destination_address,
                destination_lat=destination.latitude,
                destination_lng=destination.longitude,
                distance_km=distance_km,
                estimated_duration_minutes=estimated_duration_minutes,
                base_fare=tariff.base_fare if base_fare is None else base_fare,
                distance_fare=0 if distance_fare is None else distance_fare,
                total_fare=total_fare,
                payment_method=PaymentMethod(payment_method),
                payment_status=PaymentStatus.PENDING,
                phone_number=phone_number,
                instructions=instructions,
            )
        )
        logger.info(
            "Ride %s ordered by %s (%s, %.2f km, fare %s)",
            ride.id, actor.user_id, ride.category.value, distance_km, total_fare,
        )
        return ride

    # ── Reads ─────────────────────────────────────────────────────

    async def get(self, ride_id: str) -> RideModel:
        ride = await self.rides.get_by_id(ride_id)
        if ride is None:
            raise NotFoundError("Ride not found")
        return ride

    async def get_visible(self, actor: Actor, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        if not self.lifecycle.can_view(actor, ride):
            raise AuthorizationError("Not authorized to view this ride")
        return ride

    async def rider_history(self, actor: Actor) -> list[RideModel]:
        return await self.rides.list_for_rider(actor.user_id)

    async def driver_history(self, actor: Actor) -> list[RideModel]:
        profile = await self._own_profile(actor)
        return await self.rides.list_for_driver(profile.id)

    async def active_ride(self, actor: Actor) -> Optional[RideModel]:
        return await self.rides.get_active_for_rider(actor.user_id)

    async def list_all(self, status: RideStatus | None = None) -> list[RideModel]:
        return await self.rides.list_all(status)

    async def describe(self, rides: list[RideModel]) -> list[RideView]:
        """Attach rider and driver names using batch lookups."""
        profiles = await self.directory.profiles.get_many(
            {r.driver_id for r in rides if r.driver_id}
        )
        users = await self.users.get_many(
            {r.rider_id for r in rides} | {p.user_id for p in profiles.values()}
        )

        views = []
        for ride in rides:
            rider = users.get(ride.rider_id)
            profile = profiles.get(ride.driver_id) if ride.driver_id else None
            driver = users.get(profile.user_id) if profile else None
            views.append(
                RideView(
                    ride=ride,
                    rider_name=rider.full_name if rider else None,
                    driver_name=driver.full_name if driver else None,
                )
            )
        return views

    # ── Rider / driver transitions ────────────────────────────────

    async def request_search(self, actor: Actor, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        self.lifecycle.request_search(actor, ride)
        logger.info("Ride %s is now searching for a driver", ride.id)
        return ride

    async def cancel(self, actor: Actor, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        previous = RideStatus(ride.status)
        self.lifecycle.cancel(actor, ride)
        logger.info(
            "Ride %s cancelled by %s (%s) from %s",
            ride.id, actor.user_id, actor.role.value, previous.value,
        )
        return ride

    async def accept(self, actor: Actor, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        self.lifecycle.accept(actor, ride)
        logger.info("Ride %s accepted by driver %s", ride.id, ride.driver_id)
        return ride

    async def decline(self, actor: Actor, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        self.lifecycle.decline(actor, ride)
        logger.info("Ride %s declined by driver %s", ride.id, ride.driver_id)
        return ride

    async def update_status(
        self, actor: Actor, ride_id: str, target: RideStatus
    ) -> RideModel:
        ride = await self.get(ride_id)
        previous = RideStatus(ride.status)
        self.lifecycle.transition(actor, ride, target)
        await self._after_transition(ride, previous)
        logger.info(
            "Ride %s moved %s -> %s by %s",
            ride.id, previous.value, RideStatus(target).value, actor.user_id,
        )
        return ride

    async def available_drivers_for_rider(
        self, actor: Actor, ride_id: str
    ) -> list[DriverProfileModel]:
        ride = await self.get(ride_id)
        if ride.rider_id != actor.user_id:
            raise AuthorizationError("Not authorized to access this ride")
        if RideStatus(ride.status) != RideStatus.SEARCHING:
            raise ConflictError("Ride is not searching for a driver")
        return await self.directory.rider_search_candidates(ride.category)

    async def rate(
        self,
        actor: Actor,
        ride_id: str,
        rating: int,
        feedback: str | None = None,
    ) -> RideModel:
        ride = await self.get(ride_id)
        self.lifecycle.record_rating(actor, ride, rating, feedback)

        if ride.driver_id:
            profile = await self.directory.profiles.get_by_id(ride.driver_id)
            if profile is not None:
                await self.session.flush()
                ratings = await self.rides.rider_ratings_for_driver(profile.id)
                profile.driver_rating = average_rating(ratings)
                logger.info(
                    "Driver %s rating now %s over %d rides",
                    profile.id, profile.driver_rating, len(ratings),
                )
        return ride

    # ── Administrator operations ──────────────────────────────────

    async def admin_available_drivers(
        self, ride_id: str
    ) -> list[DriverProfileModel]:
        ride = await self.get(ride_id)
        return await self.directory.admin_assignment_candidates(ride.category)

    async def assign_driver(self, ride_id: str, driver_reference: str) -> RideModel:
        ride = await self.get(ride_id)
        profile = await self.directory.resolve(driver_reference)
        user = await self.users.get_by_id(profile.user_id)
        if user is None or UserRole(user.role) != UserRole.DRIVER:
            raise ValidationError("Selected user is not a driver")

        self.lifecycle.assign_driver(ride, profile.id)
        logger.info("Driver %s assigned to ride %s", profile.id, ride.id)
        return ride

    async def complete(self, ride_id: str) -> RideModel:
        ride = await self.get(ride_id)
        previous = RideStatus(ride.status)
        self.lifecycle.complete(ride)
        await self._after_transition(ride, previous)
        logger.info("Ride %s completed by administrator", ride.id)
        return ride

    async def admin_set_status(self, ride_id: str, target: RideStatus) -> RideModel:
        ride = await self.get(ride_id)
        previous = RideStatus(ride.status)
        self.lifecycle.override(ride, target)
        await self._after_transition(ride, previous)
        logger.info(
            "Ride %s status overridden %s -> %s",
            ride.id, previous.value, RideStatus(target).value,
        )
        return ride

    # ── Internals ─────────────────────────────────────────────────

    async def _own_profile(self, actor: Actor) -> DriverProfileModel:
        profile = await self.directory.profile_for_user(actor.user_id)
        if profile is None:
            raise NotFoundError("Driver profile not found")
        return profile

    async def _after_transition(self, ride: RideModel, previous: RideStatus) -> None:
        if (
            RideStatus(ride.status) == RideStatus.COMPLETED
            and previous != RideStatus.COMPLETED
            and ride.driver_id
        ):
            profile = await self.directory.profiles.get_by_id(ride.driver_id)
            if profile is not None:
                profile.total_trips = (profile.total_trips or 0) + 1
