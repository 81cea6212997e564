"""
Domain entities and value objects.

``Ride`` mirrors the persisted ride row closely enough that the lifecycle
rules in :mod:`ridehail.domain.lifecycle` work on either the dataclass or
the ORM model; they only touch attributes, never the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import PaymentMethod, PaymentStatus, RideCategory, RideStatus, UserRole


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Actor:
    """The authenticated caller: a user id, its role and, for drivers,
    the id of the driver profile they own."""

    user_id: str
    role: UserRole
    driver_profile_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Ride:
    id: Optional[str] = None
    rider_id: str = ""
    driver_id: Optional[str] = None
    status: RideStatus = RideStatus.PENDING
    category: RideCategory = RideCategory.CAR
    pickup: Location = field(default_factory=lambda: Location(0, 0))
    destination: Location = field(default_factory=lambda: Location(0, 0))
    distance_km: float = 0.0
    estimated_duration_minutes: int = 0
    base_fare: float = 0.0
    distance_fare: float = 0.0
    total_fare: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING
    rider_rating: Optional[int] = None
    rider_feedback: Optional[str] = None
    driver_rating: Optional[int] = None
    driver_feedback: Optional[str] = None
    accepted_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
