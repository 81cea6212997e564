"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``            -- riders, drivers and administrators
* ``driver_profiles``  -- one per driver-role user; owns the vehicle link
* ``vehicles``         -- fleet inventory
* ``rides``            -- ride requests and their lifecycle

Identifiers are UUID strings so a driver reference can be either a profile
id or a user id without the two spaces ever colliding.

Indexes
-------
* **Unique** on ``users.email``, ``users.phone``,
  ``driver_profiles.user_id``, ``driver_profiles.license_number``,
  ``vehicles.license_plate``.
* **B-Tree** on ``rides.status``, ``rides.rider_id``, ``rides.driver_id``
  for the history / active-ride / admin listings.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from .database import Base
from ridehail.domain.enums import (
    DriverStatus,
    Gender,
    PaymentMethod,
    PaymentStatus,
    RideCategory,
    RideStatus,
    UserRole,
    VehicleStatus,
    VehicleType,
)


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(cls):
    # Store the lower-case values ("awaiting_driver_confirmation"), not names
    return Enum(
        cls,
        values_callable=lambda e: [m.value for m in e],
        native_enum=False,
        length=32,
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    full_name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    gender = Column(_enum(Gender), nullable=True)
    role = Column(_enum(UserRole), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=_uuid)
    make = Column(String(60), nullable=False)
    model = Column(String(60), nullable=False)
    year = Column(Integer, nullable=False)
    license_plate = Column(String(20), unique=True, nullable=False)
    color = Column(String(30), nullable=False)
    vehicle_type = Column(_enum(VehicleType), nullable=False)
    status = Column(
        _enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False
    )

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("idx_vehicles_status", "status"),)


class DriverProfileModel(Base):
    __tablename__ = "driver_profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    license_number = Column(String(60), unique=True, nullable=False)
    address_street = Column(String(255), nullable=False)
    address_city = Column(String(120), nullable=False)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=True)
    status = Column(_enum(DriverStatus), default=DriverStatus.ACTIVE, nullable=False)
    total_trips = Column(Integer, default=0, nullable=False)
    driver_rating = Column(Float, nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verification_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_driver_profiles_status", "status"),
        Index("idx_driver_profiles_vehicle", "vehicle_id"),
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(String(36), primary_key=True, default=_uuid)
    rider_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    driver_id = Column(String(36), ForeignKey("driver_profiles.id"), nullable=True)

    status = Column(_enum(RideStatus), default=RideStatus.PENDING, nullable=False)
    category = Column(_enum(RideCategory), nullable=False)

    pickup_address = Column(String(255), nullable=False)
    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    destination_address = Column(String(255), nullable=False)
    destination_lat = Column(Float, nullable=False)
    destination_lng = Column(Float, nullable=False)

    # Client-supplied estimate, stored verbatim
    distance_km = Column(Float, nullable=False)
    estimated_duration_minutes = Column(Integer, nullable=False)
    base_fare = Column(Float, nullable=False)
    distance_fare = Column(Float, default=0.0, nullable=False)
    total_fare = Column(Float, nullable=False)

    payment_method = Column(_enum(PaymentMethod), nullable=False)
    payment_status = Column(
        _enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    phone_number = Column(String(32), nullable=False)
    instructions = Column(Text, nullable=True)

    rider_rating = Column(Integer, nullable=True)
    rider_feedback = Column(Text, nullable=True)
    driver_rating = Column(Integer, nullable=True)
    driver_feedback = Column(Text, nullable=True)

    accepted_at = Column(DateTime(timezone=True), nullable=True)
    picked_up_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_rides_status", "status"),
        Index("idx_rides_rider", "rider_id"),
        Index("idx_rides_driver", "driver_id"),
    )
