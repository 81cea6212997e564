"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

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


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: str = Field(..., min_length=5, max_length=32)
    password: str = Field(..., min_length=6, max_length=128)
    gender: Optional[Gender] = None
    role: UserRole = UserRole.USER

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("role")
    @classmethod
    def no_self_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Administrators cannot self-register")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class EstimateRequest(BaseModel):
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    destination_lat: float = Field(..., ge=-90, le=90)
    destination_lng: float = Field(..., ge=-180, le=180)
    category: RideCategory


class RideOrderRequest(BaseModel):
    category: RideCategory
    pickup_address: str = Field(..., min_length=1, max_length=255)
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    destination_address: str = Field(..., min_length=1, max_length=255)
    destination_lat: float = Field(..., ge=-90, le=90)
    destination_lng: float = Field(..., ge=-180, le=180)
    payment_method: PaymentMethod
    phone_number: str = Field(..., min_length=5, max_length=32)
    instructions: Optional[str] = Field(None, max_length=500)
    distance_km: float = Field(..., gt=0)
    estimated_duration_minutes: int = Field(..., gt=0)
    base_fare: Optional[float] = Field(None, ge=0)
    distance_fare: Optional[float] = Field(None, ge=0)
    total_fare: float = Field(..., gt=0)


class StatusUpdateRequest(BaseModel):
    status: RideStatus


class AssignDriverRequest(BaseModel):
    driver_id: str = Field(
        ...,
        description="Driver profile id or the id of the driver's user account.",
    )


class RateRideRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=1000)


class DriverProfileCreateRequest(BaseModel):
    user_id: str
    license_number: str = Field(..., min_length=1, max_length=60)
    address_street: str = Field(..., min_length=1, max_length=255)
    address_city: str = Field(..., min_length=1, max_length=120)


class DriverStatusRequest(BaseModel):
    status: DriverStatus


class DriverVerifyRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class AssignVehicleRequest(BaseModel):
    vehicle_id: str


class VehicleCreateRequest(BaseModel):
    make: str = Field(..., min_length=1, max_length=60)
    model: str = Field(..., min_length=1, max_length=60)
    year: int = Field(..., ge=1950, le=2100)
    license_plate: str = Field(..., min_length=1, max_length=20)
    color: str = Field(..., min_length=1, max_length=30)
    vehicle_type: VehicleType


class VehicleUpdateRequest(BaseModel):
    make: Optional[str] = Field(None, min_length=1, max_length=60)
    model: Optional[str] = Field(None, min_length=1, max_length=60)
    year: Optional[int] = Field(None, ge=1950, le=2100)
    license_plate: Optional[str] = Field(None, min_length=1, max_length=20)
    color: Optional[str] = Field(None, min_length=1, max_length=30)
    vehicle_type: Optional[VehicleType] = None
    status: Optional[VehicleStatus] = None


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: str
    full_name: str
    email: str
    phone: str
    gender: Optional[Gender] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class EstimateResponse(BaseModel):
    category: RideCategory
    distance_km: float
    duration_minutes: int
    min_duration_minutes: int
    max_duration_minutes: int
    base_fare: int
    distance_fare: int
    time_fare: int
    subtotal: int
    service_fee: int
    total_fare: int
    per_km_rate: int
    currency: str

    model_config = {"from_attributes": True}


class RideResponse(BaseModel):
    id: str
    rider_id: str
    driver_id: Optional[str] = None
    status: RideStatus
    category: RideCategory
    pickup_address: str
    pickup_lat: float
    pickup_lng: float
    destination_address: str
    destination_lat: float
    destination_lng: float
    distance_km: float
    estimated_duration_minutes: int
    base_fare: float
    distance_fare: float
    total_fare: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    phone_number: str
    instructions: Optional[str] = None
    rider_rating: Optional[int] = None
    rider_feedback: Optional[str] = None
    driver_rating: Optional[int] = None
    driver_feedback: Optional[str] = None
    accepted_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AdminRideResponse(RideResponse):
    rider_name: Optional[str] = None
    driver_name: Optional[str] = None


class VehicleResponse(BaseModel):
    id: str
    make: str
    model: str
    year: int
    license_plate: str
    color: str
    vehicle_type: VehicleType
    status: VehicleStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DriverProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: str
    address_street: str
    address_city: str
    status: DriverStatus
    is_verified: bool
    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None
    total_trips: int
    driver_rating: Optional[float] = None
    vehicle: Optional[VehicleResponse] = None
    created_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str = "ok"


# ── Builders ──────────────────────────────────────────────────────────


def driver_profile_response(profile, user=None, vehicle=None) -> DriverProfileResponse:
    return DriverProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        full_name=user.full_name if user else None,
        email=user.email if user else None,
        phone=user.phone if user else None,
        license_number=profile.license_number,
        address_street=profile.address_street,
        address_city=profile.address_city,
        status=profile.status,
        is_verified=profile.is_verified,
        verified_at=profile.verified_at,
        verification_notes=profile.verification_notes,
        total_trips=profile.total_trips,
        driver_rating=profile.driver_rating,
        vehicle=VehicleResponse.model_validate(vehicle) if vehicle else None,
        created_at=profile.created_at,
    )


def admin_ride_response(view) -> AdminRideResponse:
    return AdminRideResponse(
        **RideResponse.model_validate(view.ride).model_dump(),
        rider_name=view.rider_name,
        driver_name=view.driver_name,
    )
