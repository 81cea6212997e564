"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    SEARCHING = "searching"
    AWAITING_DRIVER_CONFIRMATION = "awaiting_driver_confirmation"
    ACCEPTED = "accepted"
    PICKED_UP = "picked_up"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.SEARCHING, RideStatus.CANCELLED},
    RideStatus.SEARCHING: {
        RideStatus.AWAITING_DRIVER_CONFIRMATION,
        RideStatus.CANCELLED,
    },
    RideStatus.AWAITING_DRIVER_CONFIRMATION: {
        RideStatus.ACCEPTED,
        RideStatus.CANCELLED,
    },
    RideStatus.ACCEPTED: {RideStatus.PICKED_UP, RideStatus.CANCELLED},
    RideStatus.PICKED_UP: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED})

# Forward order used by the administrative override
STATUS_ORDER: tuple[RideStatus, ...] = (
    RideStatus.PENDING,
    RideStatus.SEARCHING,
    RideStatus.AWAITING_DRIVER_CONFIRMATION,
    RideStatus.ACCEPTED,
    RideStatus.PICKED_UP,
    RideStatus.IN_PROGRESS,
    RideStatus.COMPLETED,
)

# Lifecycle timestamp stamped the first time a status is reached
STATUS_TIMESTAMPS: dict[RideStatus, str] = {
    RideStatus.ACCEPTED: "accepted_at",
    RideStatus.PICKED_UP: "picked_up_at",
    RideStatus.IN_PROGRESS: "started_at",
    RideStatus.COMPLETED: "completed_at",
    RideStatus.CANCELLED: "cancelled_at",
}


class RideCategory(str, enum.Enum):
    BICYCLE = "bicycle"
    MOTORCYCLE = "motorcycle"
    CAR = "car"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    ONLINE = "online"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class UserRole(str, enum.Enum):
    USER = "user"
    DRIVER = "driver"
    ADMIN = "admin"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class DriverStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    SUSPENDED = "suspended"


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class VehicleType(str, enum.Enum):
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    VAN = "van"
    MOTORCYCLE = "motorcycle"
    BUS = "bus"
    CAR = "car"
    BICYCLE = "bicycle"
    OTHER = "other"
