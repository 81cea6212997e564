"""Initial schema: users, vehicles, driver profiles and rides.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _enum(*values: str, name: str) -> sa.Enum:
    # Stored as VARCHAR + CHECK, matching native_enum=False on the models
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("full_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone", sa.String(32), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("gender", _enum("male", "female", "other", name="gender")),
        sa.Column(
            "role",
            _enum("user", "driver", "admin", name="userrole"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean, nullable=False),
        *_timestamps(),
    )

    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("make", sa.String(60), nullable=False),
        sa.Column("model", sa.String(60), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("license_plate", sa.String(20), unique=True, nullable=False),
        sa.Column("color", sa.String(30), nullable=False),
        sa.Column(
            "vehicle_type",
            _enum(
                "sedan", "suv", "truck", "van", "motorcycle", "bus",
                "car", "bicycle", "other",
                name="vehicletype",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            _enum("available", "assigned", "maintenance", "inactive", name="vehiclestatus"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("idx_vehicles_status", "vehicles", ["status"])

    # ── driver_profiles ───────────────────────────────────────────────
    op.create_table(
        "driver_profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id"),
            unique=True,
            nullable=False,
        ),
        sa.Column("license_number", sa.String(60), unique=True, nullable=False),
        sa.Column("address_street", sa.String(255), nullable=False),
        sa.Column("address_city", sa.String(120), nullable=False),
        sa.Column("vehicle_id", sa.String(36), sa.ForeignKey("vehicles.id")),
        sa.Column(
            "status",
            _enum("active", "inactive", "pending", "suspended", name="driverstatus"),
            nullable=False,
        ),
        sa.Column("total_trips", sa.Integer, nullable=False),
        sa.Column("driver_rating", sa.Float),
        sa.Column("is_verified", sa.Boolean, nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True)),
        sa.Column("verification_notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_driver_profiles_status", "driver_profiles", ["status"])
    op.create_index("idx_driver_profiles_vehicle", "driver_profiles", ["vehicle_id"])

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("rider_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("driver_id", sa.String(36), sa.ForeignKey("driver_profiles.id")),
        sa.Column(
            "status",
            _enum(
                "pending", "searching", "awaiting_driver_confirmation",
                "accepted", "picked_up", "in_progress", "completed", "cancelled",
                name="ridestatus",
            ),
            nullable=False,
        ),
        sa.Column(
            "category",
            _enum("bicycle", "motorcycle", "car", name="ridecategory"),
            nullable=False,
        ),
        sa.Column("pickup_address", sa.String(255), nullable=False),
        sa.Column("pickup_lat", sa.Float, nullable=False),
        sa.Column("pickup_lng", sa.Float, nullable=False),
        sa.Column("destination_address", sa.String(255), nullable=False),
        sa.Column("destination_lat", sa.Float, nullable=False),
        sa.Column("destination_lng", sa.Float, nullable=False),
        sa.Column("distance_km", sa.Float, nullable=False),
        sa.Column("estimated_duration_minutes", sa.Integer, nullable=False),
        sa.Column("base_fare", sa.Float, nullable=False),
        sa.Column("distance_fare", sa.Float, nullable=False),
        sa.Column("total_fare", sa.Float, nullable=False),
        sa.Column(
            "payment_method",
            _enum("cash", "online", name="paymentmethod"),
            nullable=False,
        ),
        sa.Column(
            "payment_status",
            _enum("pending", "completed", "failed", "refunded", name="paymentstatus"),
            nullable=False,
        ),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("instructions", sa.Text),
        sa.Column("rider_rating", sa.Integer),
        sa.Column("rider_feedback", sa.Text),
        sa.Column("driver_rating", sa.Integer),
        sa.Column("driver_feedback", sa.Text),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        sa.Column("picked_up_at", sa.DateTime(timezone=True)),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_rider", "rides", ["rider_id"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])


def downgrade() -> None:
    op.drop_table("rides")
    op.drop_table("driver_profiles")
    op.drop_table("vehicles")
    op.drop_table("users")
