"""Initial schema: riders, drivers and trips.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

CAR_CLASS = sa.Enum("MINI", "SEDAN", "SUV", name="car_class")
TRIP_CAR_CLASS = sa.Enum("MINI", "SEDAN", "SUV", name="trip_car_class")
DRIVER_AVAILABILITY = sa.Enum(
    "OFFLINE", "AVAILABLE", "RESERVED", "ON_TRIP", name="driver_availability"
)
TRIP_STATUS = sa.Enum(
    "SEARCHING", "ASSIGNED", "ONGOING", "COMPLETED", "CANCELLED", name="trip_status"
)


def upgrade() -> None:
    # ── riders ────────────────────────────────────────────────────────
    op.create_table(
        "riders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("phone", sa.String(20), unique=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("phone", sa.String(20), unique=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("car_class", CAR_CLASS, nullable=False),
        sa.Column("car_model", sa.String(60), nullable=False),
        sa.Column("car_number", sa.String(20), nullable=False),
        sa.Column("is_online", sa.Boolean, nullable=False, default=False),
        sa.Column("current_lat", sa.Float, nullable=True),
        sa.Column("current_lng", sa.Float, nullable=True),
        sa.Column("availability", DRIVER_AVAILABILITY, nullable=False),
        sa.Column("current_trip_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_drivers_matching", "drivers", ["car_class", "availability"]
    )

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "rider_id", sa.String(36), sa.ForeignKey("riders.id"), nullable=False
        ),
        sa.Column(
            "driver_id", sa.String(36), sa.ForeignKey("drivers.id"), nullable=True
        ),
        sa.Column("status", TRIP_STATUS, nullable=False),
        sa.Column("pickup_address", sa.String(255), nullable=False),
        sa.Column("drop_address", sa.String(255), nullable=False),
        sa.Column("pickup_lat", sa.Float, nullable=True),
        sa.Column("pickup_lng", sa.Float, nullable=True),
        sa.Column("drop_lat", sa.Float, nullable=True),
        sa.Column("drop_lng", sa.Float, nullable=True),
        sa.Column("car_class", TRIP_CAR_CLASS, nullable=False),
        sa.Column("payment_mode", sa.String(20), nullable=False),
        sa.Column("estimated_fare", sa.Float, nullable=False),
        sa.Column("final_fare", sa.Float, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_trips_rider", "trips", ["rider_id"])
    op.create_index("idx_trips_driver", "trips", ["driver_id"])
    op.create_index("idx_trips_status", "trips", ["status"])


def downgrade() -> None:
    op.drop_table("trips")
    op.drop_table("drivers")
    op.drop_table("riders")
    bind = op.get_bind()
    for enum_type in (TRIP_STATUS, TRIP_CAR_CLASS, DRIVER_AVAILABILITY, CAR_CLASS):
        enum_type.drop(bind, checkfirst=True)
