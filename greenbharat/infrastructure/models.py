"""
SQLAlchemy ORM models for the durable backend.

Tables
------
* ``riders``   -- registered riders, unique by phone
* ``drivers``  -- drivers with car class, online flag and availability
* ``trips``    -- trip requests and their lifecycle status

Indexes
-------
* **B-Tree** on ``drivers(car_class, availability)`` for the matcher's
  candidate scan, and on ``trips.rider_id`` / ``trips.driver_id`` for trip
  history.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
)

from .database import Base
from greenbharat.domain.enums import CarClass, DriverAvailability, TripStatus


class RiderModel(Base):
    __tablename__ = "riders"

    id = Column(String(36), primary_key=True)
    phone = Column(String(20), unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(String(36), primary_key=True)
    phone = Column(String(20), unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    car_class = Column(Enum(CarClass, name="car_class"), nullable=False)
    car_model = Column(String(60), nullable=False)
    car_number = Column(String(20), nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)
    current_lat = Column(Float, nullable=True)
    current_lng = Column(Float, nullable=True)
    availability = Column(
        Enum(DriverAvailability, name="driver_availability"), nullable=False
    )
    current_trip_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_drivers_matching", "car_class", "availability"),
    )


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True)
    rider_id = Column(String(36), ForeignKey("riders.id"), nullable=False)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=True)
    status = Column(Enum(TripStatus, name="trip_status"), nullable=False)

    pickup_address = Column(String(255), nullable=False)
    drop_address = Column(String(255), nullable=False)
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    drop_lat = Column(Float, nullable=True)
    drop_lng = Column(Float, nullable=True)

    car_class = Column(Enum(CarClass, name="trip_car_class"), nullable=False)
    payment_mode = Column(String(20), nullable=False)
    estimated_fare = Column(Float, nullable=False)
    final_fare = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_trips_rider", "rider_id"),
        Index("idx_trips_driver", "driver_id"),
        Index("idx_trips_status", "status"),
    )
