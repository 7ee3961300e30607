"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: enforces valid lifecycle transitions
  (SEARCHING -> ASSIGNED -> ONGOING -> COMPLETED | CANCELLED).
- **State Pattern** on ``Driver`` availability
  (OFFLINE <-> AVAILABLE -> RESERVED -> ON_TRIP -> AVAILABLE | OFFLINE).
- ``Driver.is_eligible_for`` encapsulates the matching invariant.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .enums import (
    DRIVER_TRANSITIONS,
    TRIP_TRANSITIONS,
    CarClass,
    DriverAvailability,
    TripStatus,
)
from .errors import InvalidState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _phone_suffix(phone: str) -> str:
    return phone[-4:]


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Place:
    """A pickup or drop point: the address is required, coordinates are not."""

    address: str
    location: Optional[Location] = None


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Rider:
    phone: str
    name: str = ""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"Rider-{_phone_suffix(self.phone)}"


@dataclass
class Driver:
    phone: str
    name: str = ""
    car_class: CarClass = CarClass.MINI
    car_model: str = "Cab"
    car_number: str = "MH01AB1234"
    is_online: bool = False
    location: Optional[Location] = None
    availability: DriverAvailability = DriverAvailability.OFFLINE
    current_trip_id: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = f"Driver-{_phone_suffix(self.phone)}"

    def transition_to(self, new_state: DriverAvailability) -> None:
        """Move to *new_state* if the transition is legal, else raise."""
        allowed = DRIVER_TRANSITIONS.get(self.availability, set())
        if new_state not in allowed:
            raise InvalidState(
                f"Driver cannot go from {self.availability.value} "
                f"to {new_state.value}"
            )
        self.availability = new_state

    def is_eligible_for(self, car_class: CarClass) -> bool:
        return (
            self.is_online
            and self.availability is DriverAvailability.AVAILABLE
            and self.car_class == car_class
        )

    def set_online(self, online: bool) -> None:
        """Toggle the online flag; only an idle driver changes availability.

        A reserved or on-trip driver keeps its trip and is released to
        OFFLINE when the trip ends.
        """
        self.is_online = online
        if online and self.availability is DriverAvailability.OFFLINE:
            self.transition_to(DriverAvailability.AVAILABLE)
        elif not online and self.availability is DriverAvailability.AVAILABLE:
            self.transition_to(DriverAvailability.OFFLINE)

    def reserve(self, trip_id: Optional[str]) -> None:
        if self.availability is not DriverAvailability.AVAILABLE:
            raise InvalidState(
                f"Driver {self.id} is {self.availability.value}, not available"
            )
        self.transition_to(DriverAvailability.RESERVED)
        self.current_trip_id = trip_id

    def begin_trip(self) -> None:
        self.transition_to(DriverAvailability.ON_TRIP)

    def release(self) -> None:
        if self.availability not in (
            DriverAvailability.RESERVED,
            DriverAvailability.ON_TRIP,
        ):
            raise InvalidState(
                f"Driver {self.id} holds no trip ({self.availability.value})"
            )
        self.transition_to(
            DriverAvailability.AVAILABLE
            if self.is_online
            else DriverAvailability.OFFLINE
        )
        self.current_trip_id = None


@dataclass
class Trip:
    rider_id: str
    pickup: Place
    drop: Place
    car_class: CarClass
    estimated_fare: float
    payment_mode: str = "cash"
    status: TripStatus = TripStatus.SEARCHING
    driver_id: Optional[str] = None
    final_fare: Optional[float] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    def transition_to(self, new_status: TripStatus, at: datetime) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = TRIP_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidState(
                f"Cannot transition trip from {self.status.value} "
                f"to {new_status.value}"
            )
        self.status = new_status
        self.updated_at = at

    def assign_driver(self, driver_id: str, at: datetime) -> None:
        if self.driver_id is not None and self.driver_id != driver_id:
            raise InvalidState(f"Trip {self.id} already belongs to another driver")
        self.transition_to(TripStatus.ASSIGNED, at)
        self.driver_id = driver_id

    def complete(self, at: datetime, final_fare: Optional[float] = None) -> None:
        self.transition_to(TripStatus.COMPLETED, at)
        if final_fare is not None and math.isfinite(final_fare) and final_fare > 0:
            self.final_fare = final_fare
        else:
            self.final_fare = self.estimated_fare

    def involves(self, actor_id: str) -> bool:
        return actor_id == self.rider_id or (
            self.driver_id is not None and actor_id == self.driver_id
        )
