"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    SEARCHING = "searching"
    ASSIGNED = "assigned"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.SEARCHING: {TripStatus.ASSIGNED, TripStatus.CANCELLED},
    TripStatus.ASSIGNED: {TripStatus.ONGOING, TripStatus.CANCELLED},
    TripStatus.ONGOING: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}


class DriverAvailability(str, enum.Enum):
    OFFLINE = "offline"
    AVAILABLE = "available"
    RESERVED = "reserved"
    ON_TRIP = "on_trip"


DRIVER_TRANSITIONS: dict[DriverAvailability, set[DriverAvailability]] = {
    DriverAvailability.OFFLINE: {DriverAvailability.AVAILABLE},
    DriverAvailability.AVAILABLE: {
        DriverAvailability.OFFLINE,
        DriverAvailability.RESERVED,
    },
    DriverAvailability.RESERVED: {
        DriverAvailability.ON_TRIP,
        DriverAvailability.AVAILABLE,
        DriverAvailability.OFFLINE,
    },
    DriverAvailability.ON_TRIP: {
        DriverAvailability.AVAILABLE,
        DriverAvailability.OFFLINE,
    },
}


class CarClass(str, enum.Enum):
    MINI = "mini"
    SEDAN = "sedan"
    SUV = "suv"
