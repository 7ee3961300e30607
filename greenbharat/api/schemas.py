"""Pydantic request / response schemas for the REST API.

Bodies use camelCase on the wire (``riderId``, ``carType``) and snake_case
in Python.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from greenbharat.domain.entities import Driver, Location, Place, Rider, Trip
from greenbharat.domain.enums import CarClass, DriverAvailability, TripStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _location(lat: Optional[float], lng: Optional[float]) -> Optional[Location]:
    if lat is None or lng is None:
        return None
    return Location(lat, lng)


# ── Requests ──────────────────────────────────────────────────────────


class RiderLoginRequest(CamelModel):
    phone: str = Field(..., min_length=1, max_length=20)


class DriverLoginRequest(CamelModel):
    phone: str = Field(..., min_length=1, max_length=20)
    car_type: CarClass = CarClass.MINI


class DriverStatusRequest(CamelModel):
    is_online: Optional[bool] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    def location(self) -> Optional[Location]:
        return _location(self.lat, self.lng)


class TripCreateRequest(CamelModel):
    rider_id: str = Field(..., min_length=1)
    pickup_address: str = Field(..., min_length=1, max_length=255)
    drop_address: str = Field(..., min_length=1, max_length=255)
    pickup_lat: Optional[float] = Field(None, ge=-90, le=90)
    pickup_lng: Optional[float] = Field(None, ge=-180, le=180)
    drop_lat: Optional[float] = Field(None, ge=-90, le=90)
    drop_lng: Optional[float] = Field(None, ge=-180, le=180)
    car_type: CarClass
    payment_mode: str = Field("cash", min_length=1, max_length=20)

    def pickup(self) -> Place:
        return Place(self.pickup_address, _location(self.pickup_lat, self.pickup_lng))

    def drop(self) -> Place:
        return Place(self.drop_address, _location(self.drop_lat, self.drop_lng))


class DriverActionRequest(CamelModel):
    driver_id: str = Field(..., min_length=1)


class EndTripRequest(DriverActionRequest):
    final_fare: Optional[float] = Field(
        None,
        allow_inf_nan=False,
        description="Charged amount; missing or non-positive means the estimate.",
    )


class CancelTripRequest(CamelModel):
    actor_id: str = Field(
        ...,
        min_length=1,
        description="Id of the trip's rider or of its assigned driver.",
    )


# ── Responses ─────────────────────────────────────────────────────────


class RiderResponse(CamelModel):
    id: str
    phone: str
    name: str
    created_at: datetime

    @classmethod
    def from_entity(cls, rider: Rider) -> RiderResponse:
        return cls(
            id=rider.id,
            phone=rider.phone,
            name=rider.name,
            created_at=rider.created_at,
        )


class DriverResponse(CamelModel):
    id: str
    phone: str
    name: str
    car_type: CarClass
    car_model: str
    car_number: str
    is_online: bool
    current_lat: Optional[float] = None
    current_lng: Optional[float] = None
    availability: DriverAvailability
    current_trip_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, driver: Driver) -> DriverResponse:
        loc = driver.location
        return cls(
            id=driver.id,
            phone=driver.phone,
            name=driver.name,
            car_type=driver.car_class,
            car_model=driver.car_model,
            car_number=driver.car_number,
            is_online=driver.is_online,
            current_lat=loc.latitude if loc else None,
            current_lng=loc.longitude if loc else None,
            availability=driver.availability,
            current_trip_id=driver.current_trip_id,
            created_at=driver.created_at,
        )


class TripResponse(CamelModel):
    id: str
    rider_id: str
    driver_id: Optional[str] = None
    status: TripStatus
    pickup_address: str
    drop_address: str
    pickup_lat: Optional[float] = None
    pickup_lng: Optional[float] = None
    drop_lat: Optional[float] = None
    drop_lng: Optional[float] = None
    car_type: CarClass
    payment_mode: str
    estimated_fare: float
    final_fare: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, trip: Trip) -> TripResponse:
        pickup, drop = trip.pickup.location, trip.drop.location
        return cls(
            id=trip.id,
            rider_id=trip.rider_id,
            driver_id=trip.driver_id,
            status=trip.status,
            pickup_address=trip.pickup.address,
            drop_address=trip.drop.address,
            pickup_lat=pickup.latitude if pickup else None,
            pickup_lng=pickup.longitude if pickup else None,
            drop_lat=drop.latitude if drop else None,
            drop_lng=drop.longitude if drop else None,
            car_type=trip.car_class,
            payment_mode=trip.payment_mode,
            estimated_fare=trip.estimated_fare,
            final_fare=trip.final_fare,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )


class RiderEnvelope(CamelModel):
    rider: RiderResponse


class DriverEnvelope(CamelModel):
    driver: DriverResponse


class TripEnvelope(CamelModel):
    trip: TripResponse


class TripRequestResponse(CamelModel):
    trip: TripResponse
    assigned_driver: Optional[DriverResponse] = None


class TripListResponse(CamelModel):
    trips: list[TripResponse]


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
