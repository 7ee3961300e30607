"""
Trip lifecycle operations.

Every operation runs inside one store transaction that locks the driver
before the trip.  All checks happen before anything is staged, and a
raised error discards the staged writes, so a failed call leaves riders,
drivers and trips exactly as they were.

    searching --accept--> assigned --start--> ongoing --end--> completed
        |                    |
        +------cancel--------+--------> cancelled
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from greenbharat.domain.distance import trip_distance_km
from greenbharat.domain.entities import Driver, Place, Trip, utcnow
from greenbharat.domain.enums import CarClass, TripStatus
from greenbharat.domain.errors import (
    DriverOffline,
    Forbidden,
    InvalidState,
    ValidationError,
)
from greenbharat.domain.pricing import FareEstimator
from greenbharat.infrastructure.store import EntityKind, EntityStore, entity_key

from .matching import DriverMatcher

logger = logging.getLogger(__name__)


@dataclass
class TripAssignment:
    """Result of a trip request: the trip and its driver, if one was found."""

    trip: Trip
    driver: Optional[Driver] = None


class TripLifecycleManager:
    def __init__(
        self,
        store: EntityStore,
        matcher: DriverMatcher,
        fares: FareEstimator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.matcher = matcher
        self.fares = fares
        self.clock = clock

    def _keys(self, trip_id: str, driver_id: Optional[str]):
        keys = [entity_key(EntityKind.TRIP, trip_id)]
        if driver_id is not None:
            keys.append(entity_key(EntityKind.DRIVER, driver_id))
        return keys

    async def get_trip(self, trip_id: str) -> Trip:
        return await self.store.get(EntityKind.TRIP, trip_id)

    async def request_trip(
        self,
        rider_id: str,
        pickup: Place,
        drop: Place,
        car_class: Union[CarClass, str],
        payment_mode: str = "cash",
    ) -> TripAssignment:
        if not pickup.address or not drop.address:
            raise ValidationError("Pickup and drop addresses are required")
        try:
            car_class = CarClass(car_class)
        except ValueError:
            raise ValidationError(f"Unknown car class {car_class!r}") from None
        await self.store.get(EntityKind.RIDER, rider_id)

        now = self.clock()
        trip = Trip(
            rider_id=rider_id,
            pickup=pickup,
            drop=drop,
            car_class=car_class,
            payment_mode=payment_mode or "cash",
            estimated_fare=self.fares.estimate(
                car_class, trip_distance_km(pickup, drop)
            ),
            created_at=now,
        )

        driver = await self.matcher.reserve_driver(car_class, trip=trip)
        if driver is None:
            await self.store.upsert(EntityKind.TRIP, trip)

        logger.info(
            "Trip %s requested by rider %s: %s (driver=%s, fare=%.0f)",
            trip.id,
            rider_id,
            trip.status.value,
            driver.id if driver else None,
            trip.estimated_fare,
        )
        return TripAssignment(trip=trip, driver=driver)

    async def accept_trip(self, trip_id: str, driver_id: str) -> Trip:
        """A driver takes a trip that is still searching."""
        async with self.store.transaction(*self._keys(trip_id, driver_id)) as uow:
            trip = await uow.get(EntityKind.TRIP, trip_id)
            driver = await uow.get(EntityKind.DRIVER, driver_id)
            if not driver.is_online:
                raise DriverOffline(f"Driver {driver_id} is offline")
            if trip.status is not TripStatus.SEARCHING:
                raise InvalidState(
                    f"Trip {trip_id} is {trip.status.value}, not searching"
                )

            driver.reserve(trip.id)
            trip.assign_driver(driver.id, self.clock())
            uow.put(EntityKind.DRIVER, driver)
            uow.put(EntityKind.TRIP, trip)

        logger.info("Trip %s accepted by driver %s", trip_id, driver_id)
        return trip

    async def start_trip(self, trip_id: str, driver_id: str) -> Trip:
        async with self.store.transaction(*self._keys(trip_id, driver_id)) as uow:
            trip = await uow.get(EntityKind.TRIP, trip_id)
            if trip.driver_id != driver_id:
                raise Forbidden(f"Trip {trip_id} is not assigned to {driver_id}")
            trip.transition_to(TripStatus.ONGOING, self.clock())

            driver = await uow.get(EntityKind.DRIVER, driver_id)
            driver.begin_trip()
            uow.put(EntityKind.DRIVER, driver)
            uow.put(EntityKind.TRIP, trip)

        logger.info("Trip %s started", trip_id)
        return trip

    async def end_trip(
        self,
        trip_id: str,
        driver_id: str,
        final_fare: Optional[float] = None,
    ) -> Trip:
        async with self.store.transaction(*self._keys(trip_id, driver_id)) as uow:
            trip = await uow.get(EntityKind.TRIP, trip_id)
            if trip.driver_id != driver_id:
                raise Forbidden(f"Trip {trip_id} is not assigned to {driver_id}")
            trip.complete(self.clock(), final_fare)

            await self.matcher.release(driver_id, uow=uow)
            uow.put(EntityKind.TRIP, trip)

        logger.info("Trip %s completed, fare %.2f", trip_id, trip.final_fare)
        return trip

    async def cancel_trip(self, trip_id: str, actor_id: str) -> Trip:
        """Cancel a searching or assigned trip on behalf of its rider or driver."""
        driver_id = (await self.store.get(EntityKind.TRIP, trip_id)).driver_id
        while True:
            async with self.store.transaction(*self._keys(trip_id, driver_id)) as uow:
                trip = await uow.get(EntityKind.TRIP, trip_id)
                if trip.driver_id != driver_id:
                    # A driver accepted since the first read; relock with it.
                    driver_id = trip.driver_id
                    continue
                if not trip.involves(actor_id):
                    raise Forbidden(f"{actor_id} is not part of trip {trip_id}")
                trip.transition_to(TripStatus.CANCELLED, self.clock())

                if driver_id is not None:
                    await self.matcher.release(driver_id, uow=uow)
                uow.put(EntityKind.TRIP, trip)

            logger.info("Trip %s cancelled by %s", trip_id, actor_id)
            return trip
