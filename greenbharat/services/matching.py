"""
Driver Matcher
==============

Reserve-on-match
----------------
1. Snapshot the online, AVAILABLE drivers of the requested car class,
   ordered by ``(created_at, id)`` -- the earliest registered driver wins.
2. Walk the candidates in that order.  For each one, lock the driver (and
   the trip being created, if any), re-read it and re-check eligibility:
   another request may have reserved it since the snapshot was taken.
3. The first candidate that is still eligible is moved to RESERVED; the
   trip, when given, is assigned and written in the same commit.

Two concurrent requests can both see a driver in their snapshots, but
only the first to take its lock finds it still AVAILABLE.

Complexity: O(D) per request, D = drivers of the requested class.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from greenbharat.domain.entities import Driver, Trip, utcnow
from greenbharat.domain.enums import CarClass, DriverAvailability
from greenbharat.infrastructure.store import (
    EntityKind,
    EntityStore,
    UnitOfWork,
    entity_key,
)

logger = logging.getLogger(__name__)


class DriverMatcher:
    def __init__(
        self,
        store: EntityStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.clock = clock

    async def reserve_driver(
        self, car_class: Union[CarClass, str], trip: Optional[Trip] = None
    ) -> Optional[Driver]:
        """Reserve the earliest-registered eligible driver, or return ``None``.

        When *trip* is given it is assigned to the reserved driver and
        stored in the same atomic step; on ``None`` it is left untouched.
        """
        car_class = CarClass(car_class)
        candidates = await self.store.snapshot_drivers(
            car_class=car_class,
            availability=DriverAvailability.AVAILABLE,
            online=True,
        )
        for candidate in candidates:
            keys = [entity_key(EntityKind.DRIVER, candidate.id)]
            if trip is not None:
                keys.append(entity_key(EntityKind.TRIP, trip.id))

            async with self.store.transaction(*keys) as uow:
                driver = await uow.find(EntityKind.DRIVER, candidate.id)
                if driver is None or not driver.is_eligible_for(car_class):
                    logger.debug("Driver %s taken since snapshot", candidate.id)
                    continue

                driver.reserve(trip.id if trip is not None else None)
                uow.put(EntityKind.DRIVER, driver)
                if trip is not None:
                    trip.assign_driver(driver.id, self.clock())
                    uow.put(EntityKind.TRIP, trip)

            logger.info("Reserved driver %s (%s)", driver.id, car_class.value)
            return driver

        logger.info("No %s driver available", car_class.value)
        return None

    async def release(self, driver_id: str, uow: Optional[UnitOfWork] = None) -> Driver:
        """Return a reserved / on-trip driver to AVAILABLE (or OFFLINE).

        Pass *uow* to release inside a transaction that already holds the
        driver's lock.
        """
        if uow is None:
            driver = await self.store.update(
                EntityKind.DRIVER, driver_id, lambda d: d.release()
            )
        else:
            driver = await uow.get(EntityKind.DRIVER, driver_id)
            driver.release()
            uow.put(EntityKind.DRIVER, driver)
        logger.info("Released driver %s -> %s", driver_id, driver.availability.value)
        return driver
