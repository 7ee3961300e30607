"""
Rider and driver accounts.

Login is find-or-create by phone number.  The lookup and the insert run
under a lock on the phone number, so concurrent first logins with the same
phone always end up with one account.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from greenbharat.domain.entities import Driver, Location, Rider, new_id, utcnow
from greenbharat.domain.enums import CarClass
from greenbharat.domain.errors import ValidationError
from greenbharat.infrastructure.store import (
    EntityKind,
    EntityStore,
    entity_key,
    phone_key,
)

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        store: EntityStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.clock = clock

    async def _find_or_create(self, kind: EntityKind, phone: str, factory):
        phone = (phone or "").strip()
        if not phone:
            raise ValidationError("Phone required")

        existing = await self.store.find_by_natural_key(kind, phone)
        if existing is not None:
            return existing

        entity_id = new_id()
        async with self.store.transaction(
            phone_key(kind, phone), entity_key(kind, entity_id)
        ) as uow:
            # Re-check: another login may have created it while we waited.
            existing = await self.store.find_by_natural_key(kind, phone)
            if existing is not None:
                return existing
            entity = factory(entity_id, phone)
            uow.put(kind, entity)

        logger.info("Registered %s %s", kind.value, entity_id)
        return entity

    async def login_rider(self, phone: str) -> Rider:
        return await self._find_or_create(
            EntityKind.RIDER,
            phone,
            lambda entity_id, p: Rider(id=entity_id, phone=p, created_at=self.clock()),
        )

    async def login_driver(
        self, phone: str, car_class: CarClass = CarClass.MINI
    ) -> Driver:
        return await self._find_or_create(
            EntityKind.DRIVER,
            phone,
            lambda entity_id, p: Driver(
                id=entity_id,
                phone=p,
                car_class=car_class,
                created_at=self.clock(),
            ),
        )

    async def get_rider(self, rider_id: str) -> Rider:
        return await self.store.get(EntityKind.RIDER, rider_id)

    async def get_driver(self, driver_id: str) -> Driver:
        return await self.store.get(EntityKind.DRIVER, driver_id)

    async def update_driver_status(
        self,
        driver_id: str,
        is_online: Optional[bool] = None,
        location: Optional[Location] = None,
    ) -> Driver:
        """Apply a driver's own status update (online flag and/or location)."""

        def apply(driver: Driver) -> None:
            if is_online is not None:
                driver.set_online(is_online)
            if location is not None:
                driver.location = location

        driver = await self.store.update(EntityKind.DRIVER, driver_id, apply)
        logger.info(
            "Driver %s status: online=%s availability=%s",
            driver_id,
            driver.is_online,
            driver.availability.value,
        )
        return driver
