"""
Entity Store -- riders, drivers and trips with atomic per-entity access.

The store hands out copies: an entity read from it can be changed freely
and only becomes visible through ``upsert``, ``update`` or a committed
``transaction``.  Multi-entity operations go through ``transaction``,
which locks every key up front in the global order
(driver < trip < rider < phone numbers) and commits the staged writes in
one backend call when the block exits without an exception.

Storage itself is delegated to a ``StorageBackend``: in memory by default,
SQLAlchemy when a database URL is configured.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional, Union

from greenbharat.domain.entities import Driver, Rider, Trip
from greenbharat.domain.enums import CarClass, DriverAvailability
from greenbharat.domain.errors import (
    DriverNotFound,
    NotFound,
    RiderNotFound,
    TripNotFound,
)

from .locks import EntityLocks, LockKey


Entity = Union[Rider, Driver, Trip]


class EntityKind(str, enum.Enum):
    DRIVER = "driver"
    TRIP = "trip"
    RIDER = "rider"


# Global lock order; drivers are always locked before trips.
_LOCK_RANK = {EntityKind.DRIVER: 0, EntityKind.TRIP: 1, EntityKind.RIDER: 2}
_PHONE_RANK = 3

_NOT_FOUND: dict[EntityKind, type[NotFound]] = {
    EntityKind.RIDER: RiderNotFound,
    EntityKind.DRIVER: DriverNotFound,
    EntityKind.TRIP: TripNotFound,
}


def entity_key(kind: EntityKind, entity_id: str) -> LockKey:
    return LockKey(_LOCK_RANK[kind], kind.value, entity_id)


def phone_key(kind: EntityKind, phone: str) -> LockKey:
    return LockKey(_PHONE_RANK, f"{kind.value}-phone", phone)


def not_found(kind: EntityKind, entity_id: str) -> NotFound:
    return _NOT_FOUND[kind](f"{kind.value.capitalize()} {entity_id} not found")


# ── Backend contract ──────────────────────────────────────────────────


class StorageBackend(ABC):
    """Raw storage.  Callers own locking; backends own copying."""

    async def start(self) -> None:
        """Prepare storage (create tables, open pools)."""

    async def close(self) -> None:
        """Release resources held by the backend."""

    @abstractmethod
    async def load(self, kind: EntityKind, entity_id: str) -> Optional[Entity]: ...

    @abstractmethod
    async def find_by_phone(
        self, kind: EntityKind, phone: str
    ) -> Optional[Entity]: ...

    @abstractmethod
    async def save_many(self, items: list[tuple[EntityKind, Entity]]) -> None:
        """Persist every item or none of them."""

    @abstractmethod
    async def list_drivers(
        self,
        car_class: Optional[CarClass] = None,
        availability: Optional[DriverAvailability] = None,
        online: Optional[bool] = None,
    ) -> list[Driver]:
        """Matching drivers from one instant, ordered by (created_at, id)."""

    @abstractmethod
    async def list_trips(
        self,
        rider_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[Trip]:
        """Matching trips from one instant, ordered by (created_at, id)."""


# ── Unit of work ──────────────────────────────────────────────────────


class UnitOfWork:
    """Reads and staged writes for the keys held by one transaction."""

    def __init__(self, backend: StorageBackend, held: tuple[LockKey, ...]):
        self._backend = backend
        self._held = frozenset(held)
        self._staged: dict[tuple[EntityKind, str], Entity] = {}

    def _require_lock(self, kind: EntityKind, entity_id: str) -> None:
        if entity_key(kind, entity_id) not in self._held:
            raise RuntimeError(
                f"{kind.value} {entity_id} is not locked by this transaction"
            )

    async def find(self, kind: EntityKind, entity_id: str) -> Optional[Entity]:
        self._require_lock(kind, entity_id)
        staged = self._staged.get((kind, entity_id))
        if staged is not None:
            return staged
        return await self._backend.load(kind, entity_id)

    async def get(self, kind: EntityKind, entity_id: str) -> Entity:
        entity = await self.find(kind, entity_id)
        if entity is None:
            raise not_found(kind, entity_id)
        return entity

    def put(self, kind: EntityKind, entity: Entity) -> None:
        self._require_lock(kind, entity.id)
        self._staged[(kind, entity.id)] = entity

    @property
    def staged(self) -> list[tuple[EntityKind, Entity]]:
        return [(kind, entity) for (kind, _), entity in self._staged.items()]


# ── Store facade ──────────────────────────────────────────────────────


class EntityStore:
    def __init__(
        self, backend: StorageBackend, locks: Optional[EntityLocks] = None
    ):
        self.backend = backend
        self.locks = locks or EntityLocks()

    async def start(self) -> None:
        await self.backend.start()

    async def close(self) -> None:
        await self.backend.close()

    @asynccontextmanager
    async def transaction(self, *keys: LockKey) -> AsyncIterator[UnitOfWork]:
        async with self.locks.hold(*keys) as held:
            uow = UnitOfWork(self.backend, held)
            yield uow
            if uow.staged:
                await self.backend.save_many(uow.staged)

    async def get(self, kind: EntityKind, entity_id: str) -> Entity:
        entity = await self.backend.load(kind, entity_id)
        if entity is None:
            raise not_found(kind, entity_id)
        return entity

    async def find_by_natural_key(
        self, kind: EntityKind, phone: str
    ) -> Optional[Entity]:
        return await self.backend.find_by_phone(kind, phone)

    async def upsert(self, kind: EntityKind, entity: Entity) -> Entity:
        async with self.transaction(entity_key(kind, entity.id)) as uow:
            uow.put(kind, entity)
        return entity

    async def update(
        self,
        kind: EntityKind,
        entity_id: str,
        mutator: Callable[[Entity], None],
    ) -> Entity:
        """Apply *mutator* to the entity under its exclusive lock.

        The mutator works on a private copy; if it raises, nothing is
        written.
        """
        async with self.transaction(entity_key(kind, entity_id)) as uow:
            entity = await uow.get(kind, entity_id)
            mutator(entity)
            uow.put(kind, entity)
        return entity

    async def snapshot_drivers(
        self,
        car_class: Optional[CarClass] = None,
        availability: Optional[DriverAvailability] = None,
        online: Optional[bool] = None,
    ) -> list[Driver]:
        return await self.backend.list_drivers(
            car_class=car_class, availability=availability, online=online
        )

    async def snapshot_trips(
        self,
        rider_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[Trip]:
        return await self.backend.list_trips(rider_id=rider_id, driver_id=driver_id)
