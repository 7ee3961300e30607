"""
In-memory storage backend (process lifetime).

All methods complete without yielding to the event loop once they start
touching the tables, so every ``save_many`` is applied as one step and
every listing reflects a single instant.  Entities are deep-copied on the
way in and out; nothing outside this module holds a reference to stored
state.
"""

from __future__ import annotations

import copy
from typing import Optional

from greenbharat.domain.entities import Driver, Trip
from greenbharat.domain.enums import CarClass, DriverAvailability

from .store import Entity, EntityKind, StorageBackend


def _creation_order(entity: Entity) -> tuple:
    return (entity.created_at, entity.id)


class InMemoryBackend(StorageBackend):
    def __init__(self) -> None:
        self._tables: dict[EntityKind, dict[str, Entity]] = {
            kind: {} for kind in EntityKind
        }
        self._phones: dict[EntityKind, dict[str, str]] = {
            EntityKind.RIDER: {},
            EntityKind.DRIVER: {},
        }

    async def load(self, kind: EntityKind, entity_id: str) -> Optional[Entity]:
        entity = self._tables[kind].get(entity_id)
        return copy.deepcopy(entity) if entity is not None else None

    async def find_by_phone(self, kind: EntityKind, phone: str) -> Optional[Entity]:
        entity_id = self._phones.get(kind, {}).get(phone)
        if entity_id is None:
            return None
        return copy.deepcopy(self._tables[kind][entity_id])

    async def save_many(self, items: list[tuple[EntityKind, Entity]]) -> None:
        copies = [(kind, copy.deepcopy(entity)) for kind, entity in items]
        for kind, entity in copies:
            self._tables[kind][entity.id] = entity
            if kind in self._phones:
                self._phones[kind][entity.phone] = entity.id

    async def list_drivers(
        self,
        car_class: Optional[CarClass] = None,
        availability: Optional[DriverAvailability] = None,
        online: Optional[bool] = None,
    ) -> list[Driver]:
        drivers = [
            d
            for d in self._tables[EntityKind.DRIVER].values()
            if (car_class is None or d.car_class == car_class)
            and (availability is None or d.availability == availability)
            and (online is None or d.is_online == online)
        ]
        return copy.deepcopy(sorted(drivers, key=_creation_order))

    async def list_trips(
        self,
        rider_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[Trip]:
        trips = [
            t
            for t in self._tables[EntityKind.TRIP].values()
            if (rider_id is None or t.rider_id == rider_id)
            and (driver_id is None or t.driver_id == driver_id)
        ]
        return copy.deepcopy(sorted(trips, key=_creation_order))
