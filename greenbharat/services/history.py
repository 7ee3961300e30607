"""Read-only trip history for riders and drivers."""

from __future__ import annotations

from greenbharat.domain.entities import Trip
from greenbharat.infrastructure.store import EntityStore


class TripHistory:
    """Snapshot-consistent listings, oldest trip first."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def trips_for_rider(self, rider_id: str) -> list[Trip]:
        return await self.store.snapshot_trips(rider_id=rider_id)

    async def trips_for_driver(self, driver_id: str) -> list[Trip]:
        return await self.store.snapshot_trips(driver_id=driver_id)
