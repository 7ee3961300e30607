"""Wiring of the store and services into one object the API layer holds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from greenbharat.config import Settings
from greenbharat.domain.entities import utcnow
from greenbharat.domain.pricing import FareEstimator
from greenbharat.infrastructure.memory import InMemoryBackend
from greenbharat.infrastructure.repositories import SqlAlchemyBackend
from greenbharat.infrastructure.store import EntityStore, StorageBackend

from .accounts import AccountService
from .history import TripHistory
from .matching import DriverMatcher
from .trips import TripLifecycleManager


@dataclass
class RideHailingCore:
    store: EntityStore
    accounts: AccountService
    matcher: DriverMatcher
    trips: TripLifecycleManager
    history: TripHistory

    async def start(self) -> None:
        await self.store.start()

    async def close(self) -> None:
        await self.store.close()


def backend_for(settings: Settings) -> StorageBackend:
    if settings.database_url:
        return SqlAlchemyBackend(settings.database_url)
    return InMemoryBackend()


def build_core(
    settings: Settings,
    backend: Optional[StorageBackend] = None,
    clock: Callable[[], datetime] = utcnow,
) -> RideHailingCore:
    store = EntityStore(backend or backend_for(settings))
    matcher = DriverMatcher(store, clock=clock)
    fares = FareEstimator(nominal_distance_km=settings.nominal_distance_km)
    return RideHailingCore(
        store=store,
        accounts=AccountService(store, clock=clock),
        matcher=matcher,
        trips=TripLifecycleManager(store, matcher, fares, clock=clock),
        history=TripHistory(store),
    )
