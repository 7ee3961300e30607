"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  ``SqlAlchemyBackend`` plugs the
repositories into the entity store: one session per call, one database
transaction per committed store transaction.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, build_engine, build_session_factory
from .models import DriverModel, RiderModel, TripModel
from .store import Entity, EntityKind, StorageBackend
from greenbharat.domain.entities import Driver, Location, Place, Rider, Trip
from greenbharat.domain.enums import CarClass, DriverAvailability


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _location(lat: Optional[float], lng: Optional[float]) -> Optional[Location]:
    if lat is None or lng is None:
        return None
    return Location(lat, lng)


# ── Row <-> entity mapping ────────────────────────────────────────────


def rider_from_row(row: RiderModel) -> Rider:
    return Rider(
        id=row.id,
        phone=row.phone,
        name=row.name,
        created_at=_aware(row.created_at),
    )


def rider_to_row(rider: Rider) -> RiderModel:
    return RiderModel(
        id=rider.id,
        phone=rider.phone,
        name=rider.name,
        created_at=rider.created_at,
    )


def driver_from_row(row: DriverModel) -> Driver:
    return Driver(
        id=row.id,
        phone=row.phone,
        name=row.name,
        car_class=CarClass(row.car_class),
        car_model=row.car_model,
        car_number=row.car_number,
        is_online=row.is_online,
        location=_location(row.current_lat, row.current_lng),
        availability=DriverAvailability(row.availability),
        current_trip_id=row.current_trip_id,
        created_at=_aware(row.created_at),
    )


def driver_to_row(driver: Driver) -> DriverModel:
    loc = driver.location
    return DriverModel(
        id=driver.id,
        phone=driver.phone,
        name=driver.name,
        car_class=driver.car_class,
        car_model=driver.car_model,
        car_number=driver.car_number,
        is_online=driver.is_online,
        current_lat=loc.latitude if loc else None,
        current_lng=loc.longitude if loc else None,
        availability=driver.availability,
        current_trip_id=driver.current_trip_id,
        created_at=driver.created_at,
    )


def trip_from_row(row: TripModel) -> Trip:
    return Trip(
        id=row.id,
        rider_id=row.rider_id,
        driver_id=row.driver_id,
        status=row.status,
        pickup=Place(row.pickup_address, _location(row.pickup_lat, row.pickup_lng)),
        drop=Place(row.drop_address, _location(row.drop_lat, row.drop_lng)),
        car_class=CarClass(row.car_class),
        payment_mode=row.payment_mode,
        estimated_fare=row.estimated_fare,
        final_fare=row.final_fare,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def trip_to_row(trip: Trip) -> TripModel:
    pickup, drop = trip.pickup.location, trip.drop.location
    return TripModel(
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
        car_class=trip.car_class,
        payment_mode=trip.payment_mode,
        estimated_fare=trip.estimated_fare,
        final_fare=trip.final_fare,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
    )


# ── Repositories ──────────────────────────────────────────────────────


class RiderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, rider_id: str) -> Optional[RiderModel]:
        return await self.session.get(RiderModel, rider_id)

    async def get_by_phone(self, phone: str) -> Optional[RiderModel]:
        result = await self.session.execute(
            select(RiderModel).where(RiderModel.phone == phone)
        )
        return result.scalar_one_or_none()


class DriverRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, driver_id: str) -> Optional[DriverModel]:
        return await self.session.get(DriverModel, driver_id)

    async def get_by_phone(self, phone: str) -> Optional[DriverModel]:
        result = await self.session.execute(
            select(DriverModel).where(DriverModel.phone == phone)
        )
        return result.scalar_one_or_none()

    async def find_all(
        self,
        car_class: Optional[CarClass] = None,
        availability: Optional[DriverAvailability] = None,
        online: Optional[bool] = None,
    ) -> list[DriverModel]:
        query = select(DriverModel).order_by(DriverModel.created_at, DriverModel.id)
        if car_class is not None:
            query = query.where(DriverModel.car_class == car_class)
        if availability is not None:
            query = query.where(DriverModel.availability == availability)
        if online is not None:
            query = query.where(DriverModel.is_online.is_(online))
        result = await self.session.execute(query)
        return list(result.scalars().all())


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, trip_id: str) -> Optional[TripModel]:
        return await self.session.get(TripModel, trip_id)

    async def find_all(
        self,
        rider_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[TripModel]:
        query = select(TripModel).order_by(TripModel.created_at, TripModel.id)
        if rider_id is not None:
            query = query.where(TripModel.rider_id == rider_id)
        if driver_id is not None:
            query = query.where(TripModel.driver_id == driver_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())


# ── Storage backend ───────────────────────────────────────────────────

_TO_ROW = {
    EntityKind.RIDER: rider_to_row,
    EntityKind.DRIVER: driver_to_row,
    EntityKind.TRIP: trip_to_row,
}

_FROM_ROW = {
    EntityKind.RIDER: rider_from_row,
    EntityKind.DRIVER: driver_from_row,
    EntityKind.TRIP: trip_from_row,
}

_REPOSITORIES = {
    EntityKind.RIDER: RiderRepository,
    EntityKind.DRIVER: DriverRepository,
    EntityKind.TRIP: TripRepository,
}


class SqlAlchemyBackend(StorageBackend):
    """Durable storage: each store commit is a single DB transaction.

    Entity locks are in-process and stay held while a commit's queries run,
    so lock scopes here include database round-trips (the in-memory backend
    has none).  Run a single process against one database: a second process
    would not see this process's locks.
    """

    def __init__(self, database_url: str):
        self.engine = build_engine(database_url)
        self.session_factory = build_session_factory(self.engine)

    async def start(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def load(self, kind: EntityKind, entity_id: str) -> Optional[Entity]:
        async with self.session_factory() as session:
            row = await _REPOSITORIES[kind](session).get_by_id(entity_id)
            return _FROM_ROW[kind](row) if row is not None else None

    async def find_by_phone(self, kind: EntityKind, phone: str) -> Optional[Entity]:
        if kind is EntityKind.TRIP:
            return None
        async with self.session_factory() as session:
            row = await _REPOSITORIES[kind](session).get_by_phone(phone)
            return _FROM_ROW[kind](row) if row is not None else None

    async def save_many(self, items: list[tuple[EntityKind, Entity]]) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                for kind, entity in items:
                    await session.merge(_TO_ROW[kind](entity))

    async def list_drivers(
        self,
        car_class: Optional[CarClass] = None,
        availability: Optional[DriverAvailability] = None,
        online: Optional[bool] = None,
    ) -> list[Driver]:
        async with self.session_factory() as session:
            rows = await DriverRepository(session).find_all(
                car_class=car_class, availability=availability, online=online
            )
            return [driver_from_row(r) for r in rows]

    async def list_trips(
        self,
        rider_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> list[Trip]:
        async with self.session_factory() as session:
            rows = await TripRepository(session).find_all(
                rider_id=rider_id, driver_id=driver_id
            )
            return [trip_from_row(r) for r in rows]
