"""
Concurrency safety tests.

Demonstrates:
1. Entity locks are exclusive and always taken in the global order.
2. Concurrent trip requests never reserve one driver twice.
3. Racing accepts, ends and cancels settle on exactly one outcome.
4. Concurrent first logins with one phone create one account.

The slow backend yields to the event loop on every storage call, so the
tasks below genuinely interleave.
"""

from __future__ import annotations

import asyncio

import pytest

from greenbharat.config import Settings
from greenbharat.domain.enums import CarClass, DriverAvailability, TripStatus
from greenbharat.domain.errors import InvalidState
from greenbharat.infrastructure.locks import EntityLocks, LockKey
from greenbharat.infrastructure.memory import InMemoryBackend
from greenbharat.infrastructure.store import EntityKind, entity_key
from greenbharat.services.core import build_core
from tests.conftest import DROP_NO_COORDS, PICKUP_NO_COORDS, online_driver


class SlowBackend(InMemoryBackend):
    async def load(self, kind, entity_id):
        await asyncio.sleep(0)
        return await super().load(kind, entity_id)

    async def find_by_phone(self, kind, phone):
        await asyncio.sleep(0)
        return await super().find_by_phone(kind, phone)

    async def save_many(self, items):
        await asyncio.sleep(0)
        await super().save_many(items)

    async def list_drivers(self, **filters):
        await asyncio.sleep(0)
        return await super().list_drivers(**filters)


@pytest.fixture
def slow_core(clock):
    return build_core(Settings(database_url=""), backend=SlowBackend(), clock=clock)


def outcomes(results):
    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    return successes, failures


class TestEntityLocks:
    @pytest.mark.asyncio
    async def test_keys_acquired_in_global_order(self):
        locks = EntityLocks()
        rider = entity_key(EntityKind.RIDER, "r1")
        trip = entity_key(EntityKind.TRIP, "t1")
        driver = entity_key(EntityKind.DRIVER, "d1")

        async with locks.hold(rider, trip, driver, trip) as held:
            assert held == (driver, trip, rider)
            assert all(locks.is_locked(k) for k in held)

        assert not any(locks.is_locked(k) for k in (driver, trip, rider))

    @pytest.mark.asyncio
    async def test_same_key_is_exclusive(self):
        locks = EntityLocks()
        key = LockKey(0, "driver", "d1")
        inside = 0
        peak = 0

        async def worker():
            nonlocal inside, peak
            async with locks.hold(key):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0)
                inside -= 1

        await asyncio.gather(*(worker() for _ in range(10)))
        assert peak == 1

    @pytest.mark.asyncio
    async def test_released_after_error(self):
        locks = EntityLocks()
        key = LockKey(1, "trip", "t1")

        with pytest.raises(ValueError):
            async with locks.hold(key):
                raise ValueError("boom")

        assert not locks.is_locked(key)
        async with locks.hold(key):
            assert locks.is_locked(key)

    @pytest.mark.asyncio
    async def test_opposite_orders_do_not_deadlock(self):
        locks = EntityLocks()
        a = entity_key(EntityKind.DRIVER, "d1")
        b = entity_key(EntityKind.TRIP, "t1")

        async def take(*keys):
            for _ in range(20):
                async with locks.hold(*keys):
                    await asyncio.sleep(0)

        await asyncio.wait_for(
            asyncio.gather(take(a, b), take(b, a)), timeout=2.0
        )


class TestMatchingRaces:
    @pytest.mark.asyncio
    async def test_one_driver_many_requests(self, slow_core):
        driver = await online_driver(slow_core, "9000000001")
        riders = [
            await slow_core.accounts.login_rider(f"98765432{i:02d}") for i in range(6)
        ]

        results = await asyncio.gather(
            *(
                slow_core.trips.request_trip(
                    r.id, PICKUP_NO_COORDS, DROP_NO_COORDS, CarClass.SEDAN
                )
                for r in riders
            )
        )

        assigned = [r for r in results if r.driver is not None]
        assert len(assigned) == 1
        assert assigned[0].trip.driver_id == driver.id
        searching = [r for r in results if r.driver is None]
        assert all(r.trip.status == TripStatus.SEARCHING for r in searching)

        stored = await slow_core.accounts.get_driver(driver.id)
        assert stored.availability == DriverAvailability.RESERVED
        assert stored.current_trip_id == assigned[0].trip.id

    @pytest.mark.asyncio
    async def test_each_driver_reserved_at_most_once(self, slow_core):
        drivers = [
            await online_driver(slow_core, f"90000000{i:02d}") for i in range(3)
        ]
        rider = await slow_core.accounts.login_rider("9876543210")

        results = await asyncio.gather(
            *(
                slow_core.trips.request_trip(
                    rider.id, PICKUP_NO_COORDS, DROP_NO_COORDS, CarClass.SEDAN
                )
                for _ in range(5)
            )
        )

        matched = [r.driver.id for r in results if r.driver is not None]
        assert sorted(matched) == sorted(d.id for d in drivers)


class TestLifecycleRaces:
    async def _searching_trip(self, core, rider_phone="9876543210"):
        rider = await core.accounts.login_rider(rider_phone)
        result = await core.trips.request_trip(
            rider.id, PICKUP_NO_COORDS, DROP_NO_COORDS, CarClass.SEDAN
        )
        assert result.driver is None
        return rider, result.trip

    @pytest.mark.asyncio
    async def test_two_drivers_accept_same_trip(self, slow_core):
        _, trip = await self._searching_trip(slow_core)
        d1 = await online_driver(slow_core, "9000000001")
        d2 = await online_driver(slow_core, "9000000002")

        results = await asyncio.gather(
            slow_core.trips.accept_trip(trip.id, d1.id),
            slow_core.trips.accept_trip(trip.id, d2.id),
            return_exceptions=True,
        )

        successes, failures = outcomes(results)
        assert len(successes) == 1
        assert len(failures) == 1 and isinstance(failures[0], InvalidState)

        winner = successes[0].driver_id
        loser = d2.id if winner == d1.id else d1.id
        assert (await slow_core.trips.get_trip(trip.id)).driver_id == winner
        loser_state = await slow_core.accounts.get_driver(loser)
        assert loser_state.availability == DriverAvailability.AVAILABLE

    @pytest.mark.asyncio
    async def test_one_driver_accepts_two_trips(self, slow_core):
        _, t1 = await self._searching_trip(slow_core, "9876543210")
        _, t2 = await self._searching_trip(slow_core, "9876543211")
        driver = await online_driver(slow_core, "9000000001")

        results = await asyncio.gather(
            slow_core.trips.accept_trip(t1.id, driver.id),
            slow_core.trips.accept_trip(t2.id, driver.id),
            return_exceptions=True,
        )

        successes, failures = outcomes(results)
        assert len(successes) == 1
        assert isinstance(failures[0], InvalidState)
        statuses = sorted(
            [
                (await slow_core.trips.get_trip(t1.id)).status.value,
                (await slow_core.trips.get_trip(t2.id)).status.value,
            ]
        )
        assert statuses == ["assigned", "searching"]

    @pytest.mark.asyncio
    async def test_double_end_completes_once(self, slow_core):
        driver = await online_driver(slow_core, "9000000001")
        rider = await slow_core.accounts.login_rider("9876543210")
        trip = (
            await slow_core.trips.request_trip(
                rider.id, PICKUP_NO_COORDS, DROP_NO_COORDS, CarClass.SEDAN
            )
        ).trip
        await slow_core.trips.start_trip(trip.id, driver.id)

        results = await asyncio.gather(
            slow_core.trips.end_trip(trip.id, driver.id, 150.0),
            slow_core.trips.end_trip(trip.id, driver.id, 999.0),
            return_exceptions=True,
        )

        successes, failures = outcomes(results)
        assert len(successes) == 1
        assert isinstance(failures[0], InvalidState)
        stored = await slow_core.trips.get_trip(trip.id)
        assert stored.final_fare == successes[0].final_fare
        released = await slow_core.accounts.get_driver(driver.id)
        assert released.availability == DriverAvailability.AVAILABLE

    @pytest.mark.asyncio
    async def test_accept_and_cancel_race(self, slow_core):
        rider, trip = await self._searching_trip(slow_core)
        driver = await online_driver(slow_core, "9000000001")

        await asyncio.wait_for(
            asyncio.gather(
                slow_core.trips.accept_trip(trip.id, driver.id),
                slow_core.trips.cancel_trip(trip.id, rider.id),
                return_exceptions=True,
            ),
            timeout=2.0,
        )

        # Whichever ran first, the trip ends cancelled and the driver is free.
        stored = await slow_core.trips.get_trip(trip.id)
        assert stored.status == TripStatus.CANCELLED
        freed = await slow_core.accounts.get_driver(driver.id)
        assert freed.availability == DriverAvailability.AVAILABLE
        assert freed.current_trip_id is None


class TestLoginRaces:
    @pytest.mark.asyncio
    async def test_same_phone_one_rider(self, slow_core):
        riders = await asyncio.gather(
            *(slow_core.accounts.login_rider("9876543210") for _ in range(5))
        )
        assert len({r.id for r in riders}) == 1

    @pytest.mark.asyncio
    async def test_same_phone_one_driver(self, slow_core):
        drivers = await asyncio.gather(
            *(slow_core.accounts.login_driver("9000000001") for _ in range(5))
        )
        assert len({d.id for d in drivers}) == 1
        assert len(await slow_core.store.snapshot_drivers()) == 1
