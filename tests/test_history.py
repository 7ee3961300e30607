"""Trip history for riders and drivers."""

import pytest

from greenbharat.domain.enums import CarClass, TripStatus
from tests.conftest import DROP_NO_COORDS, PICKUP_NO_COORDS, online_driver


async def request(core, rider_id, car_class=CarClass.SEDAN):
    result = await core.trips.request_trip(
        rider_id, PICKUP_NO_COORDS, DROP_NO_COORDS, car_class
    )
    return result.trip


class TestRiderHistory:
    @pytest.mark.asyncio
    async def test_oldest_first(self, core, rider):
        ids = [(await request(core, rider.id)).id for _ in range(3)]

        history = await core.history.trips_for_rider(rider.id)

        assert [t.id for t in history] == ids

    @pytest.mark.asyncio
    async def test_only_own_trips(self, core, rider):
        other = await core.accounts.login_rider("9876543211")
        mine = await request(core, rider.id)
        await request(core, other.id)

        history = await core.history.trips_for_rider(rider.id)

        assert [t.id for t in history] == [mine.id]

    @pytest.mark.asyncio
    async def test_reflects_latest_status(self, core, rider):
        trip = await request(core, rider.id)
        await core.trips.cancel_trip(trip.id, rider.id)

        (listed,) = await core.history.trips_for_rider(rider.id)
        assert listed.status == TripStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_unknown_rider_is_empty(self, core):
        assert await core.history.trips_for_rider("nobody") == []


class TestDriverHistory:
    @pytest.mark.asyncio
    async def test_completed_and_current_trips(self, core, rider, sedan_driver):
        first = await request(core, rider.id)
        await core.trips.start_trip(first.id, sedan_driver.id)
        await core.trips.end_trip(first.id, sedan_driver.id)
        second = await request(core, rider.id)

        history = await core.history.trips_for_driver(sedan_driver.id)

        assert [t.id for t in history] == [first.id, second.id]
        assert [t.status for t in history] == [
            TripStatus.COMPLETED,
            TripStatus.ASSIGNED,
        ]

    @pytest.mark.asyncio
    async def test_unassigned_trips_not_listed(self, core, rider):
        driver = await online_driver(core, "9000000009", CarClass.SUV)
        await request(core, rider.id, CarClass.SEDAN)

        assert await core.history.trips_for_driver(driver.id) == []

    @pytest.mark.asyncio
    async def test_unknown_driver_is_empty(self, core):
        assert await core.history.trips_for_driver("nobody") == []
