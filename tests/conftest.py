"""
Shared test fixtures.

The core runs on the in-memory backend with a ticking clock, so creation
order (and therefore matching order) is deterministic.  API tests drive
the FastAPI app through httpx's ASGI transport; no server is started.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from greenbharat.api.middleware import limiter
from greenbharat.config import Settings
from greenbharat.domain.entities import Location, Place
from greenbharat.domain.enums import CarClass
from greenbharat.services.core import RideHailingCore, build_core


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


PICKUP = Place("Terminal 2, CSMIA", Location(19.0896, 72.8656))
DROP = Place("Andheri West", Location(19.1176, 72.8490))
PICKUP_NO_COORDS = Place("Terminal 2, CSMIA")
DROP_NO_COORDS = Place("Andheri West")


async def online_driver(
    core: RideHailingCore, phone: str, car_class: CarClass = CarClass.SEDAN
):
    driver = await core.accounts.login_driver(phone, car_class)
    return await core.accounts.update_driver_status(driver.id, is_online=True)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def core(clock: TickingClock) -> RideHailingCore:
    return build_core(Settings(database_url=""), clock=clock)


@pytest_asyncio.fixture
async def rider(core: RideHailingCore):
    return await core.accounts.login_rider("9876543210")


@pytest_asyncio.fixture
async def sedan_driver(core: RideHailingCore):
    return await online_driver(core, "9000000001", CarClass.SEDAN)


@pytest_asyncio.fixture
async def client(core: RideHailingCore) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to an app wired to the test core."""
    from greenbharat.api.app import create_app

    limiter.enabled = False
    app = create_app(core=core)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True
