"""
FastAPI application factory.

* Wires the ride-hailing core (store + services) onto ``app.state``.
* Opens / closes the storage backend via lifespan events.
* Applies rate-limiting middleware, CORS and error translation.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from greenbharat.api.errors import register_error_handlers
from greenbharat.api.middleware import limiter
from greenbharat.api.routes import admin, auth, drivers, riders, trips
from greenbharat.config import settings
from greenbharat.services.core import RideHailingCore, build_core

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare storage on startup; release it on shutdown."""
    await app.state.core.start()
    logger.info("Storage ready (%s)", type(app.state.core.store.backend).__name__)
    yield
    await app.state.core.close()


def create_app(core: Optional[RideHailingCore] = None) -> FastAPI:
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="GreenBharat Ride-Hailing API",
        description=(
            "Registers riders and drivers, matches trips to available "
            "drivers without double-booking, and tracks each trip from "
            "request to completion or cancellation."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.core = core or build_core(settings)

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Routers
    app.include_router(admin.router)
    app.include_router(auth.router)
    app.include_router(drivers.router)
    app.include_router(riders.router)
    app.include_router(trips.router)

    return app
