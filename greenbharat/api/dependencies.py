"""FastAPI dependency injection helpers."""

from fastapi import Request

from greenbharat.services.core import RideHailingCore


def get_core(request: Request) -> RideHailingCore:
    """Return the core wired up by ``create_app``."""
    return request.app.state.core
