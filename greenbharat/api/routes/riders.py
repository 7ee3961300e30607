"""
Rider endpoints
===============

GET /riders/{rider_id}/trips -- trip history, oldest first
"""

from fastapi import APIRouter, Depends, Request

from greenbharat.api.dependencies import get_core
from greenbharat.api.middleware import limiter
from greenbharat.api.schemas import TripListResponse, TripResponse
from greenbharat.config import settings
from greenbharat.services.core import RideHailingCore

router = APIRouter(prefix="/riders", tags=["riders"])


@router.get(
    "/{rider_id}/trips",
    response_model=TripListResponse,
    summary="Rider trip history",
)
@limiter.limit(settings.rate_limit)
async def rider_trips(
    request: Request,
    rider_id: str,
    core: RideHailingCore = Depends(get_core),
):
    trips = await core.history.trips_for_rider(rider_id)
    return TripListResponse(trips=[TripResponse.from_entity(t) for t in trips])
