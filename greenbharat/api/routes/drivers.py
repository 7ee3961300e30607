"""
Driver endpoints
================

POST /drivers/{driver_id}/status -- go online/offline, report location
GET  /drivers/{driver_id}/trips  -- trip history, oldest first
"""

from fastapi import APIRouter, Depends, Request

from greenbharat.api.dependencies import get_core
from greenbharat.api.middleware import limiter
from greenbharat.api.schemas import (
    DriverEnvelope,
    DriverResponse,
    DriverStatusRequest,
    ErrorResponse,
    TripListResponse,
    TripResponse,
)
from greenbharat.config import settings
from greenbharat.services.core import RideHailingCore

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post(
    "/{driver_id}/status",
    response_model=DriverEnvelope,
    summary="Update online flag and location",
    description="Location is stored only when both ``lat`` and ``lng`` are sent.",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def update_status(
    request: Request,
    driver_id: str,
    body: DriverStatusRequest,
    core: RideHailingCore = Depends(get_core),
):
    driver = await core.accounts.update_driver_status(
        driver_id, is_online=body.is_online, location=body.location()
    )
    return DriverEnvelope(driver=DriverResponse.from_entity(driver))


@router.get(
    "/{driver_id}/trips",
    response_model=TripListResponse,
    summary="Driver trip history",
)
@limiter.limit(settings.rate_limit)
async def driver_trips(
    request: Request,
    driver_id: str,
    core: RideHailingCore = Depends(get_core),
):
    trips = await core.history.trips_for_driver(driver_id)
    return TripListResponse(trips=[TripResponse.from_entity(t) for t in trips])
