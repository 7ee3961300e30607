"""
Login endpoints
===============

POST /auth/rider/login  -- find-or-create a rider by phone number
POST /auth/driver/login -- find-or-create a driver by phone number
"""

from fastapi import APIRouter, Depends, Request

from greenbharat.api.dependencies import get_core
from greenbharat.api.middleware import limiter
from greenbharat.api.schemas import (
    DriverEnvelope,
    DriverLoginRequest,
    DriverResponse,
    RiderEnvelope,
    RiderLoginRequest,
    RiderResponse,
)
from greenbharat.config import settings
from greenbharat.services.core import RideHailingCore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/rider/login", response_model=RiderEnvelope, summary="Rider login")
@limiter.limit(settings.rate_limit)
async def rider_login(
    request: Request,
    body: RiderLoginRequest,
    core: RideHailingCore = Depends(get_core),
):
    rider = await core.accounts.login_rider(body.phone)
    return RiderEnvelope(rider=RiderResponse.from_entity(rider))


@router.post(
    "/driver/login",
    response_model=DriverEnvelope,
    summary="Driver login",
    description="``carType`` only applies when the driver is new.",
)
@limiter.limit(settings.rate_limit)
async def driver_login(
    request: Request,
    body: DriverLoginRequest,
    core: RideHailingCore = Depends(get_core),
):
    driver = await core.accounts.login_driver(body.phone, body.car_type)
    return DriverEnvelope(driver=DriverResponse.from_entity(driver))
