"""
Trip endpoints
==============

POST /trips                -- request a trip (matched immediately if possible)
GET  /trips/{trip_id}      -- current state of a trip
POST /trips/{trip_id}/accept  -- a driver takes a searching trip
POST /trips/{trip_id}/start   -- the assigned driver picks the rider up
POST /trips/{trip_id}/end     -- the assigned driver completes the trip
POST /trips/{trip_id}/cancel  -- rider or assigned driver cancels
"""

from fastapi import APIRouter, Depends, Request

from greenbharat.api.dependencies import get_core
from greenbharat.api.middleware import limiter
from greenbharat.api.schemas import (
    CancelTripRequest,
    DriverActionRequest,
    DriverResponse,
    EndTripRequest,
    ErrorResponse,
    TripCreateRequest,
    TripEnvelope,
    TripRequestResponse,
    TripResponse,
)
from greenbharat.config import settings
from greenbharat.services.core import RideHailingCore

router = APIRouter(prefix="/trips", tags=["trips"])

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=TripRequestResponse,
    summary="Request a trip",
    responses={
        201: {"description": "Trip created; assigned if a driver was free."},
        404: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def request_trip(
    request: Request,
    body: TripCreateRequest,
    core: RideHailingCore = Depends(get_core),
):
    result = await core.trips.request_trip(
        rider_id=body.rider_id,
        pickup=body.pickup(),
        drop=body.drop(),
        car_class=body.car_type,
        payment_mode=body.payment_mode,
    )
    return TripRequestResponse(
        trip=TripResponse.from_entity(result.trip),
        assigned_driver=(
            DriverResponse.from_entity(result.driver) if result.driver else None
        ),
    )


@router.get(
    "/{trip_id}",
    response_model=TripEnvelope,
    summary="Get trip status and fare",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: str,
    core: RideHailingCore = Depends(get_core),
):
    trip = await core.trips.get_trip(trip_id)
    return TripEnvelope(trip=TripResponse.from_entity(trip))


@router.post(
    "/{trip_id}/accept",
    response_model=TripEnvelope,
    summary="Driver accepts a searching trip",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def accept_trip(
    request: Request,
    trip_id: str,
    body: DriverActionRequest,
    core: RideHailingCore = Depends(get_core),
):
    trip = await core.trips.accept_trip(trip_id, body.driver_id)
    return TripEnvelope(trip=TripResponse.from_entity(trip))


@router.post(
    "/{trip_id}/start",
    response_model=TripEnvelope,
    summary="Start an assigned trip",
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def start_trip(
    request: Request,
    trip_id: str,
    body: DriverActionRequest,
    core: RideHailingCore = Depends(get_core),
):
    trip = await core.trips.start_trip(trip_id, body.driver_id)
    return TripEnvelope(trip=TripResponse.from_entity(trip))


@router.post(
    "/{trip_id}/end",
    response_model=TripEnvelope,
    summary="Complete an ongoing trip",
    description=(
        "Sets the final fare to ``finalFare`` when it is positive, "
        "otherwise to the estimated fare, and frees the driver."
    ),
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def end_trip(
    request: Request,
    trip_id: str,
    body: EndTripRequest,
    core: RideHailingCore = Depends(get_core),
):
    trip = await core.trips.end_trip(trip_id, body.driver_id, body.final_fare)
    return TripEnvelope(trip=TripResponse.from_entity(trip))


@router.post(
    "/{trip_id}/cancel",
    response_model=TripEnvelope,
    summary="Cancel a trip",
    description=(
        "Transitions a searching or assigned trip to cancelled. "
        "A reserved driver is freed."
    ),
    responses=_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def cancel_trip(
    request: Request,
    trip_id: str,
    body: CancelTripRequest,
    core: RideHailingCore = Depends(get_core),
):
    trip = await core.trips.cancel_trip(trip_id, body.actor_id)
    return TripEnvelope(trip=TripResponse.from_entity(trip))
