"""Translation of core errors and request validation failures to HTTP."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from greenbharat.domain.errors import (
    DriverOffline,
    Forbidden,
    InvalidState,
    NotFound,
    RideHailingError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: list[tuple[type[RideHailingError], int]] = [
    (NotFound, 404),
    (Forbidden, 403),
    (InvalidState, 400),
    (DriverOffline, 400),
    (ValidationError, 400),
]


def status_for(exc: RideHailingError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def core_error_handler(request: Request, exc: RideHailingError) -> JSONResponse:
    status_code = status_for(exc)
    logger.warning(
        "%s %s rejected (%d): %s", request.method, request.url.path, status_code, exc
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"detail": problems})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RideHailingError, core_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
