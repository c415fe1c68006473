"""
Error responses.

Domain errors are mapped to HTTP status codes by their ``code``; request
validation failures become ``400`` with the offending fields listed.  Every
error body has the shape ``{"error": ..., "message": ...}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.errors import DomainError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    "rider_not_found": 404,
    "trip_not_found": 404,
    "promotion_not_found": 404,
    "invalid_transition": 409,
    "trip_busy": 409,
    "duplicate_rating": 409,
    "trip_not_completed": 400,
    "invalid_trip_price": 400,
    "promotion_expired": 400,
    "promotion_inactive": 400,
    "invalid_promotion": 400,
    "out_of_range": 400,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status = STATUS_BY_CODE.get(exc.code, 400)
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "message": exc.message},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_failed",
            "message": "Validation failed",
            "details": details,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
