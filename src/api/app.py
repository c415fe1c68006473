"""
FastAPI application factory.

* Registers routes for riders, trips, promotions and admin.
* Maps domain errors to JSON error responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.errors import register_error_handlers
from src.api.middleware import limiter
from src.api.routes import admin, promotions, riders, trips
from src.infrastructure.redis_client import close_redis

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared Redis pool on shutdown."""
    yield
    await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title="MotoRide Trip Engine API",
        description=(
            "Motorcycle ride-hailing backend: finds nearby riders, prices "
            "and tracks trips through their lifecycle, and applies "
            "promotional discounts."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_error_handlers(app)

    # Routers
    app.include_router(riders.router, prefix="/api/v1")
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(promotions.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
