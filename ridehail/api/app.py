"""
FastAPI application factory.

* Registers routes for auth, rides, drivers, vehicles and admin.
* Maps the domain error taxonomy onto HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.middleware import limiter
from ridehail.api.routes import admin, auth, drivers, rides, vehicles
from ridehail.config import settings
from ridehail.domain.errors import AuthenticationError, RideHailError
from ridehail.infrastructure.database import engine

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled DB connections on shutdown."""
    logger.info("Ride-hailing API starting")
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── Error handlers ────────────────────────────────────────────────────


async def domain_error_handler(request: Request, exc: RideHailError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if isinstance(exc, AuthenticationError)
        else None
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation error", "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride-Hailing API",
        description=(
            "Fare estimation, ride ordering and the ride lifecycle from "
            "request through driver assignment to completion and rating, "
            "plus driver and vehicle administration."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Errors
    app.add_exception_handler(RideHailError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(drivers.router, prefix="/api/v1")
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
