"""
api/main.py -- FastAPI application entry point for ParcelTrack.

Run with:  python main.py serve
           uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- one INFO line per request with latency

Lifespan opens the user and shipment stores, loads seed data when configured,
and closes both stores on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import (
    API_VERSION,
    SERVER_NAME,
    ApiInfoResponse,
    ErrorResponse,
    HealthResponse,
    RouteNotFoundResponse,
)
from api.routes.admin import router as admin_router
from api.routes.auth import router as auth_router
from api.routes.shipments import router as shipments_router
from api.routes.users import router as users_router
from api.seed import load_dataset, seed_stores
from auth.store import UserStore
from core.config import get_settings
from core.errors import InternalError, ParcelTrackError
from shipments.store import ShipmentStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("parceltrack.api")

settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open stores on startup and close them on shutdown.

    Seeding runs only against an empty user store, so restarting against a
    persistent DATABASE_URL does not try to insert the dataset twice.
    """
    logger.info("ParcelTrack API starting up")
    app.state.user_store = UserStore(settings.database_url)
    app.state.shipment_store = ShipmentStore(settings.database_url, tracking_prefix=settings.tracking_prefix)

    dataset = load_dataset(settings)
    if dataset is not None:
        if app.state.user_store.has_users():
            logger.info("Stores already populated -- skipping seed data")
        else:
            seed_stores(app.state.user_store, app.state.shipment_store, dataset)

    logger.info(
        "Stores initialized (users=%d, shipments=%d)",
        app.state.user_store.count(),
        app.state.shipment_store.count(),
    )

    yield

    app.state.shipment_store.close()
    app.state.user_store.close()
    logger.info("ParcelTrack API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title=SERVER_NAME,
    description="Shipment tracking with customer accounts, ownership checks and an admin view.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["User"])
app.include_router(shipments_router, prefix="/api", tags=["Shipments"])
app.include_router(admin_router, prefix="/api", tags=["Admin"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error leaves the API as {"success": false, "message", "code"} so
# clients can parse failures without branching on status code. The one
# addition is availableEndpoints on an unknown-route 404.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code).model_dump(by_alias=True),
    )


@app.exception_handler(ParcelTrackError)
async def parceltrack_error_handler(request: Request, exc: ParcelTrackError) -> JSONResponse:
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 naming the body fields that are missing or invalid."""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    message = "Required fields are missing or invalid: " + ", ".join(fields) if fields else "Invalid request body"
    return _error(400, message, "validation_error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes list the available endpoints; other HTTP errors use the plain envelope."""
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content=RouteNotFoundResponse().model_dump(by_alias=True),
        )
    return _error(exc.status_code, str(exc.detail), f"http_{exc.status_code}")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected failures. The client never sees the exception text."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    err = InternalError()
    return _error(err.status_code, err.message, err.code)


# ---------------------------------------------------------------------------
# Health and index
#
# Defined directly in main.py (not in a router) so they are always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return liveness, server name and version."""
    return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())


@app.get("/api", tags=["Health"])
async def api_info() -> ApiInfoResponse:
    """Return a short index of the API's resource groups."""
    return ApiInfoResponse(
        endpoints={
            "auth": "/api/auth",
            "user": "/api/user",
            "tracking": "/api/track/:trackingNumber",
            "shipments": "/api/shipments",
            "admin": "/api/admin",
            "health": "/api/health",
        }
    )
