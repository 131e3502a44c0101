"""FastAPI application for the hotel booking service."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from . import models  # noqa: F401  registers tables on Base.metadata
from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import audit_router, booking_router, health_router, metrics_router, room_router
from .workers.manager import worker_manager

API_VERSION = "1.0.0"

setup_structured_logging()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Bring up tracing, metrics and the schema, then run the hold sweeper
    for as long as the app serves requests.
    """
    logger.info("Starting hotel booking API", extra={"environment": settings.environment})

    try:
        setup_tracing()
        setup_metrics()
        instrument_sqlalchemy()

        await init_db()
        logger.info("Database schema ready")

        if settings.run_workers:
            await worker_manager.start_all()
        else:
            logger.info("Background workers disabled by RUN_WORKERS")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Shutting down hotel booking API")
    try:
        if settings.run_workers:
            await worker_manager.stop_all()
        await close_db()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def _register_probes(app: FastAPI) -> None:
    """Liveness, readiness and info endpoints outside the versioned API."""

    @app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"], summary="Liveness")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": API_VERSION,
            "environment": settings.environment,
            "debug": settings.debug,
        }

    @app.get("/ready", tags=["Health"], summary="Readiness")
    async def readiness_check():
        """503 with ``not_ready`` while the database cannot be queried."""
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database = "ok"
        except Exception as e:
            logger.warning(f"Readiness check failed: {e}")
            database = "unavailable"

        body = {
            "status": "ready" if database == "ok" else "not_ready",
            "service": SERVICE_NAME,
            "checks": {
                "database": database,
                "workers": worker_manager.get_worker_status(),
            },
        }
        if database != "ok":
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
        return body

    @app.get("/info", tags=["Info"], summary="Service Information")
    async def service_info() -> dict:
        return {
            "service": SERVICE_NAME,
            "version": API_VERSION,
            "description": "Hotel room booking with holds, confirmation, cancellation and staff workflows",
            "environment": settings.environment,
            "hold_sweep_interval_seconds": settings.hold_sweep_interval_seconds,
            "features": ["holds", "walk_in", "packages", "cash_payment", "audit", "problem_details"],
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
            },
        }


def create_app() -> FastAPI:
    """Build the application with middleware, problem handlers and every router."""
    app = FastAPI(
        title="Hotel Booking API",
        description="RPC-over-HTTP API for hotel room bookings with fifteen-minute holds, staff status changes and an audit trail",
        version=API_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )
    setup_middleware(app, enable_logging=True)
    instrument_fastapi(app)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    _register_probes(app)
    for router in (health_router, booking_router, room_router, audit_router, metrics_router):
        app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hotel_booking.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
