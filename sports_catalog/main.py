"""
Main FastAPI application for the Sports Catalog API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from sports_catalog.api.routes import resolve, sync
from sports_catalog.core.config import settings
from sports_catalog.core.database import get_session_factory, init_db
from sports_catalog.core.logging import configure_logging, get_logger
from sports_catalog.core.middleware import CorrelationIdMiddleware
from sports_catalog.models.seed import seed_sports
from sports_catalog.services.catalog.coordinator import SportClientCoordinator

# Configure structured logging (JSON unless LOG_JSON=false)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()
    session_factory = get_session_factory()
    with session_factory() as db:
        seed_sports(db)

    coordinator = SportClientCoordinator(session_factory)
    coordinator.initialize()
    app.state.coordinator = coordinator

    if settings.SCHEDULER_ENABLED:
        from sports_catalog.core.scheduler import start_scheduler
        await start_scheduler(coordinator)
        logger.info("Catalog sync scheduler started")

    logger.info("Application started")

    yield

    # Shutdown
    if settings.SCHEDULER_ENABLED:
        from sports_catalog.core.scheduler import stop_scheduler
        await stop_scheduler()
    await coordinator.close()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Canonical sports catalog (sports, teams, players, stadiums) with provider sync and alias resolution",
    lifespan=lifespan
)

app.add_middleware(CorrelationIdMiddleware)

# API v1
app.include_router(sync.router, prefix="/api/v1")
app.include_router(resolve.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "api_version": "v1",
            "sync": "/api/v1/sync",
            "resolve": "/api/v1/resolve",
            "docs": "/docs",
            "health": "/health"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    coordinator = getattr(app.state, "coordinator", None)
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "coordinator": coordinator.state.value if coordinator is not None else "absent"
    }
