"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aviator.config import get_settings
from aviator.application.services import seed_sample_data
from aviator.infrastructure.dependencies import StoreContainer, build_container
from aviator.infrastructure.logging.log_config import setup_logging
from aviator.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


def _initialise_store(container: StoreContainer) -> None:
    """Load persisted collections, take the startup snapshot and seed demo data."""
    settings = container.settings

    # 1. Read every collection; missing or corrupt keys fall back to empty defaults
    container.store.load()

    # 2. Startup snapshot (never raises)
    if container.backups.create_snapshot() is None:
        logger.warning("Startup snapshot could not be written; continuing without it")

    # 3. Demo records for an empty store
    if settings.seed_sample_data:
        seed_sample_data(container.store)

    metadata = container.store.metadata
    logger.info("Record store ready: %s", metadata.record_counts)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — load the store and run the maintenance timers."""
    settings = get_settings()
    setup_logging()

    container = build_container(settings)
    _initialise_store(container)
    app.state.container = container

    if settings.prediction_cycle_enabled:
        container.scheduler.add_prediction_cycle(container.engine)
    if settings.maintenance_enabled:
        await container.scheduler.start()

    yield

    # Shutdown: stop() performs the final autosave
    if container.scheduler.running:
        await container.scheduler.stop()
    else:
        container.scheduler.run_job("autosave")


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "aviator.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
