"""FastAPI application factory.

Creates and configures the revision manager admin API with lifespan
management for the Redis connection.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from revision_manager.adapters.redis.store import RedisCertificateStore
from revision_manager.api.middleware import register_middleware
from revision_manager.api.routes.admin import router as admin_router
from revision_manager.api.routes.health import router as health_router
from revision_manager.log_config import configure_logging
from revision_manager.settings import Settings
from revision_manager.worker.reconciler import Reconciler

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the Redis connection across the app lifecycle."""
    settings = Settings()
    configure_logging(settings.log_level, json=settings.log_json)

    # -- Startup: create store and reconciler ------------------------------
    store = await RedisCertificateStore.create(settings.redis)

    app.state.settings = settings
    app.state.certificate_store = store
    app.state.reconciler = Reconciler(store)

    logger.info("app_started", redis_host=settings.redis.host)

    yield

    # -- Shutdown: release connections -------------------------------------
    await store.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application."""
    app = FastAPI(
        title="Revision Manager API",
        description="Certificate request revision history pruning",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_middleware(app)

    app.include_router(health_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")

    return app
