"""Health check endpoint.

GET /v1/health: reports whether the certificate store is reachable.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Service health check. Pings Redis."""
    redis_ok = False
    try:
        store = request.app.state.certificate_store
        await store.client.ping()
        redis_ok = True
    except Exception:
        logger.warning("health_check_redis_failed")

    return {
        "status": "healthy" if redis_ok else "unhealthy",
        "redis": redis_ok,
        "version": "0.1.0",
    }
