"""
Health check endpoints.

Provides endpoints for monitoring and load balancer health checks.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_store
from core.config import settings
from core.logging import get_logger
from core.storage import BaseStore


logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """
    Basic health check.

    Returns 200 if the service is running.
    """
    return {
        "status": "healthy",
        "service": "storefront-api",
    }


@router.get("/ready")
async def readiness_check(store: BaseStore = Depends(get_store)):
    """
    Readiness check.

    Returns 503 while the store does not answer a ping.
    """
    if not await store.ping():
        logger.warning("Readiness check failed", storage_backend=settings.storage_backend)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unavailable",
                "checks": {"database": "error"},
            },
        )

    return {
        "status": "ready",
        "checks": {
            "database": "ok",
            "storage_backend": settings.storage_backend,
        },
    }
