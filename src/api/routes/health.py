"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from catalog.exceptions import CatalogLoadError
from catalog.repository import CatalogRepository, get_catalog_repository
from config.settings import get_settings


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "catalog-api",
    }


@router.get("/health/detailed")
def detailed_health_check(
    repo: CatalogRepository = Depends(get_catalog_repository),
) -> Dict[str, Any]:
    """
    Detailed health check with catalog status.

    Checks:
    - Configuration loaded
    - Catalog source readable and non-empty
    """
    settings = get_settings()

    catalog_status = "unknown"
    catalog_error = None
    stats: Dict[str, Any] = {}
    try:
        stats = repo.stats()
        catalog_status = "loaded" if stats["products"] else "empty"
    except CatalogLoadError as e:
        catalog_status = "error"
        catalog_error = str(e)

    return {
        "status": "healthy" if catalog_status == "loaded" else "degraded",
        "service": "catalog-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "catalog": {
                "status": catalog_status,
                "error": catalog_error,
                **stats,
            },
        },
    }


@router.get("/ready")
def readiness_check(
    repo: CatalogRepository = Depends(get_catalog_repository),
) -> Dict[str, str]:
    """
    Kubernetes-style readiness probe.

    Ready once the catalog has loaded.
    """
    try:
        repo.load()
    except CatalogLoadError:
        return {"status": "not_ready", "reason": "catalog_unavailable"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes-style liveness probe."""
    return {"status": "alive"}
