"""Health check endpoints."""

from fastapi import APIRouter

from designhub.api.deps import Stores
from designhub.config import get_settings
from designhub.scheduling.exceptions import TemplateLoadError

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(stores: Stores) -> dict[str, str | dict[str, str]]:
    """
    Readiness check.

    A project created before the task template library is seeded gets no
    tasks, so an empty library counts as not ready.
    """
    checks: dict[str, str] = {}

    try:
        templates = await stores.templates.list_templates()
    except TemplateLoadError as e:
        checks["database"] = f"unhealthy: {e.message}"
        checks["template_library"] = "unknown"
    else:
        checks["database"] = "healthy"
        checks["template_library"] = (
            "healthy" if templates else "unhealthy: no task templates seeded"
        )

    overall_status = "healthy" if all(v == "healthy" for v in checks.values()) else "unhealthy"

    return {
        "status": overall_status,
        "version": settings.app_version,
        "checks": checks,
    }
