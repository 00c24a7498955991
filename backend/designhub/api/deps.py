"""Shared API dependencies and error mapping."""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from designhub.config import Settings, get_settings
from designhub.db.session import get_db_session
from designhub.scheduling.exceptions import FieldUpdateError, SchedulingError
from designhub.scheduling.rules import DEFAULT_RULEBOOK, CascadePolicy
from designhub.services.materializer import TaskMaterializer
from designhub.services.stores import SchedulingStores
from designhub.services.task_editing import TaskEditService


async def get_scheduling_stores(
    db: AsyncSession = Depends(get_db_session),
) -> SchedulingStores:
    """Stores bound to the request's database session."""
    return SchedulingStores.from_session(db)


Stores = Annotated[SchedulingStores, Depends(get_scheduling_stores)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def cascade_policy(settings: Settings) -> CascadePolicy:
    return CascadePolicy(
        max_cascade_hops=settings.scheduling_max_cascade_hops,
        normalize_start_targets=settings.scheduling_normalize_start_targets,
    )


def build_materializer(stores: SchedulingStores, settings: Settings) -> TaskMaterializer:
    return TaskMaterializer(
        stores.templates,
        stores.tasks,
        stores.dependencies,
        designer_fallback=settings.designer_fallback_name,
    )


def build_edit_service(stores: SchedulingStores, settings: Settings) -> TaskEditService:
    return TaskEditService(
        stores.tasks,
        stores.dependencies,
        rulebook=DEFAULT_RULEBOOK,
        policy=cascade_policy(settings),
        designer_fallback=settings.designer_fallback_name,
    )


def scheduling_error(exc: SchedulingError) -> HTTPException:
    """503 carrying the error code and, for field updates, what was applied first."""
    detail: dict[str, Any] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, FieldUpdateError):
        detail["applied"] = [update.as_dict() for update in exc.applied]
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
