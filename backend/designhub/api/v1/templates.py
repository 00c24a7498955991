"""Task template library endpoints."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from designhub.api.deps import Stores, scheduling_error
from designhub.scheduling.exceptions import SchedulingError

router = APIRouter()


class TaskTemplateResponse(BaseModel):
    """Task template response model."""

    id: UUID
    title: str
    role: str | None
    position: int
    schedule_kind: str
    anchor_template_id: UUID | None
    offset_days: int | None


@router.get("", response_model=list[TaskTemplateResponse])
async def list_task_templates(stores: Stores) -> list[TaskTemplateResponse]:
    """The template library in position order."""
    try:
        templates = await stores.templates.list_templates()
    except SchedulingError as exc:
        raise scheduling_error(exc) from exc
    return [
        TaskTemplateResponse(
            id=t.id,
            title=t.title,
            role=t.role,
            position=t.position,
            schedule_kind=str(t.schedule_kind),
            anchor_template_id=t.anchor_template_id,
            offset_days=t.offset_days,
        )
        for t in templates
    ]
