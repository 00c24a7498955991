"""Tasks API endpoints."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from designhub.api.deps import AppSettings, Stores, build_edit_service, scheduling_error
from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.exceptions import SchedulingError, TaskNotFoundError
from designhub.scheduling.types import FieldUpdate, Reminder, TaskRecord

router = APIRouter()
logger = structlog.get_logger()


# Request/Response Models
class TaskUpdate(BaseModel):
    """Edit one or more fields of a task. Explicit nulls clear a field."""

    title: str | None = Field(None, min_length=1, max_length=500)
    notes: str | None = None
    status: str | None = Field(None, pattern="^(todo|done)$")
    assignees: list[str] | None = None
    start_date: date | None = None
    due_date: date | None = None


class TaskResponse(BaseModel):
    """Task response model."""

    id: UUID
    project_id: UUID
    template_id: UUID | None
    title: str
    role: str | None
    assignees: list[str]
    assignee: str | None
    status: str
    start_date: date | None
    due_date: date | None
    notes: str | None
    position: int
    line_number: int | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_record(cls, task: TaskRecord, line_number: int | None = None) -> "TaskResponse":
        return cls(
            id=task.id,
            project_id=task.project_id,
            template_id=task.template_id,
            title=task.title,
            role=task.role,
            assignees=list(task.assignees),
            assignee=task.assignee,
            status=str(task.status),
            start_date=task.start_date,
            due_date=task.due_date,
            notes=task.notes,
            position=task.position,
            line_number=line_number,
            completed_at=task.completed_at,
        )


class FieldUpdateResponse(BaseModel):
    task_id: UUID
    field: str
    new_value: Any
    source: str

    @classmethod
    def from_update(cls, update: FieldUpdate) -> "FieldUpdateResponse":
        return cls(**update.as_dict())


class ReminderResponse(BaseModel):
    task_id: UUID
    anchor_title: str
    target_title: str
    line_number: int | None
    message: str

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> "ReminderResponse":
        return cls(
            task_id=reminder.task_id,
            anchor_title=reminder.anchor_title,
            target_title=reminder.target_title,
            line_number=reminder.line_number,
            message=reminder.message,
        )


class TaskEditResponse(BaseModel):
    """The edited task plus every change and reminder the edit produced."""

    task: TaskResponse
    updates: list[FieldUpdateResponse]
    reminders: list[ReminderResponse]


# Endpoints
async def _load_task_context(stores: Stores, task_id: UUID) -> SchedulingContext:
    task = await stores.tasks.get_task(task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    project = await stores.projects.get_project(task.project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    try:
        return await SchedulingContext.load(project, stores.tasks, stores.templates)
    except SchedulingError as exc:
        raise scheduling_error(exc) from exc


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, stores: Stores) -> TaskResponse:
    """Get a task with its row number in the project list."""
    context = await _load_task_context(stores, task_id)
    return TaskResponse.from_record(context.require(task_id), context.line_number(task_id))


@router.patch("/{task_id}", response_model=TaskEditResponse)
async def update_task(
    task_id: UUID,
    task_data: TaskUpdate,
    stores: Stores,
    settings: AppSettings,
) -> TaskEditResponse:
    """Edit a task and run the date rules and cascades the edit triggers."""
    changes = {field: getattr(task_data, field) for field in task_data.model_fields_set}
    for field in ("title", "status"):
        if field in changes and changes[field] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{field} cannot be cleared",
            )

    context = await _load_task_context(stores, task_id)
    service = build_edit_service(stores, settings)
    try:
        outcome = await service.apply_changes(context, task_id, changes)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except SchedulingError as exc:
        raise scheduling_error(exc) from exc
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info(
        "task_edited",
        task_id=str(task_id),
        fields=sorted(changes),
        updates=len(outcome.updates),
        reminders=len(outcome.reminders),
    )
    return TaskEditResponse(
        task=TaskResponse.from_record(context.require(task_id), context.line_number(task_id)),
        updates=[FieldUpdateResponse.from_update(u) for u in outcome.updates],
        reminders=[ReminderResponse.from_reminder(r) for r in outcome.reminders],
    )
