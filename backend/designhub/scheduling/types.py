"""Plain records exchanged between the scheduling engine and its stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID

from designhub.scheduling.assignees import primary_assignee

TaskField = Literal["title", "start_date", "due_date", "status", "notes", "assignees"]
EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "start_date", "due_date", "status", "notes", "assignees"}
)


class ScheduleKind(StrEnum):
    NONE = "none"
    OFFSET = "offset"

    @classmethod
    def from_db(cls, raw: str | None) -> ScheduleKind:
        if not raw:
            return cls.NONE
        try:
            return cls(raw)
        except ValueError:
            return cls.NONE


class TaskStatus(StrEnum):
    TODO = "todo"
    DONE = "done"


@dataclass(slots=True, frozen=True)
class ProjectRecord:
    id: UUID
    name: str
    designer: str | None = None
    project_type: str | None = None
    start_date: date | None = None
    status: str = "active"
    completed_at: datetime | None = None
    completion_notes: str | None = None
    abandoned_at: datetime | None = None
    abandon_reason: str | None = None
    created_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class TaskTemplateRecord:
    id: UUID
    title: str
    role: str | None
    position: int
    schedule_kind: ScheduleKind = ScheduleKind.NONE
    anchor_template_id: UUID | None = None
    offset_days: int | None = None
    created_at: datetime | None = None

    @property
    def is_offset(self) -> bool:
        return self.schedule_kind is ScheduleKind.OFFSET and self.anchor_template_id is not None


@dataclass(slots=True, frozen=True)
class NewTask:
    """Row handed to `TaskStore.insert_tasks`."""

    project_id: UUID
    title: str
    position: int
    template_id: UUID | None = None
    role: str | None = None
    assignees: tuple[str, ...] = ()
    status: TaskStatus = TaskStatus.TODO
    start_date: date | None = None
    due_date: date | None = None
    notes: str | None = None

    @property
    def assignee(self) -> str | None:
        return primary_assignee(self.assignees)


@dataclass(slots=True, frozen=True)
class TaskRecord:
    id: UUID
    project_id: UUID
    title: str
    position: int
    template_id: UUID | None = None
    role: str | None = None
    assignees: tuple[str, ...] = ()
    status: TaskStatus = TaskStatus.TODO
    start_date: date | None = None
    due_date: date | None = None
    notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def assignee(self) -> str | None:
        """Primary assignee for single-assignee consumers."""
        return primary_assignee(self.assignees)


@dataclass(slots=True, frozen=True)
class DependencyRecord:
    task_id: UUID
    anchor_task_id: UUID
    offset_days: int = 0


@dataclass(slots=True, frozen=True)
class FieldUpdate:
    """Notification that a task field was persisted with a new value."""

    task_id: UUID
    field: TaskField
    new_value: Any
    source: str = "user"  # user, date_rule, dependency

    def as_dict(self) -> dict[str, Any]:
        value = self.new_value
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, tuple):
            value = list(value)
        return {
            "task_id": str(self.task_id),
            "field": self.field,
            "new_value": value,
            "source": self.source,
        }


@dataclass(slots=True, frozen=True)
class Reminder:
    anchor_title: str
    target_title: str
    task_id: UUID
    line_number: int | None
    message: str


@dataclass(slots=True)
class EditOutcome:
    """Everything an edit caused: persisted updates and advisory reminders."""

    updates: list[FieldUpdate] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=list)
