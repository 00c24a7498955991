"""
Ports (interfaces) used by the scheduling engine.

The engine depends on Protocols instead of concrete stores, so the SQLAlchemy
implementations and the in-memory test doubles are interchangeable.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol
from uuid import UUID

from designhub.scheduling.types import (
    DependencyRecord,
    FieldUpdate,
    NewTask,
    ProjectRecord,
    Reminder,
    TaskField,
    TaskRecord,
    TaskTemplateRecord,
)


class TemplateProvider(Protocol):
    """Read-only template library, ordered by position then creation time."""

    async def list_templates(self) -> list[TaskTemplateRecord]: ...


class TaskStore(Protocol):
    async def insert_tasks(self, rows: Sequence[NewTask]) -> list[UUID]:
        """Insert rows and return their ids in input order."""
        ...

    async def list_tasks(self, project_id: UUID) -> list[TaskRecord]:
        """Tasks of a project ordered by position, then creation time."""
        ...

    async def update_task_field(self, task_id: UUID, field: TaskField, value: Any) -> None:
        """Persist one field; raises FieldUpdateError on failure."""
        ...


class DependencyStore(Protocol):
    async def insert_dependencies(self, rows: Sequence[DependencyRecord]) -> None: ...

    async def list_dependencies(self, anchor_task_id: UUID) -> list[DependencyRecord]: ...


class ProjectProvider(Protocol):
    async def get_project(self, project_id: UUID) -> ProjectRecord | None: ...


class ChangeListener(Protocol):
    """Presentation-side sink for persisted changes and reminders."""

    def task_updated(self, update: FieldUpdate) -> None: ...

    def reminder(self, reminder: Reminder) -> None: ...


class NullListener:
    """Listener that ignores everything."""

    def task_updated(self, update: FieldUpdate) -> None:
        return

    def reminder(self, reminder: Reminder) -> None:
        return


class CollectingListener:
    """Listener that keeps every notification in arrival order."""

    def __init__(self) -> None:
        self.updates: list[FieldUpdate] = []
        self.reminders: list[Reminder] = []

    def task_updated(self, update: FieldUpdate) -> None:
        self.updates.append(update)

    def reminder(self, reminder: Reminder) -> None:
        self.reminders.append(reminder)
