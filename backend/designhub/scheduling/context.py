"""Per-project scheduling state owned by one editing session."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

import structlog

from designhub.scheduling.exceptions import TaskNotFoundError
from designhub.scheduling.ports import TaskStore, TemplateProvider
from designhub.scheduling.titles import TitleIndex, normalize, ordered_tasks, title_key
from designhub.scheduling.types import (
    FieldUpdate,
    ProjectRecord,
    TaskRecord,
    TaskStatus,
    TaskTemplateRecord,
)

logger = structlog.get_logger()


class SchedulingContext:
    """Ordered task snapshot and title index for one loaded project.

    Built fresh on every project load and passed explicitly to engine
    operations; never shared between projects or sessions. Successful writes
    are reflected into the snapshot so later steps of the same edit see them.
    """

    def __init__(
        self,
        project: ProjectRecord,
        tasks: Iterable[TaskRecord],
        templates: Iterable[TaskTemplateRecord] = (),
    ) -> None:
        self.project = project
        self.templates = tuple(templates)
        self._template_titles = {t.id: normalize(t.title) for t in self.templates}
        self._tasks: dict[UUID, TaskRecord] = {}
        self._order: list[UUID] = []
        self.index = TitleIndex({}, {})
        self._rebuild(tasks)

    @classmethod
    async def load(
        cls,
        project: ProjectRecord,
        task_store: TaskStore,
        template_provider: TemplateProvider | None = None,
    ) -> SchedulingContext:
        tasks = await task_store.list_tasks(project.id)
        templates = await template_provider.list_templates() if template_provider else []
        logger.debug(
            "scheduling_context_loaded",
            project_id=str(project.id),
            task_count=len(tasks),
        )
        return cls(project, tasks, templates)

    async def refresh(self, task_store: TaskStore) -> None:
        """Reload the snapshot from the store, discarding local state."""
        self._rebuild(await task_store.list_tasks(self.project.id))

    def _rebuild(self, tasks: Iterable[TaskRecord]) -> None:
        ordered = ordered_tasks(tasks)
        self._tasks = {task.id: task for task in ordered}
        self._order = [task.id for task in ordered]
        self.index = TitleIndex.build(ordered, self.templates)

    # ---- reads ----

    @property
    def tasks(self) -> list[TaskRecord]:
        return [self._tasks[task_id] for task_id in self._order]

    def get(self, task_id: UUID) -> TaskRecord | None:
        return self._tasks.get(task_id)

    def require(self, task_id: UUID) -> TaskRecord:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def __len__(self) -> int:
        return len(self._order)

    def title_key(self, task_id: UUID) -> str:
        key = self.index.key_for(task_id)
        if key is None:
            key = title_key(self.require(task_id), self._template_titles)
        return key

    def find_by_occurrence(self, title: str, occurrence: int = 1) -> TaskRecord | None:
        task_id = self.index.find_by_occurrence(title, occurrence)
        return self._tasks.get(task_id) if task_id is not None else None

    def line_number(self, task_id: UUID) -> int | None:
        """1-based row of the task in the project's ordered list."""
        try:
            return self._order.index(task_id) + 1
        except ValueError:
            return None

    def next_position(self) -> int:
        if not self._order:
            return 1
        return max(task.position for task in self._tasks.values()) + 1

    # ---- writes ----

    def reflect(self, update: FieldUpdate) -> None:
        """Apply a persisted change to the snapshot."""
        task = self._tasks.get(update.task_id)
        if task is None:
            return
        value = update.new_value
        changes: dict[str, object] = {}
        if update.field == "assignees":
            value = tuple(value or ())
        elif update.field == "status":
            value = TaskStatus(value)
            if value is TaskStatus.DONE:
                changes["completed_at"] = task.completed_at or datetime.now(timezone.utc)
            else:
                changes["completed_at"] = None
        changes[update.field] = value
        self._tasks[task.id] = replace(task, **changes)
        if update.field == "title":
            self._rebuild(self._tasks.values())

    def add(self, task: TaskRecord) -> None:
        self._rebuild([*self._tasks.values(), task])
