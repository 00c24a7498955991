# tests/fakes.py

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from designhub.scheduling.exceptions import (
    DependencyInsertError,
    FieldUpdateError,
    TaskInsertError,
    TemplateLoadError,
)
from designhub.scheduling.types import (
    DependencyRecord,
    NewTask,
    ProjectRecord,
    ScheduleKind,
    TaskRecord,
    TaskStatus,
    TaskTemplateRecord,
)
from designhub.services.projects import ProjectCounters

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_template(
    title: str,
    position: int,
    role: str | None = None,
    anchor: TaskTemplateRecord | None = None,
    offset_days: int | None = None,
) -> TaskTemplateRecord:
    return TaskTemplateRecord(
        id=uuid4(),
        title=title,
        role=role,
        position=position,
        schedule_kind=ScheduleKind.OFFSET if anchor is not None else ScheduleKind.NONE,
        anchor_template_id=anchor.id if anchor is not None else None,
        offset_days=offset_days,
        created_at=_EPOCH + timedelta(minutes=position),
    )


def make_library(*titles: str) -> list[TaskTemplateRecord]:
    return [make_template(title, position) for position, title in enumerate(titles, start=1)]


class FakeTemplateProvider:
    def __init__(self, templates: Sequence[TaskTemplateRecord] = (), fail: bool = False) -> None:
        self.templates = list(templates)
        self.fail = fail
        self.calls = 0

    async def list_templates(self) -> list[TaskTemplateRecord]:
        self.calls += 1
        if self.fail:
            raise TemplateLoadError("connection refused")
        return sorted(self.templates, key=lambda t: (t.position, t.created_at or _EPOCH))


class FakeTaskStore:
    """
    In-memory TaskStore.

    - `fail_on` holds (task_id, field) pairs whose update raises FieldUpdateError
    - `writes` records every successful update in call order
    """

    def __init__(self) -> None:
        self.tasks: dict[UUID, TaskRecord] = {}
        self.writes: list[tuple[UUID, str, Any]] = []
        self.fail_on: set[tuple[UUID, str]] = set()
        self.fail_insert = False
        self.short_ids = False
        self._clock = _EPOCH

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def seed(self, project_id: UUID, title: str, position: int, **fields: Any) -> TaskRecord:
        """Insert a ready-made task, bypassing the materializer."""
        task = TaskRecord(
            id=uuid4(),
            project_id=project_id,
            title=title,
            position=position,
            created_at=fields.pop("created_at", None) or self._tick(),
            **fields,
        )
        self.tasks[task.id] = task
        return task

    async def insert_tasks(self, rows: Sequence[NewTask]) -> list[UUID]:
        if self.fail_insert:
            raise TaskInsertError("insert rejected")
        ids = []
        for row in rows:
            task = TaskRecord(
                id=uuid4(),
                project_id=row.project_id,
                template_id=row.template_id,
                title=row.title,
                role=row.role,
                assignees=tuple(row.assignees),
                status=row.status,
                start_date=row.start_date,
                due_date=row.due_date,
                notes=row.notes,
                position=row.position,
                created_at=self._tick(),
            )
            self.tasks[task.id] = task
            ids.append(task.id)
        return ids[:-1] if self.short_ids and ids else ids

    async def list_tasks(self, project_id: UUID) -> list[TaskRecord]:
        tasks = [t for t in self.tasks.values() if t.project_id == project_id]
        return sorted(tasks, key=lambda t: (t.position, t.created_at))

    async def get_task(self, task_id: UUID) -> TaskRecord | None:
        return self.tasks.get(task_id)

    async def update_task_field(self, task_id: UUID, field: str, value: Any) -> None:
        if (task_id, field) in self.fail_on:
            raise FieldUpdateError(task_id, field, "write rejected", value)
        task = self.tasks.get(task_id)
        if task is None:
            raise FieldUpdateError(task_id, field, "task does not exist", value)

        changes: dict[str, Any] = {field: value}
        if field == "assignees":
            changes[field] = tuple(value or ())
        elif field == "status":
            status = TaskStatus(value)
            changes[field] = status
            changes["completed_at"] = self._tick() if status is TaskStatus.DONE else None
        self.tasks[task_id] = replace(task, **changes)
        self.writes.append((task_id, field, value))

    def by_title(self, title: str, occurrence: int = 1) -> TaskRecord:
        matches = sorted(
            (t for t in self.tasks.values() if t.title == title),
            key=lambda t: (t.position, t.created_at),
        )
        return matches[occurrence - 1]


class FakeDependencyStore:
    """In-memory DependencyStore; edges come back in dependent-task order."""

    def __init__(self, tasks: FakeTaskStore | None = None, fail_insert: bool = False) -> None:
        self.edges: list[DependencyRecord] = []
        self.tasks = tasks
        self.fail_insert = fail_insert

    async def insert_dependencies(self, rows: Sequence[DependencyRecord]) -> None:
        if self.fail_insert:
            raise DependencyInsertError("foreign key violation", edge_count=len(rows))
        self.edges.extend(rows)

    async def list_dependencies(self, anchor_task_id: UUID) -> list[DependencyRecord]:
        edges = [edge for edge in self.edges if edge.anchor_task_id == anchor_task_id]
        if self.tasks is not None:
            edges.sort(key=self._dependent_order)
        return edges

    def _dependent_order(self, edge: DependencyRecord) -> tuple[int, datetime]:
        task = self.tasks.tasks.get(edge.task_id) if self.tasks is not None else None
        if task is None:
            return (0, _EPOCH)
        return (task.position, task.created_at or _EPOCH)


class FakeProjectService:
    """In-memory stand-in for ProjectService."""

    def __init__(self) -> None:
        self.projects: dict[UUID, ProjectRecord] = {}

    def add(self, name: str, designer: str | None = None, **fields: Any) -> ProjectRecord:
        project = ProjectRecord(
            id=uuid4(),
            name=name,
            designer=designer,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self.projects[project.id] = project
        return project

    async def get_project(self, project_id: UUID) -> ProjectRecord | None:
        return self.projects.get(project_id)

    async def create_project(
        self,
        name: str,
        designer: str | None = None,
        project_type: str | None = None,
        start_date: date | None = None,
    ) -> ProjectRecord:
        return self.add(
            name.strip(),
            (designer or "").strip() or None,
            project_type=project_type,
            start_date=start_date,
        )

    async def list_projects(
        self,
        status: str | None = "active",
        designer: str | None = None,
        search: str | None = None,
    ) -> list[ProjectRecord]:
        projects = list(self.projects.values())
        if status:
            projects = [p for p in projects if p.status == status]
        if designer:
            projects = [p for p in projects if p.designer == designer]
        if search:
            needle = search.strip().lower()
            projects = [
                p
                for p in projects
                if needle in p.name.lower() or needle in (p.designer or "").lower()
            ]
        return sorted(projects, key=lambda p: p.name.lower())

    async def list_designers(self) -> list[str]:
        return sorted({p.designer for p in self.projects.values() if p.designer})

    async def counters(self) -> ProjectCounters:
        year = datetime.now(timezone.utc).year
        projects = list(self.projects.values())
        return ProjectCounters(
            active=sum(p.status == "active" for p in projects),
            completed_this_year=sum(
                p.status == "completed" and p.completed_at is not None and p.completed_at.year == year
                for p in projects
            ),
            abandoned=sum(p.status == "abandoned" for p in projects),
        )

    async def complete_project(self, project_id: UUID, notes: str | None = None):
        return self._set(
            project_id,
            status="completed",
            completed_at=datetime.now(timezone.utc),
            completion_notes=notes or None,
            abandoned_at=None,
            abandon_reason=None,
        )

    async def abandon_project(self, project_id: UUID, reason: str):
        if not reason or not reason.strip():
            raise ValueError("A reason is required to abandon a project")
        return self._set(
            project_id,
            status="abandoned",
            abandoned_at=datetime.now(timezone.utc),
            abandon_reason=reason.strip(),
            completed_at=None,
            completion_notes=None,
        )

    async def reactivate_project(self, project_id: UUID):
        return self._set(
            project_id,
            status="active",
            completed_at=None,
            completion_notes=None,
            abandoned_at=None,
            abandon_reason=None,
        )

    def _set(self, project_id: UUID, **changes: Any) -> ProjectRecord | None:
        project = self.projects.get(project_id)
        if project is None:
            return None
        project = replace(project, **changes)
        self.projects[project_id] = project
        return project


@dataclass(slots=True)
class FakeStores:
    """Drop-in replacement for SchedulingStores."""

    projects: FakeProjectService = field(default_factory=FakeProjectService)
    templates: FakeTemplateProvider = field(default_factory=FakeTemplateProvider)
    tasks: FakeTaskStore = field(default_factory=FakeTaskStore)
    dependencies: FakeDependencyStore = field(default_factory=FakeDependencyStore)

    def __post_init__(self) -> None:
        if self.dependencies.tasks is None:
            self.dependencies.tasks = self.tasks
