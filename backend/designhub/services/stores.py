"""SQLAlchemy implementations of the scheduling ports.

Every write commits on its own so a failure part way through a cascade
leaves the earlier writes in place, matching what the engine reports back
as applied.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from designhub.models.project import Task, TaskDependency, TaskTemplate
from designhub.scheduling.assignees import primary_assignee
from designhub.scheduling.exceptions import (
    DependencyInsertError,
    FieldUpdateError,
    TaskInsertError,
    TemplateLoadError,
)
from designhub.scheduling.types import (
    EDITABLE_FIELDS,
    DependencyRecord,
    NewTask,
    ScheduleKind,
    TaskField,
    TaskRecord,
    TaskStatus,
    TaskTemplateRecord,
)
from designhub.services.projects import ProjectService

logger = structlog.get_logger()


def template_record(template: TaskTemplate) -> TaskTemplateRecord:
    return TaskTemplateRecord(
        id=template.id,
        title=template.title,
        role=template.role,
        position=template.position,
        schedule_kind=ScheduleKind.from_db(template.schedule_kind),
        anchor_template_id=template.anchor_template_id,
        offset_days=template.offset_days,
        created_at=template.created_at,
    )


def task_record(task: Task) -> TaskRecord:
    assignees = tuple(task.assignees or ())
    if not assignees and task.assignee:
        # Rows written before multi-assignee support
        assignees = (task.assignee,)
    try:
        status = TaskStatus(task.status)
    except ValueError:
        status = TaskStatus.TODO
    return TaskRecord(
        id=task.id,
        project_id=task.project_id,
        template_id=task.template_id,
        title=task.title,
        role=task.role,
        assignees=assignees,
        status=status,
        start_date=task.start_date,
        due_date=task.due_date,
        notes=task.notes,
        position=task.position,
        completed_at=task.completed_at,
        created_at=task.created_at,
    )


class SQLTemplateProvider:
    """Template library backed by the task_templates table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_templates(self) -> list[TaskTemplateRecord]:
        try:
            result = await self.db.execute(
                select(TaskTemplate).order_by(
                    TaskTemplate.position, TaskTemplate.created_at
                )
            )
        except SQLAlchemyError as e:
            logger.error("task_templates_load_failed", error=str(e))
            raise TemplateLoadError(str(e)) from e
        return [template_record(t) for t in result.scalars().all()]


class SQLTaskStore:
    """Task persistence for the scheduling engine."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_tasks(self, rows: Sequence[NewTask]) -> list[UUID]:
        if not rows:
            return []
        tasks = [
            Task(
                project_id=row.project_id,
                template_id=row.template_id,
                title=row.title,
                role=row.role,
                notes=row.notes,
                assignees=list(row.assignees),
                assignee=row.assignee,
                status=str(row.status),
                start_date=row.start_date,
                due_date=row.due_date,
                position=row.position,
            )
            for row in rows
        ]
        try:
            self.db.add_all(tasks)
            await self.db.flush()
            ids = [task.id for task in tasks]
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            project_id = rows[0].project_id
            logger.error(
                "task_insert_failed",
                project_id=str(project_id),
                count=len(rows),
                error=str(e),
            )
            raise TaskInsertError(str(e), project_id=project_id) from e
        return ids

    async def list_tasks(self, project_id: UUID) -> list[TaskRecord]:
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.position, Task.created_at)
        )
        return [task_record(t) for t in result.scalars().all()]

    async def get_task(self, task_id: UUID) -> TaskRecord | None:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        return task_record(task) if task else None

    async def update_task_field(self, task_id: UUID, field: TaskField, value: Any) -> None:
        if field not in EDITABLE_FIELDS:
            raise FieldUpdateError(task_id, field, "field is not editable", value)

        values = self._column_values(field, value)
        try:
            result = await self.db.execute(
                update(Task).where(Task.id == task_id).values(**values)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise FieldUpdateError(task_id, field, "task does not exist", value)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "task_field_update_failed",
                task_id=str(task_id),
                field=field,
                error=str(e),
            )
            raise FieldUpdateError(task_id, field, str(e), value) from e

    @staticmethod
    def _column_values(field: TaskField, value: Any) -> dict[str, Any]:
        if field == "assignees":
            names = list(value or [])
            return {"assignees": names, "assignee": primary_assignee(names)}
        if field == "status":
            status = TaskStatus(value)
            completed_at = datetime.now(timezone.utc) if status is TaskStatus.DONE else None
            return {"status": str(status), "completed_at": completed_at}
        return {field: value}


class SQLDependencyStore:
    """Dependency edge persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_dependencies(self, rows: Sequence[DependencyRecord]) -> None:
        if not rows:
            return
        try:
            self.db.add_all(
                [
                    TaskDependency(
                        task_id=row.task_id,
                        anchor_task_id=row.anchor_task_id,
                        offset_days=row.offset_days,
                    )
                    for row in rows
                ]
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyInsertError(str(e), edge_count=len(rows)) from e

    async def list_dependencies(self, anchor_task_id: UUID) -> list[DependencyRecord]:
        result = await self.db.execute(
            select(TaskDependency)
            .join(Task, Task.id == TaskDependency.task_id)
            .where(TaskDependency.anchor_task_id == anchor_task_id)
            .order_by(Task.position, Task.created_at, TaskDependency.id)
        )
        return [
            DependencyRecord(
                task_id=dep.task_id,
                anchor_task_id=dep.anchor_task_id,
                offset_days=dep.offset_days,
            )
            for dep in result.scalars().all()
        ]


@dataclass(slots=True)
class SchedulingStores:
    """Everything a request needs to load and edit a project's schedule."""

    projects: ProjectService
    templates: SQLTemplateProvider
    tasks: SQLTaskStore
    dependencies: SQLDependencyStore

    @classmethod
    def from_session(cls, db: AsyncSession) -> "SchedulingStores":
        return cls(
            projects=ProjectService(db),
            templates=SQLTemplateProvider(db),
            tasks=SQLTaskStore(db),
            dependencies=SQLDependencyStore(db),
        )
