"""Project service: creation, listing and lifecycle of design projects."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from designhub.models.project import Project
from designhub.scheduling.types import ProjectRecord

logger = structlog.get_logger()

PROJECT_STATUSES = ("active", "completed", "abandoned")


@dataclass(slots=True, frozen=True)
class ProjectCounters:
    active: int
    completed_this_year: int
    abandoned: int


def project_record(project: Project) -> ProjectRecord:
    return ProjectRecord(
        id=project.id,
        name=project.name,
        designer=project.designer,
        project_type=project.project_type,
        start_date=project.start_date,
        status=project.status,
        completed_at=project.completed_at,
        completion_notes=project.completion_notes,
        abandoned_at=project.abandoned_at,
        abandon_reason=project.abandon_reason,
        created_at=project.created_at,
    )


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, project_id: UUID) -> Project | None:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def get_project(self, project_id: UUID) -> ProjectRecord | None:
        project = await self._get(project_id)
        return project_record(project) if project else None

    async def create_project(
        self,
        name: str,
        designer: str | None = None,
        project_type: str | None = None,
        start_date: date | None = None,
    ) -> ProjectRecord:
        project = Project(
            name=name.strip(),
            designer=(designer or "").strip() or None,
            project_type=project_type,
            start_date=start_date,
            status="active",
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)

        logger.info(
            "project_created",
            project_id=str(project.id),
            designer=project.designer,
        )
        return project_record(project)

    async def list_projects(
        self,
        status: str | None = "active",
        designer: str | None = None,
        search: str | None = None,
    ) -> list[ProjectRecord]:
        """Projects sorted alphabetically by name, case-insensitive."""
        query = select(Project)
        if status:
            query = query.where(Project.status == status)
        if designer:
            query = query.where(Project.designer == designer)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(Project.name.ilike(pattern), Project.designer.ilike(pattern))
            )
        query = query.order_by(func.lower(Project.name), Project.created_at)

        result = await self.db.execute(query)
        return [project_record(p) for p in result.scalars().all()]

    async def list_designers(self) -> list[str]:
        result = await self.db.execute(
            select(Project.designer)
            .where(Project.designer.is_not(None))
            .distinct()
            .order_by(Project.designer)
        )
        return [name for name in result.scalars().all() if name]

    async def counters(self) -> ProjectCounters:
        year_start = datetime(datetime.now(timezone.utc).year, 1, 1, tzinfo=timezone.utc)

        async def count(*conditions) -> int:
            result = await self.db.execute(
                select(func.count()).select_from(Project).where(*conditions)
            )
            return result.scalar_one()

        return ProjectCounters(
            active=await count(Project.status == "active"),
            completed_this_year=await count(
                Project.status == "completed",
                Project.completed_at >= year_start,
            ),
            abandoned=await count(Project.status == "abandoned"),
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def complete_project(
        self,
        project_id: UUID,
        notes: str | None = None,
    ) -> ProjectRecord | None:
        project = await self._get(project_id)
        if not project:
            return None

        project.status = "completed"
        project.completed_at = datetime.now(timezone.utc)
        project.completion_notes = notes or None
        project.abandoned_at = None
        project.abandon_reason = None
        await self.db.commit()
        await self.db.refresh(project)

        logger.info("project_completed", project_id=str(project_id))
        return project_record(project)

    async def abandon_project(self, project_id: UUID, reason: str) -> ProjectRecord | None:
        if not reason or not reason.strip():
            raise ValueError("A reason is required to abandon a project")

        project = await self._get(project_id)
        if not project:
            return None

        project.status = "abandoned"
        project.abandoned_at = datetime.now(timezone.utc)
        project.abandon_reason = reason.strip()
        project.completed_at = None
        project.completion_notes = None
        await self.db.commit()
        await self.db.refresh(project)

        logger.info("project_abandoned", project_id=str(project_id))
        return project_record(project)

    async def reactivate_project(self, project_id: UUID) -> ProjectRecord | None:
        project = await self._get(project_id)
        if not project:
            return None

        project.status = "active"
        project.completed_at = None
        project.completion_notes = None
        project.abandoned_at = None
        project.abandon_reason = None
        await self.db.commit()
        await self.db.refresh(project)

        logger.info("project_reactivated", project_id=str(project_id))
        return project_record(project)
