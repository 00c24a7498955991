"""Projects API endpoints."""

from datetime import date, datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from designhub.api.deps import (
    AppSettings,
    Stores,
    build_edit_service,
    build_materializer,
    scheduling_error,
)
from designhub.api.v1.tasks import TaskResponse
from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.exceptions import SchedulingError
from designhub.scheduling.types import ProjectRecord
from designhub.services.materializer import MaterializationResult

router = APIRouter()
logger = structlog.get_logger()


# Request/Response Models
class ProjectCreate(BaseModel):
    """Create a new project."""

    name: str = Field(..., min_length=1, max_length=255)
    designer: str | None = Field(None, max_length=255)
    project_type: str | None = Field(None, max_length=100)
    start_date: date | None = None
    seed_tasks: bool = True


class ProjectComplete(BaseModel):
    notes: str | None = None


class ProjectAbandon(BaseModel):
    reason: str = Field(..., min_length=1)


class ManualTaskCreate(BaseModel):
    """Add a task that is not part of the template library."""

    title: str = Field(..., min_length=1, max_length=500)
    role: str | None = Field(None, max_length=255)
    assignees: list[str] | None = None
    notes: str | None = None


class ProjectResponse(BaseModel):
    """Project response model."""

    id: UUID
    name: str
    designer: str | None
    project_type: str | None
    start_date: date | None
    status: str
    completed_at: datetime | None
    completion_notes: str | None
    abandoned_at: datetime | None
    abandon_reason: str | None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, project: ProjectRecord) -> "ProjectResponse":
        return cls(
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


class MaterializationResponse(BaseModel):
    seeded: bool
    created_count: int
    dependencies_created: int
    warnings: list[str]
    reason: str | None

    @classmethod
    def from_result(cls, result: MaterializationResult) -> "MaterializationResponse":
        return cls(
            seeded=result.seeded,
            created_count=result.created_count,
            dependencies_created=result.dependencies_created,
            warnings=list(result.warnings),
            reason=result.reason,
        )


class ProjectCreateResponse(BaseModel):
    project: ProjectResponse
    materialization: MaterializationResponse | None


class ProjectSummaryResponse(BaseModel):
    active: int
    completed_this_year: int
    abandoned: int


# Endpoints
async def _get_project_or_404(stores: Stores, project_id: UUID) -> ProjectRecord:
    project = await stores.projects.get_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.post("", response_model=ProjectCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    stores: Stores,
    settings: AppSettings,
) -> ProjectCreateResponse:
    """Create a project and materialize its tasks from the template library."""
    project = await stores.projects.create_project(
        name=project_data.name,
        designer=project_data.designer,
        project_type=project_data.project_type,
        start_date=project_data.start_date,
    )

    materialization = None
    if project_data.seed_tasks:
        materializer = build_materializer(stores, settings)
        try:
            result = await materializer.materialize_for_new_project(project)
        except SchedulingError as exc:
            logger.error(
                "project_materialization_failed",
                project_id=str(project.id),
                code=exc.code,
            )
            raise scheduling_error(exc) from exc
        materialization = MaterializationResponse.from_result(result)

    return ProjectCreateResponse(
        project=ProjectResponse.from_record(project),
        materialization=materialization,
    )


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    stores: Stores,
    status_filter: str | None = Query(
        "active", alias="status", pattern="^(active|completed|abandoned|all)$"
    ),
    designer: str | None = Query(None),
    search: str | None = Query(None, max_length=255),
) -> list[ProjectResponse]:
    """List projects alphabetically, optionally filtered."""
    projects = await stores.projects.list_projects(
        status=None if status_filter == "all" else status_filter,
        designer=designer,
        search=search,
    )
    return [ProjectResponse.from_record(p) for p in projects]


@router.get("/designers", response_model=list[str])
async def list_designers(stores: Stores) -> list[str]:
    """Distinct designer names across projects."""
    return await stores.projects.list_designers()


@router.get("/summary", response_model=ProjectSummaryResponse)
async def project_summary(stores: Stores) -> ProjectSummaryResponse:
    """Portfolio counters."""
    counters = await stores.projects.counters()
    return ProjectSummaryResponse(
        active=counters.active,
        completed_this_year=counters.completed_this_year,
        abandoned=counters.abandoned,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, stores: Stores) -> ProjectResponse:
    """Get a project by ID."""
    return ProjectResponse.from_record(await _get_project_or_404(stores, project_id))


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(project_id: UUID, stores: Stores) -> list[TaskResponse]:
    """Tasks in display order, numbered from 1."""
    await _get_project_or_404(stores, project_id)
    tasks = await stores.tasks.list_tasks(project_id)
    return [TaskResponse.from_record(task, line) for line, task in enumerate(tasks, start=1)]


@router.post("/{project_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def add_manual_task(
    project_id: UUID,
    task_data: ManualTaskCreate,
    stores: Stores,
    settings: AppSettings,
) -> TaskResponse:
    """Append a manual task after the project's last task."""
    project = await _get_project_or_404(stores, project_id)
    service = build_edit_service(stores, settings)
    try:
        context = await SchedulingContext.load(project, stores.tasks, stores.templates)
        task = await service.add_manual_task(
            context,
            title=task_data.title,
            role=task_data.role,
            assignees=task_data.assignees,
            notes=task_data.notes,
        )
    except SchedulingError as exc:
        raise scheduling_error(exc) from exc
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return TaskResponse.from_record(task, context.line_number(task.id))


@router.post("/{project_id}/tasks/backfill", response_model=MaterializationResponse)
async def backfill_project_tasks(
    project_id: UUID,
    stores: Stores,
    settings: AppSettings,
) -> MaterializationResponse:
    """Create tasks for templates added to the library since the project was created."""
    project = await _get_project_or_404(stores, project_id)
    materializer = build_materializer(stores, settings)
    try:
        result = await materializer.backfill_missing(project)
    except SchedulingError as exc:
        raise scheduling_error(exc) from exc
    return MaterializationResponse.from_result(result)


@router.post("/{project_id}/complete", response_model=ProjectResponse)
async def complete_project(
    project_id: UUID,
    body: ProjectComplete,
    stores: Stores,
) -> ProjectResponse:
    """Mark a project as completed."""
    project = await stores.projects.complete_project(project_id, notes=body.notes)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ProjectResponse.from_record(project)


@router.post("/{project_id}/abandon", response_model=ProjectResponse)
async def abandon_project(
    project_id: UUID,
    body: ProjectAbandon,
    stores: Stores,
) -> ProjectResponse:
    """Mark a project as abandoned; a reason is required."""
    try:
        project = await stores.projects.abandon_project(project_id, reason=body.reason)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ProjectResponse.from_record(project)


@router.post("/{project_id}/reactivate", response_model=ProjectResponse)
async def reactivate_project(project_id: UUID, stores: Stores) -> ProjectResponse:
    """Return a completed or abandoned project to the active list."""
    project = await stores.projects.reactivate_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return ProjectResponse.from_record(project)
