"""Task materialization: turning the template library into project tasks."""

from collections import defaultdict, deque
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from designhub.scheduling.assignees import DEFAULT_DESIGNER_NAME, resolve_assignees
from designhub.scheduling.exceptions import DependencyInsertError, TaskInsertError
from designhub.scheduling.ports import DependencyStore, TaskStore, TemplateProvider
from designhub.scheduling.types import (
    DependencyRecord,
    NewTask,
    ProjectRecord,
    TaskRecord,
    TaskStatus,
    TaskTemplateRecord,
)

logger = structlog.get_logger()


@dataclass(slots=True)
class MaterializationResult:
    seeded: bool = False
    created_task_ids: list[UUID] = field(default_factory=list)
    dependencies_created: int = 0
    warnings: list[str] = field(default_factory=list)
    reason: str | None = None  # no_templates, nothing_missing

    @property
    def created_count(self) -> int:
        return len(self.created_task_ids)


def match_existing(
    templates: Iterable[TaskTemplateRecord],
    tasks: Iterable[TaskRecord],
) -> dict[UUID, UUID]:
    """Template id -> id of the project task that already covers it.

    Tasks are matched by `template_id` first. Legacy rows without a template
    link are matched by exact title, each row covering one template in
    library order.
    """
    tasks = list(tasks)
    by_template: dict[UUID, UUID] = {}
    for task in tasks:
        if task.template_id is not None:
            by_template.setdefault(task.template_id, task.id)

    legacy: dict[str, deque[UUID]] = defaultdict(deque)
    for task in tasks:
        if task.template_id is None:
            legacy[task.title].append(task.id)

    matched: dict[UUID, UUID] = {}
    for template in templates:
        if template.id in by_template:
            matched[template.id] = by_template[template.id]
        elif legacy.get(template.title):
            matched[template.id] = legacy[template.title].popleft()
    return matched


def build_dependency_rows(
    created: Iterable[TaskTemplateRecord],
    task_ids: Mapping[UUID, UUID],
) -> tuple[list[DependencyRecord], int]:
    """Offset edges for newly created tasks, plus how many could not be mapped."""
    rows: list[DependencyRecord] = []
    skipped = 0
    for template in created:
        if not template.is_offset:
            continue
        task_id = task_ids.get(template.id)
        anchor_task_id = task_ids.get(template.anchor_template_id)
        if task_id is None or anchor_task_id is None:
            skipped += 1
            continue
        rows.append(
            DependencyRecord(
                task_id=task_id,
                anchor_task_id=anchor_task_id,
                offset_days=template.offset_days or 0,
            )
        )
    return rows, skipped


class TaskMaterializer:
    """Creates a project's tasks from the shared template library."""

    def __init__(
        self,
        templates: TemplateProvider,
        tasks: TaskStore,
        dependencies: DependencyStore,
        designer_fallback: str = DEFAULT_DESIGNER_NAME,
    ):
        self.templates = templates
        self.tasks = tasks
        self.dependencies = dependencies
        self.designer_fallback = designer_fallback

    async def materialize_for_new_project(self, project: ProjectRecord) -> MaterializationResult:
        """Create one task per template for a project.

        A project that already has tasks only receives the missing ones, so
        calling this twice never duplicates work.
        """
        library = await self._load_templates()
        if not library:
            logger.info("task_templates_empty", project_id=str(project.id))
            return MaterializationResult(reason="no_templates")

        existing = await self.tasks.list_tasks(project.id)
        if existing:
            logger.info(
                "materialize_existing_project",
                project_id=str(project.id),
                existing_tasks=len(existing),
            )
            return await self._backfill(project, library, existing)

        return await self._create(project, library, {})

    async def backfill_missing(self, project: ProjectRecord) -> MaterializationResult:
        """Create tasks only for templates the project does not have yet."""
        library = await self._load_templates()
        if not library:
            logger.info("task_templates_empty", project_id=str(project.id))
            return MaterializationResult(reason="no_templates")

        existing = await self.tasks.list_tasks(project.id)
        return await self._backfill(project, library, existing)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _load_templates(self) -> list[TaskTemplateRecord]:
        templates = await self.templates.list_templates()
        return sorted(templates, key=lambda t: t.position)

    async def _backfill(
        self,
        project: ProjectRecord,
        library: Sequence[TaskTemplateRecord],
        existing: Sequence[TaskRecord],
    ) -> MaterializationResult:
        covered = match_existing(library, existing)
        missing = [t for t in library if t.id not in covered]
        if not missing:
            logger.debug("backfill_nothing_missing", project_id=str(project.id))
            return MaterializationResult(reason="nothing_missing")
        return await self._create(project, missing, covered)

    async def _create(
        self,
        project: ProjectRecord,
        templates: Sequence[TaskTemplateRecord],
        covered: Mapping[UUID, UUID],
    ) -> MaterializationResult:
        rows = [self._task_row(project, template) for template in templates]
        ids = await self.tasks.insert_tasks(rows)
        if len(ids) != len(rows):
            raise TaskInsertError(
                f"store returned {len(ids)} ids for {len(rows)} tasks",
                project_id=project.id,
            )

        task_ids = {**covered, **{t.id: task_id for t, task_id in zip(templates, ids)}}
        result = MaterializationResult(seeded=True, created_task_ids=list(ids))

        edges, skipped = build_dependency_rows(templates, task_ids)
        if skipped:
            logger.debug(
                "task_dependencies_unmapped",
                project_id=str(project.id),
                skipped=skipped,
            )
        if edges:
            try:
                await self.dependencies.insert_dependencies(edges)
                result.dependencies_created = len(edges)
            except DependencyInsertError as exc:
                # Tasks stay; their dependents just won't cascade
                logger.warning(
                    "task_dependencies_insert_failed",
                    project_id=str(project.id),
                    edge_count=len(edges),
                    error=exc.message,
                )
                result.warnings.append(exc.message)

        logger.info(
            "tasks_materialized",
            project_id=str(project.id),
            tasks_created=len(ids),
            dependencies_created=result.dependencies_created,
        )
        return result

    def _task_row(self, project: ProjectRecord, template: TaskTemplateRecord) -> NewTask:
        return NewTask(
            project_id=project.id,
            template_id=template.id,
            title=template.title,
            role=template.role,
            assignees=tuple(resolve_assignees(template.role, project, self.designer_fallback)),
            status=TaskStatus.TODO,
            position=template.position,
        )
