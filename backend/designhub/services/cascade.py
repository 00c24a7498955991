"""Propagation of dates along explicit task dependency edges."""

from datetime import date
from uuid import UUID

import structlog

from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.dates import add_days, shift_weekend_to_monday
from designhub.scheduling.exceptions import FieldUpdateError
from designhub.scheduling.ports import ChangeListener, DependencyStore, NullListener, TaskStore
from designhub.scheduling.types import FieldUpdate

logger = structlog.get_logger()


class DependencyCascader:
    """Moves dependents' due dates when their anchor's date changes.

    Single hop: dependents updated here do not cascade to their own
    dependents.
    """

    def __init__(
        self,
        tasks: TaskStore,
        dependencies: DependencyStore,
        listener: ChangeListener | None = None,
    ):
        self.tasks = tasks
        self.dependencies = dependencies
        self.listener = listener or NullListener()

    async def cascade_from_anchor_due_change(
        self,
        context: SchedulingContext,
        anchor_task_id: UUID,
    ) -> list[FieldUpdate]:
        anchor = context.require(anchor_task_id)
        if anchor.due_date is None:
            return []
        return await self._propagate(context, anchor_task_id, anchor.due_date)

    async def cascade_from_anchor_start_change(
        self,
        context: SchedulingContext,
        anchor_task_id: UUID,
    ) -> list[FieldUpdate]:
        """Propagate from the anchor's start while it has no due date of its own."""
        anchor = context.require(anchor_task_id)
        if anchor.start_date is None or anchor.due_date is not None:
            return []
        return await self._propagate(context, anchor_task_id, anchor.start_date)

    async def _propagate(
        self,
        context: SchedulingContext,
        anchor_task_id: UUID,
        base: date,
    ) -> list[FieldUpdate]:
        edges = await self.dependencies.list_dependencies(anchor_task_id)
        applied: list[FieldUpdate] = []
        for edge in edges:
            new_due = shift_weekend_to_monday(add_days(base, edge.offset_days))
            try:
                await self.tasks.update_task_field(edge.task_id, "due_date", new_due)
            except FieldUpdateError as exc:
                exc.applied = list(applied)
                logger.error(
                    "dependency_cascade_failed",
                    anchor_task_id=str(anchor_task_id),
                    task_id=str(edge.task_id),
                    error=exc.message,
                )
                raise
            update = FieldUpdate(edge.task_id, "due_date", new_due, source="dependency")
            context.reflect(update)
            self.listener.task_updated(update)
            applied.append(update)

        if applied:
            logger.info(
                "dependency_cascade_applied",
                anchor_task_id=str(anchor_task_id),
                dependents_updated=len(applied),
            )
        return applied
