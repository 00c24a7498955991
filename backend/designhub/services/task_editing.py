"""Reactive task edit pipeline.

Each edit runs to completion before the next: the user's own write first,
then whatever it triggers. Start-date edits drive the date rule engine, the
start-based dependency cascade and the reminder advisor; due-date edits drive
the dependency cascade.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any
from uuid import UUID

import structlog

from designhub.scheduling.assignees import (
    DEFAULT_DESIGNER_NAME,
    dedupe,
    resolve_assignees,
)
from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.exceptions import FieldUpdateError, TaskInsertError
from designhub.scheduling.ports import ChangeListener, DependencyStore, NullListener, TaskStore
from designhub.scheduling.rules import DEFAULT_POLICY, DEFAULT_RULEBOOK, CascadePolicy, RuleBook
from designhub.scheduling.types import (
    EDITABLE_FIELDS,
    EditOutcome,
    FieldUpdate,
    NewTask,
    TaskField,
    TaskRecord,
    TaskStatus,
)
from designhub.services.cascade import DependencyCascader
from designhub.services.date_rules import DateRuleEngine
from designhub.services.reminders import ReminderAdvisor

logger = structlog.get_logger()

# Order in which a multi-field edit is applied
EDIT_ORDER: tuple[TaskField, ...] = (
    "title",
    "notes",
    "status",
    "assignees",
    "start_date",
    "due_date",
)


class TaskEditService:
    """Applies user edits to one project's tasks."""

    def __init__(
        self,
        tasks: TaskStore,
        dependencies: DependencyStore,
        rulebook: RuleBook = DEFAULT_RULEBOOK,
        policy: CascadePolicy = DEFAULT_POLICY,
        listener: ChangeListener | None = None,
        designer_fallback: str = DEFAULT_DESIGNER_NAME,
    ):
        self.tasks = tasks
        self.listener = listener or NullListener()
        self.designer_fallback = designer_fallback
        self.date_rules = DateRuleEngine(tasks, rulebook, policy, self.listener)
        self.cascader = DependencyCascader(tasks, dependencies, self.listener)
        self.reminders = ReminderAdvisor(rulebook, self.listener)

    # =========================================================================
    # Date edits
    # =========================================================================

    async def set_start_date(
        self,
        context: SchedulingContext,
        task_id: UUID,
        value: date | None,
    ) -> EditOutcome:
        outcome = EditOutcome()
        task = context.require(task_id)
        await self._write(context, task_id, "start_date", value, outcome)
        if value is None:
            return outcome

        try:
            outcome.updates.extend(
                await self.date_rules.apply_start_change(context, task_id, value)
            )
            outcome.updates.extend(
                await self.cascader.cascade_from_anchor_start_change(context, task_id)
            )
        except FieldUpdateError as exc:
            exc.applied = [*outcome.updates, *exc.applied]
            raise

        reminder = self.reminders.maybe_remind(
            context, task.title, anchor_key=context.title_key(task_id)
        )
        if reminder is not None:
            outcome.reminders.append(reminder)
        return outcome

    async def set_due_date(
        self,
        context: SchedulingContext,
        task_id: UUID,
        value: date | None,
    ) -> EditOutcome:
        outcome = EditOutcome()
        await self._write(context, task_id, "due_date", value, outcome)
        if value is None:
            return outcome

        try:
            outcome.updates.extend(
                await self.cascader.cascade_from_anchor_due_change(context, task_id)
            )
        except FieldUpdateError as exc:
            exc.applied = [*outcome.updates, *exc.applied]
            raise
        return outcome

    # =========================================================================
    # Other fields
    # =========================================================================

    async def set_status(
        self,
        context: SchedulingContext,
        task_id: UUID,
        status: TaskStatus | str,
    ) -> EditOutcome:
        outcome = EditOutcome()
        await self._write(context, task_id, "status", TaskStatus(status), outcome)
        return outcome

    async def set_assignees(
        self,
        context: SchedulingContext,
        task_id: UUID,
        assignees: Iterable[str] | None,
    ) -> EditOutcome:
        names = tuple(dedupe(name.strip() for name in assignees or () if name and name.strip()))
        outcome = EditOutcome()
        await self._write(context, task_id, "assignees", names, outcome)
        return outcome

    async def set_notes(
        self,
        context: SchedulingContext,
        task_id: UUID,
        notes: str | None,
    ) -> EditOutcome:
        outcome = EditOutcome()
        await self._write(context, task_id, "notes", notes or None, outcome)
        return outcome

    async def set_title(
        self,
        context: SchedulingContext,
        task_id: UUID,
        title: str,
    ) -> EditOutcome:
        title = (title or "").strip()
        if not title:
            raise ValueError("title is required")
        outcome = EditOutcome()
        await self._write(context, task_id, "title", title, outcome)
        return outcome

    async def apply_changes(
        self,
        context: SchedulingContext,
        task_id: UUID,
        changes: Mapping[str, Any],
    ) -> EditOutcome:
        """Apply several field edits to one task, one after another."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {', '.join(sorted(unknown))}")

        handlers = {
            "title": self.set_title,
            "notes": self.set_notes,
            "status": self.set_status,
            "assignees": self.set_assignees,
            "start_date": self.set_start_date,
            "due_date": self.set_due_date,
        }
        outcome = EditOutcome()
        for field in EDIT_ORDER:
            if field not in changes:
                continue
            try:
                step = await handlers[field](context, task_id, changes[field])
            except FieldUpdateError as exc:
                exc.applied = [*outcome.updates, *exc.applied]
                raise
            outcome.updates.extend(step.updates)
            outcome.reminders.extend(step.reminders)
        return outcome

    # =========================================================================
    # Manual tasks
    # =========================================================================

    async def add_manual_task(
        self,
        context: SchedulingContext,
        title: str,
        role: str | None = None,
        assignees: Iterable[str] | None = None,
        notes: str | None = None,
    ) -> TaskRecord:
        """Add a task that has no template, after the project's last task."""
        title = (title or "").strip()
        if not title:
            raise ValueError("title is required")
        if assignees is None:
            names = resolve_assignees(role, context.project, self.designer_fallback)
        else:
            names = dedupe(name.strip() for name in assignees if name and name.strip())

        row = NewTask(
            project_id=context.project.id,
            title=title,
            role=role,
            assignees=tuple(names),
            notes=notes or None,
            position=context.next_position(),
        )
        ids = await self.tasks.insert_tasks([row])
        if len(ids) != 1:
            raise TaskInsertError("store did not return the new task id", context.project.id)

        task = TaskRecord(
            id=ids[0],
            project_id=row.project_id,
            title=row.title,
            role=row.role,
            assignees=row.assignees,
            notes=row.notes,
            position=row.position,
        )
        context.add(task)
        logger.info(
            "manual_task_added",
            project_id=str(context.project.id),
            task_id=str(task.id),
            position=task.position,
        )
        return task

    # =========================================================================
    # Internals
    # =========================================================================

    async def _write(
        self,
        context: SchedulingContext,
        task_id: UUID,
        field: TaskField,
        value: Any,
        outcome: EditOutcome,
    ) -> None:
        context.require(task_id)
        await self.tasks.update_task_field(task_id, field, value)
        update = FieldUpdate(task_id, field, value, source="user")
        context.reflect(update)
        self.listener.task_updated(update)
        outcome.updates.append(update)
        logger.debug("task_field_updated", task_id=str(task_id), field=field)
