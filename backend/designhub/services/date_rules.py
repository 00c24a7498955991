"""Date rule engine: start-date edits recompute related tasks' dates."""

from datetime import date
from uuid import UUID

import structlog

from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.dates import shift_weekend_to_monday
from designhub.scheduling.exceptions import FieldUpdateError
from designhub.scheduling.ports import ChangeListener, NullListener, TaskStore
from designhub.scheduling.rules import (
    DEFAULT_POLICY,
    DEFAULT_RULEBOOK,
    CascadePolicy,
    DateRule,
    RuleBook,
    compute,
)
from designhub.scheduling.types import FieldUpdate, TaskRecord

logger = structlog.get_logger()


class DateRuleEngine:
    """Evaluates the rule table for one start-date edit.

    For each rule anchored on the edited task (declaration order): resolve
    the target by title and occurrence, apply the guards, compute the date,
    shift weekend due dates to Monday, then persist and reflect. Writes are
    sequential; a failed write stops the pass and earlier writes stay.
    """

    def __init__(
        self,
        tasks: TaskStore,
        rulebook: RuleBook = DEFAULT_RULEBOOK,
        policy: CascadePolicy = DEFAULT_POLICY,
        listener: ChangeListener | None = None,
    ):
        self.tasks = tasks
        self.rulebook = rulebook
        self.policy = policy
        self.listener = listener or NullListener()

    async def apply_start_change(
        self,
        context: SchedulingContext,
        task_id: UUID,
        new_start: date | None,
    ) -> list[FieldUpdate]:
        """Apply every rule anchored on the task whose start was just set.

        Clearing a start date never triggers rules.
        """
        if new_start is None:
            return []

        anchor = context.require(task_id)
        applied: list[FieldUpdate] = []
        try:
            await self._fire(
                context,
                anchor,
                new_start,
                hop=1,
                applied=applied,
                visited=set(),
                rolling_only=False,
            )
        except FieldUpdateError as exc:
            exc.applied = list(applied)
            logger.error(
                "date_rules_aborted",
                task_id=str(task_id),
                applied=len(applied),
                error=exc.message,
            )
            raise

        if applied:
            logger.info(
                "date_rules_applied",
                project_id=str(context.project.id),
                task_id=str(task_id),
                updates=len(applied),
            )
        return applied

    async def _fire(
        self,
        context: SchedulingContext,
        anchor: TaskRecord,
        anchor_start: date,
        *,
        hop: int,
        applied: list[FieldUpdate],
        visited: set[tuple[DateRule, UUID]],
        rolling_only: bool,
    ) -> None:
        anchor_key = context.title_key(anchor.id)
        if rolling_only:
            rules = self.rulebook.rolling_rules_for(anchor_key)
        else:
            rules = self.rulebook.rules_for_anchor(anchor_key)

        for rule in rules:
            target = self._resolve_target(context, rule, anchor)
            if target is None:
                logger.debug(
                    "date_rule_target_missing",
                    anchor=rule.anchor_title,
                    target=rule.target_title,
                    occurrence=rule.target_occurrence,
                )
                continue
            if (rule, target.id) in visited:
                continue
            visited.add((rule, target.id))

            value = self._evaluate(rule, target, anchor_start)
            if value is None:
                continue

            await self.tasks.update_task_field(target.id, rule.task_field, value)
            update = FieldUpdate(target.id, rule.task_field, value, source="date_rule")
            context.reflect(update)
            self.listener.task_updated(update)
            applied.append(update)

            if rule.target_field != "start" or rule.is_self_referential:
                continue
            # The target's start moved: follow it as far as the hop policy allows
            target = context.require(target.id)
            await self._fire(
                context,
                target,
                value,
                hop=hop + 1,
                applied=applied,
                visited=visited,
                rolling_only=hop >= self.policy.max_cascade_hops,
            )

    def _resolve_target(
        self,
        context: SchedulingContext,
        rule: DateRule,
        anchor: TaskRecord,
    ) -> TaskRecord | None:
        # A task's own rules act on that task, whichever occurrence it is
        if rule.is_self_referential:
            return context.get(anchor.id)
        return context.find_by_occurrence(rule.target_title, rule.target_occurrence)

    def _evaluate(self, rule: DateRule, target: TaskRecord, anchor_start: date) -> date | None:
        """Value to write, or None when a guard holds or nothing would change."""
        current = getattr(target, rule.task_field)
        if rule.only_if_blank and current is not None:
            return None
        if rule.skip_if_target_has_start and target.start_date is not None:
            return None

        value = compute(rule.calculation, anchor_start)
        if rule.target_field == "due" or self.policy.normalize_start_targets:
            value = shift_weekend_to_monday(value)
        if value == current:
            return None
        return value
