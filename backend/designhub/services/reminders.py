"""Advisory reminders for follow-up tasks that still need a start date."""

import structlog

from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.ports import ChangeListener, NullListener
from designhub.scheduling.rules import DEFAULT_RULEBOOK, RuleBook
from designhub.scheduling.types import Reminder

logger = structlog.get_logger()


class ReminderAdvisor:
    """Suggests starting a related task; never writes anything."""

    def __init__(self, rulebook: RuleBook = DEFAULT_RULEBOOK, listener: ChangeListener | None = None):
        self.rulebook = rulebook
        self.listener = listener or NullListener()

    def maybe_remind(
        self,
        context: SchedulingContext,
        anchor_title: str,
        anchor_key: str | None = None,
    ) -> Reminder | None:
        """Reminder for the task linked to `anchor_title`, if it has no start yet.

        `anchor_key` overrides the lookup key, so a renamed task still answers
        to its template's reminder link.
        """
        if anchor_key is None:
            link = self.rulebook.reminder_for(anchor_title)
        else:
            link = self.rulebook.reminder_for_key(anchor_key)
        if link is None:
            return None

        target = context.find_by_occurrence(link.target_title, 1)
        if target is None or target.start_date is not None:
            return None

        line_number = context.line_number(target.id)
        where = f" (line {line_number})" if line_number else ""
        reminder = Reminder(
            anchor_title=anchor_title,
            target_title=target.title,
            task_id=target.id,
            line_number=line_number,
            message=f'Don\'t forget to set a start date for "{target.title}"{where}.',
        )
        logger.debug(
            "reminder_issued",
            project_id=str(context.project.id),
            anchor=anchor_title,
            target=target.title,
        )
        self.listener.reminder(reminder)
        return reminder
