"""Template-driven task materialization and date propagation core."""

from designhub.scheduling.assignees import primary_assignee, resolve_assignees
from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.exceptions import (
    DependencyInsertError,
    FieldUpdateError,
    SchedulingError,
    TaskInsertError,
    TaskNotFoundError,
    TemplateLoadError,
)
from designhub.scheduling.rules import (
    DATE_RULES,
    DEFAULT_POLICY,
    DEFAULT_RULEBOOK,
    REMINDER_LINKS,
    CascadePolicy,
    DateRule,
    FixedOffset,
    NextFriday,
    PrevFriday,
    ReminderLink,
    RuleBook,
    SecondFridayAfter,
)
from designhub.scheduling.titles import TitleIndex, normalize
from designhub.scheduling.types import (
    DependencyRecord,
    EditOutcome,
    FieldUpdate,
    NewTask,
    ProjectRecord,
    Reminder,
    ScheduleKind,
    TaskRecord,
    TaskStatus,
    TaskTemplateRecord,
)

__all__ = [
    # Records
    "DependencyRecord",
    "EditOutcome",
    "FieldUpdate",
    "NewTask",
    "ProjectRecord",
    "Reminder",
    "ScheduleKind",
    "TaskRecord",
    "TaskStatus",
    "TaskTemplateRecord",
    # Titles & assignees
    "TitleIndex",
    "normalize",
    "primary_assignee",
    "resolve_assignees",
    # Rules
    "CascadePolicy",
    "DATE_RULES",
    "DEFAULT_POLICY",
    "DEFAULT_RULEBOOK",
    "DateRule",
    "FixedOffset",
    "NextFriday",
    "PrevFriday",
    "REMINDER_LINKS",
    "ReminderLink",
    "RuleBook",
    "SecondFridayAfter",
    # Context
    "SchedulingContext",
    # Errors
    "DependencyInsertError",
    "FieldUpdateError",
    "SchedulingError",
    "TaskInsertError",
    "TaskNotFoundError",
    "TemplateLoadError",
]
