"""Declarative date rules and reminder links.

A date rule says: when the anchor task's start date is set, recompute the
target task's start or due date. Rules are evaluated in declaration order.
Titles are compared through `titles.normalize`, so the table is written with
the library's display titles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from designhub.scheduling.dates import (
    add_days,
    next_friday,
    previous_friday,
    second_friday_after,
)
from designhub.scheduling.titles import normalize

TargetField = Literal["start", "due"]


# =========================================================================
# Calculations
# =========================================================================


@dataclass(frozen=True, slots=True)
class FixedOffset:
    days: int


@dataclass(frozen=True, slots=True)
class PrevFriday:
    """Latest Friday strictly before the anchor's start."""


@dataclass(frozen=True, slots=True)
class NextFriday:
    """Earliest Friday strictly after the anchor's start."""


@dataclass(frozen=True, slots=True)
class SecondFridayAfter:
    """One week after NextFriday."""


Calculation = FixedOffset | PrevFriday | NextFriday | SecondFridayAfter


def compute(calculation: Calculation, anchor_start: date) -> date:
    match calculation:
        case FixedOffset(days=days):
            return add_days(anchor_start, days)
        case PrevFriday():
            return previous_friday(anchor_start)
        case NextFriday():
            return next_friday(anchor_start)
        case SecondFridayAfter():
            return second_friday_after(anchor_start)
    raise TypeError(f"Unknown calculation: {calculation!r}")


# =========================================================================
# Rules
# =========================================================================


@dataclass(frozen=True, slots=True)
class DateRule:
    anchor_title: str
    target_title: str
    target_field: TargetField
    calculation: Calculation
    target_occurrence: int = 1
    # Leave the target alone when the field already has a value
    only_if_blank: bool = False
    # Leave the target alone when someone already started it
    skip_if_target_has_start: bool = False
    # Self-referential rule that re-sets the task's own date every time
    rolling: bool = False
    anchor_key: str = field(init=False, repr=False, compare=False)
    target_key: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchor_key", normalize(self.anchor_title))
        object.__setattr__(self, "target_key", normalize(self.target_title))
        if self.rolling and self.anchor_key != self.target_key:
            raise ValueError(
                f"Rolling rule must target its own anchor: {self.anchor_title!r}"
            )

    @property
    def is_self_referential(self) -> bool:
        return self.anchor_key == self.target_key

    @property
    def task_field(self) -> str:
        return "start_date" if self.target_field == "start" else "due_date"


@dataclass(frozen=True, slots=True)
class ReminderLink:
    anchor_title: str
    target_title: str
    anchor_key: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchor_key", normalize(self.anchor_title))


@dataclass(frozen=True, slots=True)
class CascadePolicy:
    """How far a start-date change may travel within one edit.

    With `max_cascade_hops=1` a rule that sets some target's start date does
    not fire the target's own rules, except the target's rolling rules.
    Larger values re-evaluate every rule anchored on such targets, up to the
    given depth.
    """

    max_cascade_hops: int = 1
    normalize_start_targets: bool = False

    def __post_init__(self) -> None:
        if self.max_cascade_hops < 1:
            raise ValueError("max_cascade_hops must be at least 1")


DEFAULT_POLICY = CascadePolicy()


class RuleBook:
    """Lookup structure over a rule table and a reminder table."""

    def __init__(
        self,
        rules: tuple[DateRule, ...] | list[DateRule],
        reminders: tuple[ReminderLink, ...] | list[ReminderLink] = (),
    ) -> None:
        self.rules = tuple(rules)
        self.reminders = tuple(reminders)

    def rules_for_anchor(self, anchor_key: str) -> list[DateRule]:
        return [rule for rule in self.rules if rule.anchor_key == anchor_key]

    def rolling_rules_for(self, task_key: str) -> list[DateRule]:
        return [rule for rule in self.rules if rule.rolling and rule.anchor_key == task_key]

    def reminder_for(self, anchor_title: str) -> ReminderLink | None:
        return self.reminder_for_key(normalize(anchor_title))

    def reminder_for_key(self, key: str) -> ReminderLink | None:
        for link in self.reminders:
            if link.anchor_key == key:
                return link
        return None


# =========================================================================
# Rule table
# =========================================================================

DATE_RULES: tuple[DateRule, ...] = (
    # Consultation
    DateRule("Have Initial Consultation", "Confirm Initial Consultation", "due", FixedOffset(-5)),
    DateRule("Have Initial Consultation", "Send Design Agreement", "due", FixedOffset(1)),
    DateRule(
        "Have Initial Consultation", "Site Measure", "start", FixedOffset(14), only_if_blank=True
    ),
    # Agreement
    DateRule(
        "Send Design Agreement", "Receive Signed Agreement & Retainer", "due", FixedOffset(7)
    ),
    # Measure and concept
    DateRule("Site Measure", "Create Floor Plan", "due", FixedOffset(7)),
    DateRule(
        "Site Measure",
        "Present Design Concept",
        "start",
        SecondFridayAfter(),
        skip_if_target_has_start=True,
    ),
    DateRule(
        "Present Design Concept",
        "Present Design Concept",
        "due",
        FixedOffset(14),
        only_if_blank=True,
    ),
    DateRule(
        "Present Design Concept",
        "Weekly Double Tap – Send IP to Client",
        "start",
        NextFriday(),
        skip_if_target_has_start=True,
    ),
    DateRule(
        "Weekly Double Tap – Send IP to Client",
        "Weekly Double Tap – Send IP to Client",
        "due",
        FixedOffset(7),
        rolling=True,
    ),
    # Proposal and ordering
    DateRule("Send Proposal", "Receive Proposal Approval", "due", FixedOffset(7)),
    DateRule("Receive Proposal Approval", "Place Orders", "start", FixedOffset(1), only_if_blank=True),
    DateRule("Place Orders", "Update Jae on Install Timing", "due", NextFriday()),
    DateRule("Place Orders", "Confirm Delivery Dates", "due", FixedOffset(14)),
    DateRule(
        "Confirm Delivery Dates",
        "Update Jae on Install Timing",
        "due",
        NextFriday(),
        target_occurrence=2,
    ),
    DateRule("Confirm Delivery Dates", "Schedule Install", "due", FixedOffset(2)),
    # Install
    DateRule("Install Day", "Schedule Install", "due", PrevFriday(), only_if_blank=True),
    DateRule("Install Day", "Send Install Photos", "due", FixedOffset(2)),
    DateRule(
        "Install Day",
        "Final Walkthrough",
        "start",
        SecondFridayAfter(),
        skip_if_target_has_start=True,
    ),
    # Close-out
    DateRule("Final Walkthrough", "Send Final Invoice", "due", FixedOffset(1)),
    DateRule("Final Walkthrough", "Request Review", "due", FixedOffset(7)),
)

# Setting the anchor's start usually means someone should start the target too
REMINDER_LINKS: tuple[ReminderLink, ...] = (
    ReminderLink("Receive Signed Agreement & Retainer", "Site Measure"),
    ReminderLink("Create Floor Plan", "Present Design Concept"),
    ReminderLink("Present Design Concept", "Send Proposal"),
    ReminderLink("Confirm Delivery Dates", "Install Day"),
)

DEFAULT_RULEBOOK = RuleBook(DATE_RULES, REMINDER_LINKS)
