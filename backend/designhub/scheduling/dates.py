"""Calendar-day arithmetic for task scheduling.

All values are `datetime.date`; there is no time-of-day or time zone.
"""

from datetime import date, timedelta

FRIDAY = 4
SATURDAY = 5
SUNDAY = 6


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def shift_weekend_to_monday(value: date) -> date:
    """Saturday and Sunday move forward to the following Monday."""
    weekday = value.weekday()
    if weekday == SATURDAY:
        return value + timedelta(days=2)
    if weekday == SUNDAY:
        return value + timedelta(days=1)
    return value


def previous_friday(value: date) -> date:
    """Latest Friday strictly before `value`."""
    back = (value.weekday() - FRIDAY) % 7 or 7
    return value - timedelta(days=back)


def next_friday(value: date) -> date:
    """Earliest Friday strictly after `value`."""
    ahead = (FRIDAY - value.weekday()) % 7 or 7
    return value + timedelta(days=ahead)


def second_friday_after(value: date) -> date:
    return next_friday(value) + timedelta(days=7)
