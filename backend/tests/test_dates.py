# tests/test_dates.py

from __future__ import annotations

from datetime import date

import pytest

from designhub.scheduling.dates import (
    next_friday,
    previous_friday,
    second_friday_after,
    shift_weekend_to_monday,
)
from designhub.scheduling.rules import FixedOffset, NextFriday, PrevFriday, SecondFridayAfter, compute


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (date(2025, 3, 8), date(2025, 3, 10)),  # Saturday
        (date(2025, 3, 9), date(2025, 3, 10)),  # Sunday
        (date(2025, 3, 10), date(2025, 3, 10)),
        (date(2025, 3, 7), date(2025, 3, 7)),
    ],
)
def test_shift_weekend_to_monday(value: date, expected: date) -> None:
    assert shift_weekend_to_monday(value) == expected


def test_friday_helpers_are_strict() -> None:
    friday = date(2025, 3, 7)

    assert previous_friday(friday) == date(2025, 2, 28)
    assert next_friday(friday) == date(2025, 3, 14)
    assert previous_friday(date(2025, 3, 8)) == friday
    assert next_friday(date(2025, 3, 6)) == friday


def test_second_friday_after_is_one_week_past_next_friday() -> None:
    assert second_friday_after(date(2025, 3, 3)) == date(2025, 3, 14)
    assert second_friday_after(date(2025, 3, 7)) == date(2025, 3, 21)


def test_compute_dispatches_on_calculation_variant() -> None:
    start = date(2025, 1, 15)  # Wednesday

    assert compute(FixedOffset(-5), start) == date(2025, 1, 10)
    assert compute(PrevFriday(), start) == date(2025, 1, 10)
    assert compute(NextFriday(), start) == date(2025, 1, 17)
    assert compute(SecondFridayAfter(), start) == date(2025, 1, 24)


def test_compute_rejects_unknown_calculation() -> None:
    with pytest.raises(TypeError):
        compute("prevFriday", date(2025, 1, 15))  # type: ignore[arg-type]
