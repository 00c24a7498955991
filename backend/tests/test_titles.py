# tests/test_titles.py

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from designhub.scheduling.titles import TitleIndex, fold_title, normalize, ordered_tasks
from designhub.scheduling.types import TaskRecord

from .fakes import make_template

PROJECT_ID = uuid4()


def _task(title: str, position: int, **fields) -> TaskRecord:
    return TaskRecord(id=uuid4(), project_id=PROJECT_ID, title=title, position=position, **fields)


def test_alias_and_typography_collapse_to_one_key() -> None:
    assert normalize("Weekly Double Tap – Send IP to Client") == normalize(
        "Weekly Double Tab - Send IP to Client"
    )


def test_normalize_folds_quotes_spaces_and_case() -> None:
    assert normalize("  Receive  Signed Agreement & RETAINER ") == normalize(
        "Receive Signed Agreement & Retainer"
    )
    assert fold_title("Client’s “Final” Walkthrough") == "client's \"final\" walkthrough"


def test_legacy_alias_maps_to_current_title() -> None:
    assert normalize("Have Initial Consult") == normalize("Have Initial Consultation")
    assert normalize("update jae on install timeline") == normalize("Update Jae on Install Timing")


def test_empty_title_normalizes_to_empty_string() -> None:
    assert normalize(None) == ""
    assert normalize("   ") == ""


def test_ordered_tasks_breaks_position_ties_by_creation_time() -> None:
    later = _task("B", 3, created_at=datetime(2025, 1, 2, tzinfo=timezone.utc))
    earlier = _task("A", 3, created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    first = _task("C", 1)

    assert [t.title for t in ordered_tasks([later, earlier, first])] == ["C", "A", "B"]


def test_find_by_occurrence_returns_the_later_duplicate() -> None:
    first = _task("Update Jae on Install Timing", 12)
    other = _task("Confirm Delivery Dates", 13)
    second = _task("Update Jae on Install Timing", 14)
    index = TitleIndex.build([second, other, first])

    assert index.find_by_occurrence("Update Jae on Install Timing", 1) == first.id
    assert index.find_by_occurrence("Update Jae on Install Timing", 2) == second.id
    assert index.find_by_occurrence("Update Jae on Install Timing", 3) is None
    assert index.occurrence_of(second.id) == 2


def test_find_by_occurrence_rejects_non_positive_and_unknown_titles() -> None:
    index = TitleIndex.build([_task("Site Measure", 1)])

    assert index.find_by_occurrence("Site Measure", 0) is None
    assert index.find_by_occurrence("Install Day") is None


def test_renamed_task_is_found_by_its_template_title() -> None:
    template = make_template("Site Measure", 5)
    task = _task("Measure the Smith kitchen", 5, template_id=template.id)
    index = TitleIndex.build([task], [template])

    assert index.find_by_occurrence("Site Measure") == task.id
    assert index.find_by_occurrence("Measure the Smith kitchen") is None


def test_legacy_row_without_template_link_uses_its_own_title() -> None:
    task = _task("Weekly Double Tab - Send IP to Client", 8)
    index = TitleIndex.build([task], [make_template("Weekly Double Tap – Send IP to Client", 8)])

    assert index.find_by_occurrence("Weekly Double Tap – Send IP to Client") == task.id
    assert "weekly double tap - send ip to client" in index


def test_index_reflects_snapshot_it_was_built_from() -> None:
    task = _task("Install Day", 16)
    index = TitleIndex.build([task])
    renamed = replace(task, title="Install Week")

    assert len(index) == 1
    assert index.find_by_occurrence("Install Day") == task.id
    assert TitleIndex.build([renamed]).find_by_occurrence("Install Week") == task.id
