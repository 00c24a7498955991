# tests/test_cascade.py

from __future__ import annotations

from datetime import date

import pytest

from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.exceptions import FieldUpdateError
from designhub.scheduling.ports import CollectingListener
from designhub.scheduling.types import DependencyRecord
from designhub.services.cascade import DependencyCascader

from .fakes import FakeStores


@pytest.fixture()
def chain(stores: FakeStores, project):
    """Kickoff <- Follow Up (+14) <- Wrap Up (+3), plus Side Quest (+2) on Kickoff."""
    kickoff = stores.tasks.seed(project.id, "Kickoff", 1)
    follow_up = stores.tasks.seed(project.id, "Follow Up", 2)
    wrap_up = stores.tasks.seed(project.id, "Wrap Up", 3)
    side = stores.tasks.seed(project.id, "Side Quest", 4)
    stores.dependencies.edges = [
        DependencyRecord(follow_up.id, kickoff.id, 14),
        DependencyRecord(wrap_up.id, follow_up.id, 3),
        DependencyRecord(side.id, kickoff.id, 2),
    ]
    context = SchedulingContext(project, stores.tasks.tasks.values())
    return context, kickoff, follow_up, wrap_up, side


async def _set(stores: FakeStores, context: SchedulingContext, task_id, field: str, value) -> None:
    await stores.tasks.update_task_field(task_id, field, value)
    await context.refresh(stores.tasks)


@pytest.mark.asyncio
async def test_due_change_moves_direct_dependents_only(stores: FakeStores, chain) -> None:
    context, kickoff, follow_up, wrap_up, side = chain
    listener = CollectingListener()
    await _set(stores, context, kickoff.id, "due_date", date(2025, 3, 3))

    updates = await DependencyCascader(stores.tasks, stores.dependencies, listener).cascade_from_anchor_due_change(
        context, kickoff.id
    )

    assert [(u.task_id, u.new_value) for u in updates] == [
        (follow_up.id, date(2025, 3, 17)),
        (side.id, date(2025, 3, 5)),
    ]
    assert context.get(follow_up.id).due_date == date(2025, 3, 17)
    # Single hop: the dependent's own dependent is untouched
    assert context.get(wrap_up.id).due_date is None
    assert listener.updates == updates
    assert all(u.source == "dependency" for u in updates)


@pytest.mark.asyncio
async def test_dependent_due_dates_skip_weekends(stores: FakeStores, chain) -> None:
    context, kickoff, follow_up, _, side = chain
    # Saturday + 14 is a Saturday; Saturday + 2 is a Monday
    await _set(stores, context, kickoff.id, "due_date", date(2025, 3, 1))

    await DependencyCascader(stores.tasks, stores.dependencies).cascade_from_anchor_due_change(context, kickoff.id)

    assert stores.tasks.tasks[follow_up.id].due_date == date(2025, 3, 17)
    assert stores.tasks.tasks[side.id].due_date == date(2025, 3, 3)


@pytest.mark.asyncio
async def test_anchor_without_due_date_does_nothing(stores: FakeStores, chain) -> None:
    context, kickoff, *_ = chain

    updates = await DependencyCascader(stores.tasks, stores.dependencies).cascade_from_anchor_due_change(
        context, kickoff.id
    )

    assert updates == []
    assert stores.tasks.writes == []


@pytest.mark.asyncio
async def test_start_change_cascades_while_anchor_has_no_due(stores: FakeStores, chain) -> None:
    context, kickoff, follow_up, *_ = chain
    cascader = DependencyCascader(stores.tasks, stores.dependencies)
    await _set(stores, context, kickoff.id, "start_date", date(2025, 2, 3))

    await cascader.cascade_from_anchor_start_change(context, kickoff.id)
    assert context.get(follow_up.id).due_date == date(2025, 2, 17)

    await _set(stores, context, kickoff.id, "due_date", date(2025, 2, 10))
    await _set(stores, context, kickoff.id, "start_date", date(2025, 2, 5))
    assert await cascader.cascade_from_anchor_start_change(context, kickoff.id) == []
    assert context.get(follow_up.id).due_date == date(2025, 2, 17)


@pytest.mark.asyncio
async def test_failed_dependent_write_reports_what_was_applied(stores: FakeStores, chain) -> None:
    context, kickoff, follow_up, _, side = chain
    await _set(stores, context, kickoff.id, "due_date", date(2025, 3, 3))
    stores.tasks.fail_on.add((side.id, "due_date"))

    with pytest.raises(FieldUpdateError) as exc_info:
        await DependencyCascader(stores.tasks, stores.dependencies).cascade_from_anchor_due_change(
            context, kickoff.id
        )

    assert [u.task_id for u in exc_info.value.applied] == [follow_up.id]
    assert stores.tasks.tasks[follow_up.id].due_date == date(2025, 3, 17)


@pytest.mark.asyncio
async def test_dependents_are_updated_in_task_order(stores: FakeStores, project) -> None:
    kickoff = stores.tasks.seed(project.id, "Kickoff", 1)
    early = stores.tasks.seed(project.id, "Order Samples", 2)
    late = stores.tasks.seed(project.id, "Book Installer", 5)
    # Edges stored out of list order
    stores.dependencies.edges = [
        DependencyRecord(late.id, kickoff.id, 10),
        DependencyRecord(early.id, kickoff.id, 1),
    ]
    context = SchedulingContext(project, stores.tasks.tasks.values())
    await _set(stores, context, kickoff.id, "due_date", date(2025, 3, 3))

    updates = await DependencyCascader(stores.tasks, stores.dependencies).cascade_from_anchor_due_change(
        context, kickoff.id
    )

    assert [u.task_id for u in updates] == [early.id, late.id]
    assert [edge.task_id for edge in await stores.dependencies.list_dependencies(kickoff.id)] == [
        early.id,
        late.id,
    ]
