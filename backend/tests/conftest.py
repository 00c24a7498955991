# tests/conftest.py

from __future__ import annotations

import pytest

from designhub.scheduling.assignees import resolve_assignees
from designhub.scheduling.context import SchedulingContext
from designhub.scheduling.library import TEMPLATE_LIBRARY
from designhub.scheduling.ports import CollectingListener
from designhub.scheduling.types import ProjectRecord, TaskTemplateRecord
from designhub.services.task_editing import TaskEditService

from .fakes import FakeStores, make_template


@pytest.fixture()
def stores() -> FakeStores:
    return FakeStores()


@pytest.fixture()
def library() -> list[TaskTemplateRecord]:
    """The seeded design-project library as template records."""
    templates: list[TaskTemplateRecord] = []
    by_title: dict[str, TaskTemplateRecord] = {}
    for data in TEMPLATE_LIBRARY:
        anchor = by_title.get(data["anchor"]) if "anchor" in data else None
        template = make_template(
            data["title"],
            data["position"],
            role=data["role"],
            anchor=anchor,
            offset_days=data.get("offset_days"),
        )
        templates.append(template)
        by_title.setdefault(template.title, template)
    return templates


@pytest.fixture()
def project(stores: FakeStores) -> ProjectRecord:
    return stores.projects.add("Smith Residence", designer="Alice")


@pytest.fixture()
def context(stores: FakeStores, library: list[TaskTemplateRecord], project: ProjectRecord) -> SchedulingContext:
    """
    A project whose tasks mirror the library one-to-one.

    Tasks are placed in the store directly so engine tests don't depend on
    the materializer.
    """
    stores.templates.templates = list(library)
    for template in library:
        stores.tasks.seed(
            project.id,
            template.title,
            template.position,
            template_id=template.id,
            role=template.role,
            assignees=tuple(resolve_assignees(template.role, project)),
        )
    return SchedulingContext(project, stores.tasks.tasks.values(), library)


@pytest.fixture()
def listener() -> CollectingListener:
    return CollectingListener()


@pytest.fixture()
def edits(stores: FakeStores, listener: CollectingListener) -> TaskEditService:
    return TaskEditService(stores.tasks, stores.dependencies, listener=listener)
