"""Scheduling engine exceptions.

Each failure mode of materialization and date propagation has its own class so
callers can decide what to surface. Expected absences (an empty template
library, a rule whose target task is not part of the project) are not errors
and never raise.
"""

from typing import Any
from uuid import UUID


class SchedulingError(Exception):
    """Base exception for scheduling errors."""

    def __init__(self, message: str, code: str = "SCHEDULING_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class TaskNotFoundError(SchedulingError):
    """The task is not part of the loaded project."""

    def __init__(self, task_id: UUID):
        self.task_id = task_id
        super().__init__(message=f"Task {task_id} not found", code="TASK_NOT_FOUND")


class TemplateLoadError(SchedulingError):
    """The template provider failed; materialization aborts with nothing created."""

    def __init__(self, message: str):
        super().__init__(
            message=f"Could not load task templates: {message}",
            code="TEMPLATE_LOAD_FAILED",
        )


class TaskInsertError(SchedulingError):
    """Inserting tasks failed.

    Whether zero or some rows were written depends on the store's batch
    semantics, which the engine does not assume to be atomic.
    """

    def __init__(self, message: str, project_id: UUID | None = None):
        self.project_id = project_id
        super().__init__(
            message=f"Could not create tasks: {message}",
            code="TASK_INSERT_FAILED",
        )


class DependencyInsertError(SchedulingError):
    """Inserting dependency edges failed after tasks were created.

    Non-fatal: the tasks exist, but the affected dependents never cascade.
    """

    def __init__(self, message: str, edge_count: int = 0):
        self.edge_count = edge_count
        super().__init__(
            message=f"Could not create {edge_count} task dependencies: {message}",
            code="DEPENDENCY_INSERT_FAILED",
        )


class FieldUpdateError(SchedulingError):
    """A single persistence call failed.

    Remaining steps of the current pass are abandoned. Writes issued before
    the failure stay committed; `applied` lists them so a UI can reconcile.
    """

    def __init__(
        self,
        task_id: UUID,
        field: str,
        message: str,
        value: Any = None,
    ):
        self.task_id = task_id
        self.field = field
        self.value = value
        self.applied: list = []
        super().__init__(
            message=f"Could not update {field} on task {task_id}: {message}",
            code="FIELD_UPDATE_FAILED",
        )
