"""SQLAlchemy models package."""

from designhub.models.project import (
    Project,
    Task,
    TaskDependency,
    TaskTemplate,
)

__all__ = [
    "Project",
    "Task",
    "TaskDependency",
    "TaskTemplate",
]
