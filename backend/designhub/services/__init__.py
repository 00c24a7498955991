"""Services package."""

from designhub.services.cascade import DependencyCascader
from designhub.services.date_rules import DateRuleEngine
from designhub.services.materializer import MaterializationResult, TaskMaterializer
from designhub.services.projects import ProjectCounters, ProjectService
from designhub.services.reminders import ReminderAdvisor
from designhub.services.stores import (
    SchedulingStores,
    SQLDependencyStore,
    SQLTaskStore,
    SQLTemplateProvider,
)
from designhub.services.task_editing import TaskEditService

__all__ = [
    "DependencyCascader",
    "DateRuleEngine",
    "MaterializationResult",
    "TaskMaterializer",
    "ProjectCounters",
    "ProjectService",
    "ReminderAdvisor",
    "SchedulingStores",
    "SQLDependencyStore",
    "SQLTaskStore",
    "SQLTemplateProvider",
    "TaskEditService",
]
