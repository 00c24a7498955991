"""API router package."""

from fastapi import APIRouter

from designhub.api.v1 import health, projects, tasks, templates

router = APIRouter()

# Include all API routers
router.include_router(health.router, tags=["Health"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(templates.router, prefix="/task-templates", tags=["Task Templates"])
