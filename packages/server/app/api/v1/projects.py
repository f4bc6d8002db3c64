"""
Project endpoints: CRUD, soft archive, task ordering and the schedule.

- Projects are never hard-deleted; archive sets status ``archived``.
- Archived projects are hidden from the list unless requested.
- The schedule reports earliest/latest dates and the critical path computed
  from the task dependency graph.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api.deps import Page, pagination
from app.core.tenancy import TenantScope, get_tenant_scope
from app.services import projects as project_service
from app.services import tasks as task_service
from sitework_shared.schemas.common import ProjectStatus
from sitework_shared.schemas.projects import (
    ProjectCreate,
    ProjectRead,
    ProjectSchedule,
    ProjectUpdate,
    TaskOrder,
)
from sitework_shared.schemas.tasks import TaskRead

router = APIRouter()


@router.get("", response_model=List[ProjectRead])
async def list_projects_endpoint(
    status: Optional[ProjectStatus] = None,
    include_archived: bool = False,
    page: Page = Depends(pagination),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """List projects. Archived projects are excluded unless asked for."""
    projects = await project_service.list_projects(
        scope,
        status=status,
        include_archived=include_archived,
        offset=page.offset,
        limit=page.per_page,
    )
    return await project_service.to_read_models(scope, projects)


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project_endpoint(
    project_in: ProjectCreate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Create a new project."""
    project = await project_service.create_project(scope, project_in)
    await scope.session.commit()
    return (await project_service.to_read_models(scope, [project]))[0]


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project_endpoint(
    project_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    project = await project_service.get_project(scope, project_id)
    return (await project_service.to_read_models(scope, [project]))[0]


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project_endpoint(
    project_id: uuid.UUID,
    project_in: ProjectUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Update project fields. Restoring an archived project is a status update."""
    project = await project_service.get_project(scope, project_id)
    project = await project_service.update_project(scope, project, project_in)
    await scope.session.commit()
    return (await project_service.to_read_models(scope, [project]))[0]


@router.post("/{project_id}/archive", response_model=ProjectRead)
async def archive_project_endpoint(
    project_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Archive a project (idempotent)."""
    project = await project_service.get_project(scope, project_id)
    project = await project_service.archive_project(scope, project)
    await scope.session.commit()
    return (await project_service.to_read_models(scope, [project]))[0]


@router.get("/{project_id}/schedule", response_model=ProjectSchedule)
async def project_schedule_endpoint(
    project_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Topological order, earliest/latest starts and critical path."""
    project = await project_service.get_project(scope, project_id)
    return await project_service.project_schedule(scope, project)


@router.put("/{project_id}/task-order", response_model=List[TaskRead])
async def reorder_tasks_endpoint(
    project_id: uuid.UUID,
    body: TaskOrder,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Set task positions from the order of ``task_ids``."""
    project = await project_service.get_project(scope, project_id)
    tasks = await task_service.reorder_tasks(scope, project, body.task_ids)
    await scope.session.commit()
    return await task_service.to_read_models(scope, tasks)
