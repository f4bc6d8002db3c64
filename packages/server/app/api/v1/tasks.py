"""
Task endpoints: CRUD, status changes, dependencies.

- Status gate: a task cannot start or complete while a finish-to-start
  prerequisite is still open (tenant setting).
- Dependencies: same-project only, duplicates and cycles rejected on add.
- Deleting a task removes every dependency edge touching it.
"""

from __future__ import annotations

import uuid
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import Page, pagination
from app.core.tenancy import TenantScope, get_tenant_scope
from app.services import dependencies as dependency_service
from app.services import tasks as task_service
from sitework_shared.schemas.common import TaskPriority, TaskStatus
from sitework_shared.schemas.tasks import (
    AncestorsRead,
    DependencyAdd,
    DependencyRead,
    DependentRead,
    TaskCreate,
    TaskRead,
    TaskStatusChange,
    TaskUpdate,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------


@router.get("", response_model=List[TaskRead])
async def list_tasks_endpoint(
    project_id: Optional[uuid.UUID] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    assignee_id: Optional[uuid.UUID] = None,
    tag: Optional[str] = None,
    page: Page = Depends(pagination),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """List tasks with optional filters by project, status, priority, assignee, tag."""
    tasks = await task_service.list_tasks(
        scope,
        project_id=project_id,
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        tag=tag,
        offset=page.offset,
        limit=page.per_page,
    )
    return await task_service.to_read_models(scope, tasks)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task_endpoint(
    task_in: TaskCreate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Create a new task in a project of this tenant."""
    task = await task_service.create_task(scope, task_in)
    await scope.session.commit()
    return await task_service.to_read(scope, task)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task_endpoint(
    task_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    task = await task_service.get_task(scope, task_id)
    return await task_service.to_read(scope, task)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task_endpoint(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Update task fields. Status changes go through POST /status."""
    task = await task_service.get_task(scope, task_id)
    task = await task_service.update_task(scope, task, task_in)
    await scope.session.commit()
    return await task_service.to_read(scope, task)


@router.delete("/{task_id}", status_code=204)
async def delete_task_endpoint(
    task_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Delete a task and every dependency edge touching it."""
    task = await task_service.get_task(scope, task_id)
    await task_service.delete_task(scope, task)
    await scope.session.commit()


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


@router.post("/{task_id}/status", response_model=TaskRead)
async def change_status_endpoint(
    task_id: uuid.UUID,
    body: TaskStatusChange,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Move a task to a new status. Blocked while prerequisites are open."""
    task = await task_service.get_task(scope, task_id)
    task = await task_service.change_task_status(scope, task, body.status)
    await scope.session.commit()
    return await task_service.to_read(scope, task)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


@router.get("/{task_id}/dependencies", response_model=List[DependencyRead])
async def list_dependencies_endpoint(
    task_id: uuid.UUID,
    order: Optional[Literal["created"]] = Query(None),
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Prerequisites of this task."""
    task = await task_service.get_task(scope, task_id)
    return await dependency_service.list_dependencies(scope, task, order=order)


@router.post("/{task_id}/dependencies", response_model=DependencyRead, status_code=201)
async def add_dependency_endpoint(
    task_id: uuid.UUID,
    body: DependencyAdd,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Make this task depend on ``depends_on_task_id``. Detects cycles."""
    dep = await dependency_service.add_dependency(
        scope,
        task_id,
        body.depends_on_task_id,
        dependency_type=body.dependency_type,
        lag_days=body.lag_days,
    )
    await scope.session.commit()
    return dep


@router.delete("/{task_id}/dependencies")
async def clear_dependencies_endpoint(
    task_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Remove every prerequisite of this task."""
    task = await task_service.get_task(scope, task_id)
    removed = await dependency_service.clear_dependencies(scope, task)
    await scope.session.commit()
    return {"removed": removed}


@router.delete("/{task_id}/dependencies/{prerequisite_id}", status_code=204)
async def remove_dependency_endpoint(
    task_id: uuid.UUID,
    prerequisite_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Remove one dependency edge."""
    task = await task_service.get_task(scope, task_id)
    await dependency_service.remove_dependency(scope, task, prerequisite_id)
    await scope.session.commit()


@router.get("/{task_id}/dependents", response_model=List[DependentRead])
async def list_dependents_endpoint(
    task_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Tasks that depend on this task."""
    task = await task_service.get_task(scope, task_id)
    return await dependency_service.list_dependents(scope, task)


@router.get("/{task_id}/ancestors", response_model=AncestorsRead)
async def ancestors_endpoint(
    task_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Transitive prerequisites, and which of them are still open."""
    task = await task_service.get_task(scope, task_id)
    return await dependency_service.blocking_ancestors(scope, task)
