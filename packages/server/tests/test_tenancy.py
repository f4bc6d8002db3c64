"""
Tenant isolation: every query made through a TenantScope is restricted to
its tenant.
"""

from __future__ import annotations

import pytest

from app.core.errors import CrossTenantReference, NotFound
from app.core.tenancy import TenantScope
from app.models.project import Project
from app.models.task import Task
from app.models.tenant import Tenant
from app.services import activity as activity_service
from app.services import projects as project_service
from app.services import tasks as task_service


@pytest.fixture
async def two_tenants(scope, other_scope, make_project, make_task):
    ours = await make_project(scope, "Maple Street Remodel")
    theirs = await make_project(other_scope, "Rival Tower")
    our_task = await make_task(scope, ours, "Foundation")
    their_task = await make_task(other_scope, theirs, "Crane hire")
    return our_task, their_task


async def test_list_never_returns_other_tenant_tasks(scope, other_scope, two_tenants):
    our_task, their_task = two_tenants

    assert [t.id for t in await task_service.list_tasks(scope)] == [our_task.id]
    assert [t.id for t in await task_service.list_tasks(other_scope)] == [their_task.id]


async def test_get_other_tenant_task_is_not_found(scope, two_tenants):
    _, their_task = two_tenants
    with pytest.raises(NotFound):
        await task_service.get_task(scope, their_task.id)


async def test_resolve_distinguishes_foreign_ids(scope, two_tenants):
    _, their_task = two_tenants
    with pytest.raises(CrossTenantReference):
        await scope.resolve(Task, their_task.id)


async def test_projects_isolated(scope, other_scope, two_tenants):
    projects = await project_service.list_projects(scope)
    assert [p.name for p in projects] == ["Maple Street Remodel"]

    their_project = (await project_service.list_projects(other_scope))[0]
    with pytest.raises(NotFound):
        await project_service.get_project(scope, their_project.id)


async def test_activity_isolated(scope, other_scope, two_tenants):
    ours = await activity_service.list_activity(scope)
    assert ours
    assert all(e.tenant_id == scope.tenant_id for e in ours)
    assert not any(e.payload.get("title") == "Crane hire" for e in ours)


async def test_add_overwrites_tenant_id(scope, other_tenant):
    project = Project(name="Sneaky", tenant_id=other_tenant.id)
    scope.add(project)
    assert project.tenant_id == scope.tenant_id


async def test_bulk_delete_is_scoped(scope, other_scope, two_tenants, session):
    _, their_task = two_tenants
    removed = await scope.delete_where(Task, Task.title == "Crane hire")
    assert removed == 0
    assert await task_service.get_task(other_scope, their_task.id)


async def test_unscoped_model_refused(session, tenant):
    scope = TenantScope(session, tenant)
    with pytest.raises(TypeError):
        scope.select(Tenant)
