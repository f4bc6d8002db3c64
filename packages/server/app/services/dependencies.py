"""
Task dependency manager.

Edges point from the dependent task to its prerequisite
(``task_id`` depends on ``depends_on_task_id``). Both ends always belong to
the same project and tenant, and the stored graph is kept acyclic.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError

from app.core.errors import (
    CrossProjectReference,
    CycleDetected,
    DuplicateEdge,
    NotFound,
    ValidationFailed,
)
from app.core.events import record_event
from app.core.tenancy import TenantScope
from app.models.dependency import TaskDependency
from app.models.task import Task
from app.services.graph import ancestors, build_adjacency, would_create_cycle
from sitework_shared.schemas.common import RESOLVED_TASK_STATUSES, DependencyType
from sitework_shared.schemas.tasks import AncestorsRead, DependencyRead, DependentRead

log = structlog.get_logger()


async def project_adjacency(
    scope: TenantScope, project_id: uuid.UUID
) -> dict[uuid.UUID, list[uuid.UUID]]:
    """``{task_id: [prerequisite ids]}`` for every edge inside a project."""
    result = await scope.session.execute(
        scope.select(
            TaskDependency, TaskDependency.task_id, TaskDependency.depends_on_task_id
        )
        .join(Task, Task.id == TaskDependency.task_id)
        .where(Task.project_id == project_id)
    )
    return build_adjacency((row.task_id, row.depends_on_task_id) for row in result.all())


async def _find_edge(
    scope: TenantScope, task_id: uuid.UUID, prerequisite_id: uuid.UUID
) -> Optional[TaskDependency]:
    result = await scope.session.execute(
        scope.select(TaskDependency).where(
            TaskDependency.task_id == task_id,
            TaskDependency.depends_on_task_id == prerequisite_id,
        )
    )
    return result.scalar_one_or_none()


def _describe_path(path: list[uuid.UUID], titles: dict[uuid.UUID, str]) -> str:
    return " -> ".join(titles.get(node, str(node)) for node in path)


def to_read(dep: TaskDependency, prerequisite: Task) -> DependencyRead:
    return DependencyRead(
        id=dep.id,
        task_id=dep.task_id,
        depends_on_task_id=dep.depends_on_task_id,
        depends_on_title=prerequisite.title,
        depends_on_status=prerequisite.status,
        dependency_type=dep.dependency_type,
        lag_days=dep.lag_days,
        created_by=dep.created_by,
        created_at=dep.created_at,
    )


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def add_dependency(
    scope: TenantScope,
    task_id: uuid.UUID,
    prerequisite_id: uuid.UUID,
    dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    lag_days: Optional[int] = None,
) -> DependencyRead:
    """Store "``task_id`` depends on ``prerequisite_id``" after validating it."""
    if lag_days is None:
        lag_days = scope.settings.task_defaults.default_lag_days
    if lag_days < 0:
        raise ValidationFailed("lag_days must be zero or positive")

    if task_id == prerequisite_id:
        raise CycleDetected("A task cannot depend on itself", path=[task_id, task_id])

    task = await scope.get(Task, task_id)
    prerequisite = await scope.resolve(Task, prerequisite_id)

    if task.project_id != prerequisite.project_id:
        raise CrossProjectReference("Dependencies must stay within one project")

    if await _find_edge(scope, task.id, prerequisite.id):
        raise DuplicateEdge(f"'{task.title}' already depends on '{prerequisite.title}'")

    adjacency = await project_adjacency(scope, task.project_id)
    cycle = would_create_cycle(adjacency, task.id, prerequisite.id)
    if cycle:
        result = await scope.session.execute(
            scope.select(Task, Task.id, Task.title).where(Task.id.in_(list(set(cycle))))
        )
        titles = {row.id: row.title for row in result.all()}
        log.info("task.dependency.cycle_rejected", task_id=str(task.id), path=[str(n) for n in cycle])
        raise CycleDetected(
            f"Adding this dependency would create a cycle: {_describe_path(cycle, titles)}",
            path=cycle,
        )

    dep = TaskDependency(
        task_id=task.id,
        depends_on_task_id=prerequisite.id,
        dependency_type=DependencyType(dependency_type).value,
        lag_days=lag_days,
        created_by=scope.actor_id,
    )
    scope.add(dep)
    try:
        await scope.session.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same edge
        raise DuplicateEdge(
            f"'{task.title}' already depends on '{prerequisite.title}'"
        ) from exc

    record_event(
        scope,
        "task.dependency.added",
        {
            "task_id": task.id,
            "depends_on_task_id": prerequisite.id,
            "dependency_type": dep.dependency_type,
            "lag_days": dep.lag_days,
        },
    )
    return to_read(dep, prerequisite)


async def remove_dependency(
    scope: TenantScope, task: Task, prerequisite_id: uuid.UUID
) -> None:
    """Delete exactly the edge ``task -> prerequisite``."""
    dep = await _find_edge(scope, task.id, prerequisite_id)
    if dep is None:
        raise NotFound("Dependency not found")
    await scope.delete(dep)
    await scope.session.flush()

    record_event(
        scope,
        "task.dependency.removed",
        {"task_id": task.id, "depends_on_task_id": prerequisite_id},
    )


async def clear_dependencies(scope: TenantScope, task: Task) -> int:
    """Delete every edge where ``task`` is the dependent. Returns the count."""
    removed = await scope.delete_where(TaskDependency, TaskDependency.task_id == task.id)
    await scope.session.flush()

    if removed:
        record_event(
            scope,
            "task.dependencies.cleared",
            {"task_id": task.id, "removed": removed},
        )
    return removed


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_dependencies(
    scope: TenantScope, task: Task, order: Optional[str] = None
) -> list[DependencyRead]:
    stmt = (
        scope.select(TaskDependency, TaskDependency, Task)
        .join(Task, Task.id == TaskDependency.depends_on_task_id)
        .where(TaskDependency.task_id == task.id)
    )
    if order == "created":
        stmt = stmt.order_by(TaskDependency.created_at, TaskDependency.id)
    result = await scope.session.execute(stmt)
    return [to_read(dep, prerequisite) for dep, prerequisite in result.all()]


async def list_dependents(scope: TenantScope, task: Task) -> list[DependentRead]:
    result = await scope.session.execute(
        scope.select(TaskDependency, TaskDependency, Task)
        .join(Task, Task.id == TaskDependency.task_id)
        .where(TaskDependency.depends_on_task_id == task.id)
        .order_by(Task.position, Task.id)
    )
    return [
        DependentRead(
            id=dep.id,
            task_id=dependent.id,
            task_title=dependent.title,
            task_status=dependent.status,
            dependency_type=dep.dependency_type,
            lag_days=dep.lag_days,
        )
        for dep, dependent in result.all()
    ]


async def blocking_ancestors(scope: TenantScope, task: Task) -> AncestorsRead:
    """Every transitive prerequisite, and the ones not yet completed or cancelled."""
    adjacency = await project_adjacency(scope, task.project_id)
    found = ancestors(adjacency, task.id)

    unresolved: list[uuid.UUID] = []
    if found:
        result = await scope.session.execute(
            scope.select(Task, Task.id, Task.status).where(Task.id.in_(list(found)))
        )
        unresolved = [
            row.id for row in result.all() if row.status not in RESOLVED_TASK_STATUSES
        ]

    return AncestorsRead(
        task_id=task.id,
        ancestor_ids=sorted(found, key=str),
        unresolved_ids=sorted(unresolved, key=str),
    )
