"""
Task service layer: business logic for tasks.

Handles:
- Task CRUD scoped to a tenant project, with contact assignees
- Status changes with the unfinished-prerequisite gate
- Manual ordering inside a project
- Deletion together with every dependency edge touching the task
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog
from sqlalchemy import func, or_

from app.core.errors import TaskBlocked, ValidationFailed
from app.core.events import record_event
from app.core.tenancy import TenantScope
from app.models.contact import Contact
from app.models.dependency import TaskDependency
from app.models.project import Project
from app.models.task import Task
from app.services import dependencies as dependency_service
from sitework_shared.schemas.common import (
    GATED_TASK_STATUSES,
    RESOLVED_TASK_STATUSES,
    DependencyType,
    TaskPriority,
    TaskStatus,
)
from sitework_shared.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_task(scope: TenantScope, task_id: uuid.UUID) -> Task:
    return await scope.get(Task, task_id)


async def _check_assignee(scope: TenantScope, assignee_id: Optional[uuid.UUID]) -> None:
    if assignee_id is not None:
        await scope.resolve(Contact, assignee_id)


async def _next_position(scope: TenantScope, project_id: uuid.UUID) -> int:
    result = await scope.session.execute(
        scope.select(Task, func.max(Task.position)).where(Task.project_id == project_id)
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def _dependency_ids(
    scope: TenantScope, task_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, list[uuid.UUID]]:
    if not task_ids:
        return {}
    result = await scope.session.execute(
        scope.select(
            TaskDependency, TaskDependency.task_id, TaskDependency.depends_on_task_id
        ).where(TaskDependency.task_id.in_(list(task_ids)))
    )
    deps: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    for row in result.all():
        deps[row.task_id].append(row.depends_on_task_id)
    return deps


def _read(task: Task, dependency_ids: list[uuid.UUID]) -> TaskRead:
    return TaskRead(
        id=task.id,
        tenant_id=task.tenant_id,
        project_id=task.project_id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        position=task.position,
        assignee_id=task.assignee_id,
        tags=task.tags or [],
        start_date=task.start_date,
        due_date=task.due_date,
        duration_days=task.duration_days,
        dependency_ids=dependency_ids,
        completed_at=task.completed_at,
        created_by=task.created_by,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def to_read(scope: TenantScope, task: Task) -> TaskRead:
    deps = await _dependency_ids(scope, [task.id])
    return _read(task, deps.get(task.id, []))


async def to_read_models(scope: TenantScope, tasks: Sequence[Task]) -> list[TaskRead]:
    deps = await _dependency_ids(scope, [t.id for t in tasks])
    return [_read(t, deps.get(t.id, [])) for t in tasks]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def list_tasks(
    scope: TenantScope,
    project_id: Optional[uuid.UUID] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    assignee_id: Optional[uuid.UUID] = None,
    tag: Optional[str] = None,
    offset: int = 0,
    limit: int = 25,
) -> list[Task]:
    stmt = scope.select(Task)
    if project_id:
        stmt = stmt.where(Task.project_id == project_id)
    if status:
        stmt = stmt.where(Task.status == status.value)
    if priority:
        stmt = stmt.where(Task.priority == priority.value)
    if assignee_id:
        stmt = stmt.where(Task.assignee_id == assignee_id)
    stmt = stmt.order_by(Task.position, Task.created_at, Task.id)

    if not tag:
        result = await scope.session.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all())

    # Tags live in a JSON column; filter here so SQLite and PostgreSQL agree.
    result = await scope.session.execute(stmt)
    tagged = [t for t in result.scalars().all() if tag in (t.tags or [])]
    return tagged[offset : offset + limit]


async def create_task(scope: TenantScope, task_in: TaskCreate) -> Task:
    project = await scope.resolve(Project, task_in.project_id)
    await _check_assignee(scope, task_in.assignee_id)

    priority = task_in.priority or scope.settings.task_defaults.default_priority
    position = task_in.position
    if position is None:
        position = await _next_position(scope, project.id)

    task = Task(
        project_id=project.id,
        title=task_in.title,
        description=task_in.description,
        status=task_in.status.value,
        priority=TaskPriority(priority).value,
        position=position,
        assignee_id=task_in.assignee_id,
        tags=task_in.tags,
        start_date=task_in.start_date,
        due_date=task_in.due_date,
        duration_days=task_in.duration_days,
        created_by=scope.actor_id,
    )
    if task.status == TaskStatus.COMPLETED.value:
        task.completed_at = datetime.now(timezone.utc)
    scope.add(task)
    await scope.session.flush()

    record_event(
        scope,
        "task.created",
        {
            "task_id": task.id,
            "project_id": project.id,
            "title": task.title,
            "status": task.status,
            "priority": task.priority,
        },
    )

    # Any rejected edge aborts the whole request, task included.
    for dep_in in task_in.dependencies:
        await dependency_service.add_dependency(
            scope,
            task.id,
            dep_in.depends_on_task_id,
            dependency_type=dep_in.dependency_type,
            lag_days=dep_in.lag_days,
        )
    return task


async def update_task(scope: TenantScope, task: Task, task_in: TaskUpdate) -> Task:
    data = task_in.model_dump(exclude_unset=True)

    if "assignee_id" in data:
        await _check_assignee(scope, data["assignee_id"])
    if data.get("priority") is not None:
        data["priority"] = TaskPriority(data["priority"]).value
    for key in ("title", "duration_days", "priority", "position"):
        if key in data and data[key] is None:
            raise ValidationFailed(f"{key} cannot be null")
    if "tags" in data and data["tags"] is None:
        data["tags"] = []

    for key, value in data.items():
        setattr(task, key, value)

    scope.session.add(task)
    await scope.session.flush()

    record_event(scope, "task.updated", {"task_id": task.id, **data})
    return task


async def reorder_tasks(
    scope: TenantScope, project: Project, task_ids: Sequence[uuid.UUID]
) -> list[Task]:
    """Set ``position`` to the list index of each task id."""
    if len(set(task_ids)) != len(task_ids):
        raise ValidationFailed("Task order contains duplicate ids")

    result = await scope.session.execute(
        scope.select(Task).where(Task.id.in_(list(task_ids)))
    )
    tasks = {t.id: t for t in result.scalars().all()}

    for task_id in task_ids:
        task = tasks.get(task_id)
        if task is None or task.project_id != project.id:
            raise ValidationFailed(f"Task {task_id} is not part of this project")

    ordered = []
    for position, task_id in enumerate(task_ids):
        task = tasks[task_id]
        task.position = position
        scope.session.add(task)
        ordered.append(task)
    await scope.session.flush()

    record_event(
        scope,
        "project.tasks.reordered",
        {"project_id": project.id, "task_ids": list(task_ids)},
    )
    return ordered


async def delete_task(scope: TenantScope, task: Task) -> None:
    """Remove the task and every edge where it is either endpoint."""
    payload = {"task_id": task.id, "project_id": task.project_id, "title": task.title}
    removed_edges = await scope.delete_where(
        TaskDependency,
        or_(
            TaskDependency.task_id == task.id,
            TaskDependency.depends_on_task_id == task.id,
        ),
    )
    await scope.delete(task)
    await scope.session.flush()

    record_event(scope, "task.deleted", {**payload, "removed_dependencies": removed_edges})


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


async def unresolved_prerequisites(scope: TenantScope, task: Task) -> list[Task]:
    """Finish-to-start prerequisites that are neither completed nor cancelled."""
    result = await scope.session.execute(
        scope.select(Task)
        .join(TaskDependency, TaskDependency.depends_on_task_id == Task.id)
        .where(
            TaskDependency.task_id == task.id,
            TaskDependency.dependency_type == DependencyType.FINISH_TO_START.value,
        )
        .order_by(Task.position, Task.id)
    )
    return [t for t in result.scalars().all() if t.status not in RESOLVED_TASK_STATUSES]


async def change_task_status(
    scope: TenantScope, task: Task, to_status: TaskStatus
) -> Task:
    old_status = task.status
    if old_status == to_status.value:
        return task

    if (
        to_status in GATED_TASK_STATUSES
        and scope.settings.task_defaults.block_on_unfinished_prerequisites
    ):
        blockers = await unresolved_prerequisites(scope, task)
        if blockers:
            names = ", ".join(b.title for b in blockers)
            log.info(
                "task.status.blocked",
                task_id=str(task.id),
                to_status=to_status.value,
                blockers=[str(b.id) for b in blockers],
            )
            raise TaskBlocked(
                f"Cannot move to '{to_status.value}': unfinished prerequisites: {names}",
                blocker_ids=[b.id for b in blockers],
            )

    task.status = to_status.value
    if to_status == TaskStatus.COMPLETED:
        task.completed_at = datetime.now(timezone.utc)
    elif old_status == TaskStatus.COMPLETED.value:
        task.completed_at = None  # reopen

    scope.session.add(task)
    await scope.session.flush()

    record_event(
        scope,
        "task.status_changed",
        {
            "task_id": task.id,
            "from_status": old_status,
            "to_status": to_status.value,
            "title": task.title,
        },
    )
    return task
