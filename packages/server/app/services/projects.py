"""
Project service: CRUD, soft archive, task counts and the dependency schedule.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Optional, Sequence

import structlog
from sqlalchemy import func

from app.core.errors import ValidationFailed
from app.core.events import record_event
from app.core.tenancy import TenantScope
from app.models.dependency import TaskDependency
from app.models.project import Project
from app.models.task import Task
from app.services.graph import Edge, compute_schedule
from sitework_shared.schemas.common import ProjectStatus, TaskStatus
from sitework_shared.schemas.projects import (
    ProjectCreate,
    ProjectRead,
    ProjectSchedule,
    ProjectUpdate,
    ScheduledTask,
)

log = structlog.get_logger()


async def get_project(scope: TenantScope, project_id: uuid.UUID) -> Project:
    return await scope.get(Project, project_id)


async def list_projects(
    scope: TenantScope,
    status: Optional[ProjectStatus] = None,
    include_archived: bool = False,
    offset: int = 0,
    limit: int = 25,
) -> list[Project]:
    stmt = scope.select(Project)
    if status:
        stmt = stmt.where(Project.status == status.value)
    elif not include_archived:
        stmt = stmt.where(Project.status != ProjectStatus.ARCHIVED.value)
    stmt = stmt.order_by(Project.created_at, Project.id).offset(offset).limit(limit)
    result = await scope.session.execute(stmt)
    return list(result.scalars().all())


async def create_project(scope: TenantScope, project_in: ProjectCreate) -> Project:
    project = Project(
        name=project_in.name,
        description=project_in.description,
        status=project_in.status.value,
        budget=project_in.budget,
        start_date=project_in.start_date,
        end_date=project_in.end_date,
        created_by=scope.actor_id,
    )
    scope.add(project)
    await scope.session.flush()

    record_event(
        scope,
        "project.created",
        {"project_id": project.id, "name": project.name, "status": project.status},
    )
    return project


async def update_project(
    scope: TenantScope, project: Project, project_in: ProjectUpdate
) -> Project:
    data = project_in.model_dump(exclude_unset=True)
    for key in ("name", "status"):
        if key in data and data[key] is None:
            raise ValidationFailed(f"{key} cannot be null")
    if "status" in data:
        data["status"] = ProjectStatus(data["status"]).value

    start = data.get("start_date", project.start_date)
    end = data.get("end_date", project.end_date)
    if start and end and end < start:
        raise ValidationFailed("end_date must not be before start_date")

    for key, value in data.items():
        setattr(project, key, value)

    scope.session.add(project)
    await scope.session.flush()

    record_event(scope, "project.updated", {"project_id": project.id, **data})
    return project


async def archive_project(scope: TenantScope, project: Project) -> Project:
    """Soft removal. Projects are never hard-deleted."""
    if project.status == ProjectStatus.ARCHIVED.value:
        return project
    previous = project.status
    project.status = ProjectStatus.ARCHIVED.value
    scope.session.add(project)
    await scope.session.flush()

    record_event(
        scope,
        "project.archived",
        {"project_id": project.id, "from_status": previous},
    )
    return project


async def to_read_models(
    scope: TenantScope, projects: Sequence[Project]
) -> list[ProjectRead]:
    """Attach task_count and task_completed_count to each project."""
    if not projects:
        return []

    project_ids = [p.id for p in projects]
    stmt = (
        scope.select(Task, Task.project_id, Task.status, func.count().label("cnt"))
        .where(Task.project_id.in_(project_ids))
        .group_by(Task.project_id, Task.status)
    )
    result = await scope.session.execute(stmt)

    totals: dict[uuid.UUID, int] = {}
    completed: dict[uuid.UUID, int] = {}
    for row in result:
        totals[row.project_id] = totals.get(row.project_id, 0) + row.cnt
        if row.status == TaskStatus.COMPLETED.value:
            completed[row.project_id] = row.cnt

    return [
        ProjectRead.model_validate(p).model_copy(
            update={
                "task_count": totals.get(p.id, 0),
                "task_completed_count": completed.get(p.id, 0),
            }
        )
        for p in projects
    ]


async def project_schedule(scope: TenantScope, project: Project) -> ProjectSchedule:
    """Topological order, earliest/latest starts and critical path for a project.

    Cancelled tasks are left out, along with any edge touching them.
    """
    result = await scope.session.execute(
        scope.select(Task).where(
            Task.project_id == project.id,
            Task.status != TaskStatus.CANCELLED.value,
        )
    )
    tasks = {t.id: t for t in result.scalars().all()}

    dep_result = await scope.session.execute(
        scope.select(TaskDependency).where(TaskDependency.task_id.in_(list(tasks)))
    )
    edges = [
        Edge(d.task_id, d.depends_on_task_id, d.dependency_type, d.lag_days)
        for d in dep_result.scalars().all()
    ]

    positions = {tid: (t.position, str(tid)) for tid, t in tasks.items()}
    schedule = compute_schedule(
        {tid: t.duration_days for tid, t in tasks.items()},
        edges,
        key=positions.__getitem__,
    )

    def _on(day: int):
        return project.start_date + timedelta(days=day) if project.start_date else None

    scheduled = []
    for tid in schedule.order:
        entry = schedule.entries[tid]
        scheduled.append(
            ScheduledTask(
                task_id=tid,
                title=tasks[tid].title,
                duration_days=entry.duration,
                earliest_start=entry.earliest_start,
                earliest_finish=entry.earliest_finish,
                latest_start=entry.latest_start,
                latest_finish=entry.latest_finish,
                slack=entry.slack,
                critical=entry.critical,
                start_date=_on(entry.earliest_start),
                finish_date=_on(entry.earliest_finish),
            )
        )

    log.debug("project.schedule", project_id=str(project.id), tasks=len(scheduled))
    return ProjectSchedule(
        project_id=project.id,
        length_days=schedule.length,
        order=schedule.order,
        critical_path=schedule.critical_path,
        tasks=scheduled,
        start_date=project.start_date,
        finish_date=_on(schedule.length),
    )
