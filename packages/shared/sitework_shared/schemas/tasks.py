"""Task and dependency Pydantic schemas for shared use across server and clients."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, UUID4, field_validator

from .common import DependencyType, TaskPriority, TaskStatus


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """Strip, drop empties and de-duplicate while keeping first-seen order."""
    if tags is None:
        return None
    seen: dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen[tag] = None
    return list(seen)


def _blank_to_none(value):
    # The web client posts "" for an unassigned task.
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

class TaskBase(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    assignee_id: Optional[UUID4] = None
    tags: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    duration_days: int = Field(default=1, ge=1, le=3650)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value):
        return _clean_tags(value)

    @field_validator("assignee_id", mode="before")
    @classmethod
    def blank_assignee(cls, value):
        return _blank_to_none(value)


class DependencyAdd(BaseModel):
    """Request body for POST /tasks/{taskId}/dependencies."""
    depends_on_task_id: UUID4
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    # None means "use the tenant default"
    lag_days: Optional[int] = None


class TaskCreate(TaskBase):
    project_id: UUID4
    status: TaskStatus = TaskStatus.PENDING
    # None means "use the tenant default"
    priority: Optional[TaskPriority] = None
    position: Optional[int] = Field(default=None, ge=0)
    # Prerequisites stored together with the new task
    dependencies: List[DependencyAdd] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[UUID4] = None
    tags: Optional[List[str]] = None
    position: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    duration_days: Optional[int] = Field(default=None, ge=1, le=3650)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value):
        return _clean_tags(value)

    @field_validator("assignee_id", mode="before")
    @classmethod
    def blank_assignee(cls, value):
        return _blank_to_none(value)


class TaskRead(BaseModel):
    id: UUID4
    tenant_id: UUID4
    project_id: UUID4
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    position: int
    assignee_id: Optional[UUID4] = None
    tags: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    duration_days: int
    dependency_ids: List[UUID4] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

class TaskStatusChange(BaseModel):
    """Request body for POST /tasks/{taskId}/status."""
    status: TaskStatus


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

class DependencyRead(BaseModel):
    id: UUID4
    task_id: UUID4
    depends_on_task_id: UUID4
    depends_on_title: str
    depends_on_status: TaskStatus
    dependency_type: DependencyType
    lag_days: int
    created_by: Optional[UUID] = None
    created_at: datetime


class DependentRead(BaseModel):
    id: UUID4
    task_id: UUID4
    task_title: str
    task_status: TaskStatus
    dependency_type: DependencyType
    lag_days: int


class AncestorsRead(BaseModel):
    task_id: UUID4
    ancestor_ids: List[UUID4]
    unresolved_ids: List[UUID4]
