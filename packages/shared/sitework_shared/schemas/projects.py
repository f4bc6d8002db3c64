from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .common import ProjectStatus


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    budget: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectCreate(ProjectBase):
    status: ProjectStatus = ProjectStatus.NEW

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    budget: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class ProjectRead(ProjectBase):
    id: UUID
    tenant_id: UUID
    status: ProjectStatus
    created_by: Optional[UUID] = None
    task_count: int = 0
    task_completed_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskOrder(BaseModel):
    """Request body for PUT /projects/{projectId}/task-order."""
    task_ids: list[UUID] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------

class ScheduledTask(BaseModel):
    task_id: UUID
    title: str
    duration_days: int
    earliest_start: int
    earliest_finish: int
    latest_start: int
    latest_finish: int
    slack: int
    critical: bool
    start_date: Optional[date] = None
    finish_date: Optional[date] = None


class ProjectSchedule(BaseModel):
    project_id: UUID
    length_days: int
    order: list[UUID]
    critical_path: list[UUID]
    tasks: list[ScheduledTask]
    start_date: Optional[date] = None
    finish_date: Optional[date] = None
