"""Task model."""

from datetime import date, datetime
from typing import List, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import JSONType, TenantMixin, TimestampMixin, UUIDMixin


class Task(UUIDMixin, TimestampMixin, TenantMixin, SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = (
        sa.Index("ix_tasks_project_position", "project_id", "position"),
        sa.CheckConstraint("duration_days >= 1", name="positive_duration"),
    )

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="pending")  # pending | in-progress | review | on-hold | completed | cancelled
    priority: str = Field(nullable=False, default="medium")  # low | medium | high | critical
    position: int = Field(nullable=False, default=0)
    assignee_id: Optional[uuid.UUID] = Field(default=None, foreign_key="contacts.id", index=True)
    tags: List[str] = Field(default_factory=list, sa_type=JSONType, nullable=False)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    duration_days: int = Field(nullable=False, default=1)
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    created_by: Optional[uuid.UUID] = None
