"""Task dependency model: ``task_id`` depends on ``depends_on_task_id``."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TenantMixin, UUIDMixin, _utcnow


class TaskDependency(UUIDMixin, TenantMixin, SQLModel, table=True):
    __tablename__ = "task_dependencies"
    __table_args__ = (
        sa.UniqueConstraint("task_id", "depends_on_task_id", name="uq_task_dependency_edge"),
        sa.CheckConstraint("task_id != depends_on_task_id", name="no_self_dependency"),
        sa.CheckConstraint("lag_days >= 0", name="non_negative_lag"),
    )

    task_id: uuid.UUID = Field(foreign_key="tasks.id", ondelete="CASCADE", nullable=False, index=True)
    depends_on_task_id: uuid.UUID = Field(
        foreign_key="tasks.id", ondelete="CASCADE", nullable=False, index=True
    )
    dependency_type: str = Field(nullable=False, default="finish_to_start")
    lag_days: int = Field(nullable=False, default=0)
    created_by: Optional[uuid.UUID] = None
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
