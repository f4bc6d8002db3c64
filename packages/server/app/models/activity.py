"""Activity event model (append-only, tenant-scoped update log)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import JSONType, TenantMixin, UUIDMixin, _utcnow


class ActivityEvent(UUIDMixin, TenantMixin, SQLModel, table=True):
    __tablename__ = "activity_events"

    type: str = Field(nullable=False, index=True)  # e.g. task.created, task.dependency.added
    actor_id: Optional[uuid.UUID] = None
    payload: dict = Field(default_factory=dict, sa_type=JSONType, nullable=False)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        index=True,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
