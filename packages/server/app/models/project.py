"""Project model."""

from datetime import date
from decimal import Decimal
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TenantMixin, TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, TenantMixin, SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = (sa.Index("ix_projects_tenant_status", "tenant_id", "status"),)

    name: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(default="new", nullable=False)  # see ProjectStatus
    budget: Optional[Decimal] = Field(default=None, sa_type=sa.Numeric(12, 2))
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_by: Optional[uuid.UUID] = None
