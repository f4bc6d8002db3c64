"""Contact directory model (task assignees)."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TenantMixin, TimestampMixin, UUIDMixin


class Contact(UUIDMixin, TimestampMixin, TenantMixin, SQLModel, table=True):
    __tablename__ = "contacts"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "email", name="uq_contact_email_per_tenant"),
    )

    name: str = Field(nullable=False, index=True)
    contact_type: str = Field(nullable=False)  # contractor | vendor | customer | design_professional
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = Field(default=True, nullable=False)
    created_by: Optional[uuid.UUID] = None
