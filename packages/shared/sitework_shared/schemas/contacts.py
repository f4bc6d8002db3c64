"""Contact directory schemas (contractors, vendors, customers, design professionals)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, UUID4

from .common import ContactType


class ContactCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    contact_type: ContactType
    company: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None
    is_active: bool = True


class ContactUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contact_type: Optional[ContactType] = None
    company: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ContactRead(BaseModel):
    id: UUID4
    tenant_id: UUID4
    name: str
    contact_type: ContactType
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
