"""
Tenant-related Pydantic schemas shared between server and clients.

Covers: tenant create/update requests, TenantSettings and its sub-models,
tenant responses.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import TaskPriority


# ---------------------------------------------------------------------------
# Tenant settings sub-models
# ---------------------------------------------------------------------------

class TaskDefaultsSettings(BaseModel):
    default_priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        description="Priority applied to new tasks that do not specify one",
    )
    default_lag_days: int = Field(
        default=0,
        ge=0,
        le=365,
        description="Lag applied to new dependencies that do not specify one",
    )
    block_on_unfinished_prerequisites: bool = Field(
        default=True,
        description="Refuse to start or complete a task while a finish-to-start "
        "prerequisite is still open",
    )


class TenantSettings(BaseModel):
    """Complete tenant-level settings schema. All fields optional with defaults."""

    task_defaults: TaskDefaultsSettings = Field(default_factory=TaskDefaultsSettings)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class TenantCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Tenant display name")
    slug: str = Field(
        ...,
        min_length=2,
        max_length=50,
        pattern=r"^[a-z0-9][a-z0-9-]*[a-z0-9]$",
        description="URL-safe tenant identifier",
    )
    settings: Optional[dict] = Field(None, description="Initial settings overrides")


class TenantUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    settings: Optional[dict] = Field(
        None,
        description="Partial settings update (deep-merged via JSON Merge Patch)",
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TenantRead(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    settings: TenantSettings
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
