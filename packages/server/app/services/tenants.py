"""
Tenant service: business logic for tenant onboarding and settings.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import Conflict, NotFound, ValidationFailed
from app.models.tenant import Tenant
from sitework_shared.schemas.tenants import (
    TenantCreateRequest,
    TenantSettings,
    TenantUpdateRequest,
)

log = structlog.get_logger()


def _deep_merge(base: dict, patch: dict) -> dict:
    """JSON Merge Patch style deep merge. A ``None`` value removes the key."""
    result = base.copy()
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _validated_settings(raw: dict) -> dict:
    try:
        return TenantSettings.model_validate(raw).model_dump(mode="json")
    except ValidationError as exc:
        raise ValidationFailed(f"Invalid tenant settings: {exc.errors()[0]['msg']}") from exc


async def create_tenant(req: TenantCreateRequest, session: AsyncSession) -> Tenant:
    existing = await session.execute(select(Tenant).where(Tenant.slug == req.slug))
    if existing.scalar_one_or_none():
        raise Conflict("Tenant slug already taken")

    settings = _deep_merge(TenantSettings().model_dump(mode="json"), req.settings or {})
    tenant = Tenant(
        name=req.name,
        slug=req.slug,
        settings=_validated_settings(settings),
    )
    session.add(tenant)
    await session.flush()

    log.info("tenant.created", tenant_id=str(tenant.id), slug=req.slug)
    return tenant


async def list_tenants(session: AsyncSession) -> list[Tenant]:
    result = await session.execute(select(Tenant).order_by(Tenant.name))
    return list(result.scalars().all())


async def get_tenant(slug: str, session: AsyncSession) -> Tenant:
    result = await session.execute(select(Tenant).where(Tenant.slug == slug))
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise NotFound("Tenant not found")
    return tenant


async def update_tenant(
    tenant: Tenant,
    req: TenantUpdateRequest,
    session: AsyncSession,
) -> Tenant:
    """Update tenant name and/or settings (deep merge, then validate)."""
    if req.name is not None:
        tenant.name = req.name

    if req.settings is not None:
        tenant.settings = _validated_settings(_deep_merge(tenant.settings or {}, req.settings))

    tenant.updated_at = datetime.now(timezone.utc)
    session.add(tenant)
    await session.flush()

    log.info("tenant.updated", tenant_id=str(tenant.id), slug=tenant.slug)
    return tenant
