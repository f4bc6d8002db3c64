"""
Tenant API endpoints.

GET    /api/v1/tenants                 List tenants
POST   /api/v1/tenants                 Create a tenant
GET    /api/v1/tenants/{tenantSlug}    Get tenant details
PATCH  /api/v1/tenants/{tenantSlug}    Update tenant name/settings
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.services import tenants as tenant_service
from sitework_shared.schemas.tenants import (
    TenantCreateRequest,
    TenantRead,
    TenantUpdateRequest,
)

# ---------------------------------------------------------------------------
# Global routes (no tenantSlug in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("/tenants", response_model=List[TenantRead], tags=["Tenants"])
async def list_tenants(session: AsyncSession = Depends(get_session)):
    """List all tenants."""
    tenants = await tenant_service.list_tenants(session)
    return [TenantRead.model_validate(t) for t in tenants]


@router_global.post("/tenants", response_model=TenantRead, status_code=201, tags=["Tenants"])
async def create_tenant(
    body: TenantCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    """Create a tenant. Settings overrides are deep-merged onto the defaults."""
    tenant = await tenant_service.create_tenant(body, session)
    await session.commit()
    return TenantRead.model_validate(tenant)


# ---------------------------------------------------------------------------
# Tenant-scoped routes (tenantSlug in path)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=TenantRead, tags=["Tenants"])
async def get_tenant(tenantSlug: str, session: AsyncSession = Depends(get_session)):
    """Get tenant details including settings."""
    tenant = await tenant_service.get_tenant(tenantSlug, session)
    return TenantRead.model_validate(tenant)


@router_scoped.patch("", response_model=TenantRead, tags=["Tenants"])
async def update_tenant(
    tenantSlug: str,
    body: TenantUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    """Update tenant name or settings. Settings are deep-merged."""
    tenant = await tenant_service.get_tenant(tenantSlug, session)
    tenant = await tenant_service.update_tenant(tenant, body, session)
    await session.commit()
    return TenantRead.model_validate(tenant)
