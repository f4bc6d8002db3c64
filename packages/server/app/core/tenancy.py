"""
Tenant scoping for every business-table query.

A ``TenantScope`` is the only way services reach tenant-owned rows. It
prepends the ``tenant_id`` predicate to every select/update/delete and stamps
``tenant_id`` on every insert, so service code cannot express an unscoped
query against a tenant-owned table.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, Type, TypeVar

import structlog
from fastapi import Depends, Header
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import get_session
from app.core.errors import CrossTenantReference, NotFound
from app.models.base import TenantMixin
from app.models.tenant import Tenant
from sitework_shared.schemas.tenants import TenantSettings

log = structlog.get_logger()

M = TypeVar("M", bound=TenantMixin)

# Human-readable names for error messages
_LABELS = {
    "TaskDependency": "Dependency",
    "ActivityEvent": "Activity event",
}


def _label(model: type) -> str:
    return _LABELS.get(model.__name__, model.__name__)


def _require_scoped(model: type) -> None:
    if not (isinstance(model, type) and issubclass(model, TenantMixin)):
        raise TypeError(f"{getattr(model, '__name__', model)!r} is not a tenant-scoped table")


class TenantScope:
    """Session + tenant (+ acting user) bundle passed as the first argument to services."""

    def __init__(
        self,
        session: AsyncSession,
        tenant: Tenant,
        actor_id: Optional[uuid.UUID] = None,
    ):
        self.session = session
        self.tenant = tenant
        self.tenant_id = tenant.id
        self.actor_id = actor_id

    @property
    def settings(self) -> TenantSettings:
        return TenantSettings.model_validate(self.tenant.settings or {})

    # -- reads ---------------------------------------------------------------

    def select(self, model: Type[M], *columns: Any):
        """``select(model)`` (or of ``columns``) restricted to this tenant."""
        _require_scoped(model)
        stmt = select(*columns) if columns else select(model)
        return stmt.where(model.tenant_id == self.tenant_id)

    async def get(self, model: Type[M], obj_id: uuid.UUID) -> M:
        """Fetch a row by primary key; rows of other tenants are reported as missing."""
        _require_scoped(model)
        obj = await self.session.get(model, obj_id)
        if obj is None or obj.tenant_id != self.tenant_id:
            raise NotFound(f"{_label(model)} not found")
        return obj

    async def resolve(self, model: Type[M], obj_id: uuid.UUID) -> M:
        """Like ``get``, for ids supplied as references to other rows.

        Distinguishes an id owned by another tenant (CrossTenantReference)
        from one that does not exist at all (NotFound).
        """
        _require_scoped(model)
        obj = await self.session.get(model, obj_id)
        if obj is None:
            raise NotFound(f"{_label(model)} {obj_id} not found")
        if obj.tenant_id != self.tenant_id:
            log.warning(
                "tenancy.cross_tenant_reference",
                model=model.__name__,
                tenant_id=str(self.tenant_id),
            )
            raise CrossTenantReference(
                f"{_label(model)} {obj_id} does not belong to this tenant"
            )
        return obj

    # -- writes --------------------------------------------------------------

    def add(self, obj: M) -> M:
        _require_scoped(type(obj))
        obj.tenant_id = self.tenant_id
        self.session.add(obj)
        return obj

    async def delete(self, obj: M) -> None:
        _require_scoped(type(obj))
        if obj.tenant_id != self.tenant_id:
            raise NotFound(f"{_label(type(obj))} not found")
        await self.session.delete(obj)

    async def delete_where(self, model: Type[M], *clauses: Any) -> int:
        """Bulk delete restricted to this tenant. Returns the number of rows removed."""
        _require_scoped(model)
        result = await self.session.execute(
            delete(model).where(model.tenant_id == self.tenant_id, *clauses)
        )
        return result.rowcount or 0

    async def update_where(self, model: Type[M], values: dict, *clauses: Any) -> int:
        """Bulk update restricted to this tenant. Returns the number of rows changed."""
        _require_scoped(model)
        result = await self.session.execute(
            update(model)
            .where(model.tenant_id == self.tenant_id, *clauses)
            .values(**values)
        )
        return result.rowcount or 0


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


async def _resolve_tenant(tenant_slug: str, session: AsyncSession) -> Tenant:
    """Resolve a tenant by slug, raise NotFound if it does not exist."""
    result = await session.execute(select(Tenant).where(Tenant.slug == tenant_slug))
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise NotFound("Tenant not found")
    return tenant


async def get_tenant_scope(
    tenantSlug: str,
    actor_id: Optional[uuid.UUID] = Header(None, alias="X-Actor-Id"),
    session: AsyncSession = Depends(get_session),
) -> TenantScope:
    """Build the TenantScope for a ``/tenants/{tenantSlug}/...`` request."""
    tenant = await _resolve_tenant(tenantSlug, session)
    structlog.contextvars.bind_contextvars(tenant=tenant.slug)
    return TenantScope(session, tenant, actor_id=actor_id)
