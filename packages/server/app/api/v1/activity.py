"""
Activity log endpoint (append-only, newest first).
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import Page, pagination
from app.core.tenancy import TenantScope, get_tenant_scope
from app.services import activity as activity_service
from sitework_shared.schemas.activity import ActivityEventRead

router = APIRouter()


@router.get("", response_model=List[ActivityEventRead])
async def list_activity_endpoint(
    type: Optional[str] = Query(None, description="Event type prefix, e.g. 'task.dependency'"),
    subject_id: Optional[str] = Query(None, description="Id appearing in the event payload"),
    page: Page = Depends(pagination),
    scope: TenantScope = Depends(get_tenant_scope),
):
    events = await activity_service.list_activity(
        scope,
        type_prefix=type,
        subject_id=subject_id,
        offset=page.offset,
        limit=page.per_page,
    )
    return [ActivityEventRead.model_validate(e) for e in events]
