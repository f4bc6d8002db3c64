"""
Contact directory endpoints. Deleting a contact unassigns it from its tasks.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api.deps import Page, pagination
from app.core.tenancy import TenantScope, get_tenant_scope
from app.services import contacts as contact_service
from sitework_shared.schemas.common import ContactType
from sitework_shared.schemas.contacts import ContactCreate, ContactRead, ContactUpdate

router = APIRouter()


@router.get("", response_model=List[ContactRead])
async def list_contacts_endpoint(
    contact_type: Optional[ContactType] = None,
    is_active: Optional[bool] = None,
    page: Page = Depends(pagination),
    scope: TenantScope = Depends(get_tenant_scope),
):
    contacts = await contact_service.list_contacts(
        scope,
        contact_type=contact_type,
        is_active=is_active,
        offset=page.offset,
        limit=page.per_page,
    )
    return [ContactRead.model_validate(c) for c in contacts]


@router.post("", response_model=ContactRead, status_code=201)
async def create_contact_endpoint(
    contact_in: ContactCreate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    contact = await contact_service.create_contact(scope, contact_in)
    await scope.session.commit()
    return ContactRead.model_validate(contact)


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact_endpoint(
    contact_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    contact = await contact_service.get_contact(scope, contact_id)
    return ContactRead.model_validate(contact)


@router.patch("/{contact_id}", response_model=ContactRead)
async def update_contact_endpoint(
    contact_id: uuid.UUID,
    contact_in: ContactUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    contact = await contact_service.get_contact(scope, contact_id)
    contact = await contact_service.update_contact(scope, contact, contact_in)
    await scope.session.commit()
    return ContactRead.model_validate(contact)


@router.delete("/{contact_id}", status_code=204)
async def delete_contact_endpoint(
    contact_id: uuid.UUID,
    scope: TenantScope = Depends(get_tenant_scope),
):
    """Delete a contact and clear it as assignee on every task."""
    contact = await contact_service.get_contact(scope, contact_id)
    await contact_service.delete_contact(scope, contact)
    await scope.session.commit()
