"""
Contact directory service. Contacts are the people and firms tasks get
assigned to.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from app.core.errors import Conflict, ValidationFailed
from app.core.events import record_event
from app.core.tenancy import TenantScope
from app.models.contact import Contact
from app.models.task import Task
from sitework_shared.schemas.common import ContactType
from sitework_shared.schemas.contacts import ContactCreate, ContactUpdate

log = structlog.get_logger()


async def _ensure_email_free(
    scope: TenantScope, email: Optional[str], exclude_id: Optional[uuid.UUID] = None
) -> None:
    if not email:
        return
    stmt = scope.select(Contact).where(Contact.email == email)
    if exclude_id:
        stmt = stmt.where(Contact.id != exclude_id)
    result = await scope.session.execute(stmt)
    if result.scalars().first():
        raise Conflict(f"A contact with email {email} already exists")


async def get_contact(scope: TenantScope, contact_id: uuid.UUID) -> Contact:
    return await scope.get(Contact, contact_id)


async def list_contacts(
    scope: TenantScope,
    contact_type: Optional[ContactType] = None,
    is_active: Optional[bool] = None,
    offset: int = 0,
    limit: int = 25,
) -> list[Contact]:
    stmt = scope.select(Contact)
    if contact_type:
        stmt = stmt.where(Contact.contact_type == contact_type.value)
    if is_active is not None:
        stmt = stmt.where(Contact.is_active == is_active)
    stmt = stmt.order_by(Contact.name, Contact.id).offset(offset).limit(limit)
    result = await scope.session.execute(stmt)
    return list(result.scalars().all())


async def create_contact(scope: TenantScope, contact_in: ContactCreate) -> Contact:
    email = str(contact_in.email) if contact_in.email else None
    await _ensure_email_free(scope, email)

    contact = Contact(
        name=contact_in.name,
        contact_type=contact_in.contact_type.value,
        company=contact_in.company,
        email=email,
        phone=contact_in.phone,
        notes=contact_in.notes,
        is_active=contact_in.is_active,
        created_by=scope.actor_id,
    )
    scope.add(contact)
    await scope.session.flush()

    record_event(
        scope,
        "contact.created",
        {"contact_id": contact.id, "name": contact.name, "contact_type": contact.contact_type},
    )
    return contact


async def update_contact(
    scope: TenantScope, contact: Contact, contact_in: ContactUpdate
) -> Contact:
    data = contact_in.model_dump(exclude_unset=True)
    for key in ("name", "contact_type", "is_active"):
        if key in data and data[key] is None:
            raise ValidationFailed(f"{key} cannot be null")
    if data.get("contact_type") is not None:
        data["contact_type"] = ContactType(data["contact_type"]).value
    if data.get("email"):
        data["email"] = str(data["email"])
        await _ensure_email_free(scope, data["email"], exclude_id=contact.id)

    for key, value in data.items():
        setattr(contact, key, value)

    scope.session.add(contact)
    await scope.session.flush()

    record_event(scope, "contact.updated", {"contact_id": contact.id, **data})
    return contact


async def delete_contact(scope: TenantScope, contact: Contact) -> int:
    """Delete the contact and unassign it from every task. Returns tasks unassigned."""
    payload = {"contact_id": contact.id, "name": contact.name}
    unassigned = await scope.update_where(
        Task, {"assignee_id": None}, Task.assignee_id == contact.id
    )
    await scope.delete(contact)
    await scope.session.flush()

    record_event(scope, "contact.deleted", {**payload, "unassigned_tasks": unassigned})
    return unassigned
