"""
Activity log queries.
"""

from __future__ import annotations

from typing import Optional

from app.core.events import matches_subject
from app.core.tenancy import TenantScope
from app.models.activity import ActivityEvent


async def list_activity(
    scope: TenantScope,
    type_prefix: Optional[str] = None,
    subject_id: Optional[str] = None,
    offset: int = 0,
    limit: int = 25,
) -> list[ActivityEvent]:
    """Newest first. ``subject_id`` matches any ``*_id`` value in the payload."""
    stmt = scope.select(ActivityEvent)
    if type_prefix:
        stmt = stmt.where(ActivityEvent.type.startswith(type_prefix, autoescape=True))
    stmt = stmt.order_by(ActivityEvent.timestamp.desc(), ActivityEvent.id)

    if not subject_id:
        result = await scope.session.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all())

    # Payload is JSON; match in Python so SQLite and PostgreSQL agree.
    result = await scope.session.execute(stmt)
    events = [e for e in result.scalars().all() if matches_subject(e.payload or {}, subject_id)]
    return events[offset : offset + limit]
