"""
Tenant activity log.

``record_event`` is the single entry point for writing to the activity log.
Services call it next to the mutation it describes; the row is added to the
same session, so it commits or rolls back with that mutation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

import structlog

from app.models.activity import ActivityEvent

if TYPE_CHECKING:
    from app.core.tenancy import TenantScope

log = structlog.get_logger()


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def record_event(
    scope: "TenantScope",
    event_type: str,
    payload: dict[str, Any],
    actor_id: Optional[uuid.UUID] = None,
) -> ActivityEvent:
    """Append an activity event for the scope's tenant (flushed with the caller's work)."""
    event = ActivityEvent(
        type=event_type,
        actor_id=actor_id or scope.actor_id,
        payload=_jsonable(payload),
    )
    scope.add(event)
    log.info(event_type, tenant_id=str(scope.tenant_id), payload=event.payload)
    return event


def matches_subject(payload: dict, subject_id: str) -> bool:
    """True if any ``*_id`` value in the payload equals ``subject_id``."""
    return any(
        key.endswith("_id") and str(value) == subject_id
        for key, value in payload.items()
    )
