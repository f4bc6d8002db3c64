from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ActivityEventRead(BaseModel):
    id: UUID
    tenant_id: UUID
    type: str
    actor_id: Optional[UUID] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime

    model_config = {"from_attributes": True}
