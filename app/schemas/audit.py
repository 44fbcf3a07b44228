"""Audit log schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuditLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type: str
    severity: str
    event_data: dict[str, Any]
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime
