"""Pydantic schemas for audit log endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.models.audit_log import AuditType


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    organizer_id: int
    user_id: int | None
    type: AuditType
    at: datetime
    old_data: dict[str, Any] | None
    new_data: dict[str, Any] | None
