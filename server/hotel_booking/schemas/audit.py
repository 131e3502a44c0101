"""Audit-related Pydantic schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_AUDIT_LIMIT = 50


class AuditByTargetRequest(BaseModel):
    target_type: str = Field(..., max_length=32, description="e.g. booking, room")
    target_id: str = Field(..., max_length=64)
    limit: int = Field(DEFAULT_AUDIT_LIMIT, ge=1, le=500)


class RecentAuditRequest(BaseModel):
    limit: int = Field(DEFAULT_AUDIT_LIMIT, ge=1, le=500)


class AuditEventResponse(BaseModel):
    """Audit event response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: UUID
    action: str
    target_type: str
    target_id: str
    previous_value: Optional[dict[str, Any]] = None
    new_value: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="event_metadata")
    timestamp: datetime


class AuditEventListResponse(BaseModel):
    items: list[AuditEventResponse]
