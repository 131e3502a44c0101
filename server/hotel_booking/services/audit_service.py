"""Audit sink: append-only writes inside the caller's transaction, admin reads."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit import AuditEvent

DEFAULT_AUDIT_LIMIT = 50


class AuditService:
    """Service for writing and reading audit events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        *,
        actor_id: UUID,
        action: str,
        target_type: str,
        target_id: UUID | str,
        now: datetime,
        previous_value: Optional[dict[str, Any]] = None,
        new_value: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        """
        Stage an audit event on the session.

        Nothing is committed here; the event lands in the same commit as the
        mutation it describes, or is discarded with it.
        """
        event = AuditEvent(
            actor_id=actor_id,
            action=action,
            target_type=target_type,
            target_id=str(target_id),
            previous_value=to_jsonable_python(previous_value) if previous_value else None,
            new_value=to_jsonable_python(new_value) if new_value else None,
            event_metadata=to_jsonable_python(metadata) if metadata else None,
            timestamp=now,
        )
        self.db.add(event)
        return event

    async def get_by_target(
        self, target_type: str, target_id: str, limit: int = DEFAULT_AUDIT_LIMIT
    ) -> list[AuditEvent]:
        """Events for one target, newest first."""
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.target_type == target_type, AuditEvent.target_id == target_id)
            .order_by(AuditEvent.timestamp.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_recent(self, limit: int = DEFAULT_AUDIT_LIMIT) -> list[AuditEvent]:
        stmt = select(AuditEvent).order_by(AuditEvent.timestamp.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars())
