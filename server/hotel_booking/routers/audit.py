"""Audit router for admin reads of the audit trail."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user
from ..models.user import User
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.audit import (
    AuditByTargetRequest,
    AuditEventListResponse,
    AuditEventResponse,
    RecentAuditRequest,
)
from ..services.access_service import require_admin
from ..services.audit_service import AuditService

router = APIRouter(prefix="/v1/audit", tags=["audit"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)
USER_DEPENDENCY = Depends(get_current_user)


@router.post("/by-target", response_model=AuditEventListResponse)
async def audit_by_target(
    request: AuditByTargetRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> AuditEventListResponse:
    """Audit events for one booking or room, newest first."""
    require_admin(user)
    events = await AuditService(db).get_by_target(request.target_type, request.target_id, limit=request.limit)
    return AuditEventListResponse(items=[AuditEventResponse.model_validate(e) for e in events])


@router.post("/recent", response_model=AuditEventListResponse)
async def recent_audit_events(
    request: RecentAuditRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> AuditEventListResponse:
    require_admin(user)
    events = await AuditService(db).get_recent(limit=request.limit)
    return AuditEventListResponse(items=[AuditEventResponse.model_validate(e) for e in events])
