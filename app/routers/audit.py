"""Audit log API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.dependencies import get_context, get_current_principal
from app.models.audit_log import AuditLogEntry
from app.schemas.audit import AuditLogResponse
from app.services.authorization import Principal, scope_organizer_filter

router = APIRouter(prefix="/api/v1/audit-logs", tags=["Audit"])


@router.get("", response_model=list[AuditLogResponse])
def list_audit_logs(
    event_id: int | None = None,
    organizer_id: int | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> list[AuditLogEntry]:
    """Audit entries, newest first. Organizers only see their own."""
    organizer_id = scope_organizer_filter(principal, organizer_id)
    return ctx.audit.list_entries(db, event_id=event_id, organizer_id=organizer_id, limit=limit, offset=offset)
