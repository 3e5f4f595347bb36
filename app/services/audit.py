"""Audit trail for event mutations.

The recorder writes into the caller's transaction and never commits: an audit
row exists exactly when the mutation it describes was committed. Snapshots are
schemaless JSON mirroring the event's current response shape; they are meant
for human inspection only.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import InternalError
from app.models.audit_log import AuditLogEntry, AuditType
from app.models.event import Event
from app.schemas.event import EventResponse

# (old snapshot present, new snapshot present) required for each type
_SNAPSHOT_SHAPE = {
    AuditType.CREATE: (False, True),
    AuditType.UPDATE: (True, True),
    AuditType.DELETE: (True, False),
}


def snapshot(event: Event) -> dict[str, Any]:
    """JSON-ready representation of an event as stored right now."""
    return EventResponse.model_validate(event).model_dump(mode="json")


class AuditTrailRecorder:
    """Appends audit entries alongside event mutations."""

    def record(
        self,
        db: Session,
        event_id: int,
        organizer_id: int,
        user_id: int | None,
        audit_type: AuditType,
        old_snapshot: dict[str, Any] | None = None,
        new_snapshot: dict[str, Any] | None = None,
    ) -> AuditLogEntry:
        expected = _SNAPSHOT_SHAPE[audit_type]
        if (old_snapshot is not None, new_snapshot is not None) != expected:
            raise InternalError(f"audit snapshots do not match a {audit_type.value} entry")

        entry = AuditLogEntry(
            event_id=event_id,
            organizer_id=organizer_id,
            user_id=user_id,
            type=audit_type,
            old_data=old_snapshot,
            new_data=new_snapshot,
        )
        db.add(entry)
        db.flush()
        return entry

    def list_entries(
        self,
        db: Session,
        event_id: int | None = None,
        organizer_id: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[AuditLogEntry]:
        """Entries newest first, optionally filtered."""
        query = select(AuditLogEntry)
        if event_id is not None:
            query = query.where(AuditLogEntry.event_id == event_id)
        if organizer_id is not None:
            query = query.where(AuditLogEntry.organizer_id == organizer_id)
        query = query.order_by(AuditLogEntry.at.desc(), AuditLogEntry.id.desc())
        if limit is not None:
            query = query.limit(max(limit, 1))
        if offset is not None:
            query = query.offset(max(offset, 0))
        return list(db.execute(query).scalars().all())
