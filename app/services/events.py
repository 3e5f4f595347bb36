"""Event mutations, each committed together with its audit entry."""

import logging

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.account import Organizer
from app.models.audit_log import AuditType
from app.models.event import Event
from app.schemas.event import EventCreateRequest, EventUpdateRequest
from app.services.audit import AuditTrailRecorder, snapshot
from app.services.authorization import Principal, ensure_event_access, ensure_organizer_access

logger = logging.getLogger("campus_events")

_REQUIRED_FIELDS = {"title_de", "title_en", "start_date_time", "publish_app", "publish_newsletter", "publish_in_ical"}


class EventService:
    """Create, update and delete events on behalf of a principal."""

    def __init__(self, audit: AuditTrailRecorder) -> None:
        self.audit = audit

    def get_event(self, db: Session, event_id: int) -> Event:
        event = db.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def create_event(self, db: Session, principal: Principal, body: EventCreateRequest) -> Event:
        if principal.is_admin:
            if body.organizer_id is None:
                raise ValidationError("organizer_id is required")
            organizer_id = body.organizer_id
        else:
            organizer_id = body.organizer_id if body.organizer_id is not None else principal.organizer_id
        ensure_organizer_access(principal, organizer_id)
        if db.get(Organizer, organizer_id) is None:
            raise NotFoundError("Organizer not found")
        _check_dates(body.start_date_time, body.end_date_time)

        values = body.model_dump(exclude={"organizer_id"})
        try:
            event = Event(organizer_id=organizer_id, **values)
            db.add(event)
            db.flush()
            db.refresh(event)
            self.audit.record(
                db,
                event_id=event.id,
                organizer_id=event.organizer_id,
                user_id=principal.account_id,
                audit_type=AuditType.CREATE,
                new_snapshot=snapshot(event),
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(event)
        logger.info("Event %d created by account %d", event.id, principal.account_id)
        return event

    def update_event(self, db: Session, principal: Principal, event_id: int, body: EventUpdateRequest) -> Event:
        changes = body.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields supplied for update")
        nulled = sorted(field for field, value in changes.items() if value is None and field in _REQUIRED_FIELDS)
        if nulled:
            raise ValidationError(f"{', '.join(nulled)} cannot be null")

        event = self.get_event(db, event_id)
        ensure_event_access(principal, event)
        _check_dates(changes.get("start_date_time", event.start_date_time), changes.get("end_date_time", event.end_date_time))

        try:
            before = snapshot(event)
            for field, value in changes.items():
                setattr(event, field, value)
            db.flush()
            db.refresh(event)
            self.audit.record(
                db,
                event_id=event.id,
                organizer_id=event.organizer_id,
                user_id=principal.account_id,
                audit_type=AuditType.UPDATE,
                old_snapshot=before,
                new_snapshot=snapshot(event),
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(event)
        logger.info("Event %d updated by account %d", event.id, principal.account_id)
        return event

    def delete_event(self, db: Session, principal: Principal, event_id: int) -> None:
        event = self.get_event(db, event_id)
        ensure_event_access(principal, event)

        try:
            before = snapshot(event)
            db.delete(event)
            db.flush()
            self.audit.record(
                db,
                event_id=before["id"],
                organizer_id=before["organizer_id"],
                user_id=principal.account_id,
                audit_type=AuditType.DELETE,
                old_snapshot=before,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Event %d deleted by account %d", event_id, principal.account_id)


def _check_dates(start, end) -> None:
    if end is not None and start is not None and end < start:
        raise ValidationError("end_date_time must not be before start_date_time")
