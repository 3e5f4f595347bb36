"""Organizer profile edits and removal."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.errors import NotFoundError, UnauthorizedError, ValidationError
from app.models.account import Organizer
from app.models.audit_log import AuditType
from app.models.event import Event
from app.models.password_reset import PasswordResetToken
from app.schemas.account import UpdateOrganizerRequest
from app.services.audit import AuditTrailRecorder, snapshot
from app.services.authorization import Principal, ensure_organizer_access
from app.services.credentials import CredentialStore
from app.services.sessions import SessionManager

logger = logging.getLogger("campus_events")

_REQUIRED_FIELDS = {"name", "newsletter"}


class OrganizerService:
    """Edits organizer profiles and removes organizers with everything they own."""

    def __init__(self, credentials: CredentialStore, sessions: SessionManager, audit: AuditTrailRecorder) -> None:
        self.credentials = credentials
        self.sessions = sessions
        self.audit = audit

    def get_organizer(self, db: Session, organizer_id: int) -> Organizer:
        organizer = db.get(Organizer, organizer_id)
        if organizer is None:
            raise NotFoundError("Organizer not found")
        return organizer

    def update_organizer(
        self, db: Session, principal: Principal, organizer_id: int, body: UpdateOrganizerRequest
    ) -> Organizer:
        ensure_organizer_access(principal, organizer_id)
        changes = body.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields supplied for update")
        nulled = sorted(field for field, value in changes.items() if value is None and field in _REQUIRED_FIELDS)
        if nulled:
            raise ValidationError(f"{', '.join(nulled)} cannot be null")
        if "newsletter" in changes and not principal.is_admin:
            raise UnauthorizedError("only admins can change newsletter access")

        organizer = self.get_organizer(db, organizer_id)
        try:
            for field, value in changes.items():
                setattr(organizer, field, value)
            if "name" in changes:
                account = self.credentials.get_by_organizer(db, organizer_id)
                if account is not None:
                    account.display_name = changes["name"]
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(organizer)
        logger.info("Organizer %d updated by account %d", organizer_id, principal.account_id)
        return organizer

    def delete_organizer(self, db: Session, principal: Principal, organizer_id: int) -> None:
        """Remove the organizer, its events and its account; the account's sessions end with it."""
        ensure_organizer_access(principal, organizer_id)
        organizer = self.get_organizer(db, organizer_id)
        account = self.credentials.get_by_organizer(db, organizer_id)

        try:
            events = db.execute(select(Event).where(Event.organizer_id == organizer_id)).scalars().all()
            for event in events:
                before = snapshot(event)
                db.delete(event)
                db.flush()
                self.audit.record(
                    db,
                    event_id=before["id"],
                    organizer_id=organizer_id,
                    user_id=principal.account_id,
                    audit_type=AuditType.DELETE,
                    old_snapshot=before,
                )
            revoked = 0
            if account is not None:
                revoked = self.sessions.revoke_all(db, account.id)
                db.execute(delete(PasswordResetToken).where(PasswordResetToken.account_id == account.id))
                db.delete(account)
                db.flush()
            db.delete(organizer)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Organizer %d deleted by account %d; %d event(s) removed, %d session(s) revoked",
            organizer_id,
            principal.account_id,
            len(events),
            revoked,
        )
