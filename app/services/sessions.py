"""Session issuing, resolution and revocation.

Sessions are rows in the ``sessions`` table with a fixed lifetime; the UUID
primary key is the cookie value. Methods add to the caller's transaction and
never commit, so a session can be created in the same commit as the write that
justified it.
"""

import uuid
from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import UnauthorizedError
from app.models.account import Account
from app.models.session import AuthSession
from app.services.authorization import Principal


class SessionManager:
    """Handles session lifecycle against the session table."""

    def __init__(self, ttl: timedelta) -> None:
        self.ttl = ttl

    @property
    def max_age_seconds(self) -> int:
        return int(self.ttl.total_seconds())

    def create(self, db: Session, account_id: int) -> uuid.UUID:
        """Insert a new session for the account and return its id."""
        record = AuthSession(id=uuid.uuid4(), account_id=account_id, expires_at=utcnow() + self.ttl)
        db.add(record)
        db.flush()
        return record.id

    def resolve(self, db: Session, raw_session_id: str | None) -> Principal:
        """Turn a cookie value into the authenticated principal, or raise UnauthorizedError."""
        if not raw_session_id:
            raise UnauthorizedError("missing session")

        session_id = self.parse(raw_session_id)
        if session_id is None:
            raise UnauthorizedError("invalid session format")

        row = db.execute(
            select(Account.id, Account.account_type, Account.display_name, Account.organizer_id)
            .join(AuthSession, AuthSession.account_id == Account.id)
            .where(AuthSession.id == session_id, AuthSession.expires_at > utcnow())
        ).first()
        if row is None:
            raise UnauthorizedError("invalid or expired session")

        return Principal(
            account_id=row.id,
            account_type=row.account_type,
            display_name=row.display_name,
            organizer_id=row.organizer_id,
        )

    def revoke(self, db: Session, session_id: uuid.UUID) -> None:
        """Delete one session. Revoking an absent session is not an error."""
        db.execute(delete(AuthSession).where(AuthSession.id == session_id))

    def revoke_all(self, db: Session, account_id: int) -> int:
        """Delete every session of the account; returns how many were removed."""
        result = db.execute(delete(AuthSession).where(AuthSession.account_id == account_id))
        return result.rowcount or 0

    def purge_expired(self, db: Session) -> int:
        result = db.execute(delete(AuthSession).where(AuthSession.expires_at <= utcnow()))
        return result.rowcount or 0

    @staticmethod
    def parse(raw_session_id: str) -> uuid.UUID | None:
        try:
            return uuid.UUID(raw_session_id.strip())
        except ValueError:
            return None
