"""Authentication service."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.errors import UnauthorizedError, ValidationError
from app.models.account import Account
from app.services.authorization import Principal, can_access_newsletter
from app.services.credentials import CredentialStore
from app.services.password_policy import validate_password
from app.services.security import PasswordHashing
from app.services.sessions import SessionManager

logger = logging.getLogger("campus_events")

INVALID_CREDENTIALS = "invalid e-mail or password"


@dataclass
class AuthResult:
    """Outcome of a successful login."""

    principal: Principal
    session_id: uuid.UUID


@dataclass
class AuthUser:
    """Public description of the signed-in account."""

    account_id: int
    display_name: str
    account_type: str
    organizer_id: int | None
    can_access_newsletter: bool


def principal_for(account: Account) -> Principal:
    return Principal(
        account_id=account.id,
        account_type=account.account_type,
        display_name=account.display_name,
        organizer_id=account.organizer_id,
    )


class AuthService:
    """Handles login, logout and password changes."""

    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionManager,
        hashing: PasswordHashing,
        min_password_length: int,
        min_entropy_bits: float,
    ) -> None:
        self.credentials = credentials
        self.sessions = sessions
        self.hashing = hashing
        self.min_password_length = min_password_length
        self.min_entropy_bits = min_entropy_bits

    def authenticate(self, db: Session, email: str, password: str) -> Account:
        """Return the account for valid credentials, raise UnauthorizedError otherwise."""
        account = self.credentials.get_by_email(db, email)
        stored_hash = account.password_hash if account is not None else None
        if not self.hashing.verify(stored_hash, password):
            logger.warning("Failed login attempt for email: %s", email)
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return account

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        account = self.authenticate(db, email, password)
        try:
            session_id = self.sessions.create(db, account.id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Successful login for account: %s (id: %d)", account.display_name, account.id)
        return AuthResult(principal=principal_for(account), session_id=session_id)

    def logout(self, db: Session, raw_session_id: str | None) -> None:
        """Revoke the session named by the cookie, if it parses."""
        if not raw_session_id:
            return
        session_id = self.sessions.parse(raw_session_id)
        if session_id is None:
            return
        try:
            self.sessions.revoke(db, session_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("User logout for session: %s", session_id)

    def change_password(self, db: Session, principal: Principal, current_password: str, new_password: str) -> int:
        """Replace the password after checking the current one; revokes every session of the account."""
        account = self.credentials.get(db, principal.account_id)
        if account is None or account.password_hash is None:
            raise ValidationError("account not initialized")

        if not self.hashing.verify(account.password_hash, current_password):
            raise UnauthorizedError("invalid current password")

        validate_password(new_password, self.min_password_length, self.min_entropy_bits)
        new_hash = self.hashing.hash(new_password)

        try:
            if not self.credentials.set_password_hash(db, account.id, new_hash):
                raise ValidationError("account not initialized")
            revoked = self.sessions.revoke_all(db, account.id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Password changed for account %d; %d session(s) revoked", account.id, revoked)
        return revoked

    def describe(self, db: Session, principal: Principal) -> AuthUser:
        return AuthUser(
            account_id=principal.account_id,
            display_name=principal.display_name,
            account_type=principal.account_type.value,
            organizer_id=principal.organizer_id,
            can_access_newsletter=can_access_newsletter(db, principal),
        )
