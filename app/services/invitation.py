"""Invitation lifecycle: setup tokens for new admin and organizer accounts.

An invited account starts pending (no password, a setup token with an expiry)
and becomes active exactly once, when the holder of the token chooses an
e-mail and password. Only the SHA-256 of a setup token is stored.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.account import Account, AccountType, Organizer
from app.services.credentials import CredentialStore
from app.services.notifications import Notifier, deliver
from app.services.password_policy import validate_password
from app.services.security import PasswordHashing, generate_token, hash_token
from app.services.sessions import SessionManager

logger = logging.getLogger("campus_events")

INVALID_SETUP_TOKEN = "invalid setup token"


@dataclass
class InvitationResult:
    account: Account
    setup_token: str


@dataclass
class PendingAccount:
    """What an unauthenticated token holder is allowed to learn."""

    account_id: int
    display_name: str
    account_type: AccountType
    organizer_id: int | None


def invite_status(account: Account | None) -> str:
    """Summarize an account's setup state for admin listings."""
    if account is None:
        return "missing"
    if account.password_hash is not None:
        return "active"
    if account.setup_token_expires_at is not None and account.setup_token_expires_at > utcnow():
        return "pending"
    return "expired"


class InvitationService:
    """Issues and consumes single-use setup tokens."""

    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionManager,
        hashing: PasswordHashing,
        notifier: Notifier,
        token_ttl: timedelta,
        min_password_length: int,
        min_entropy_bits: float,
    ) -> None:
        self.credentials = credentials
        self.sessions = sessions
        self.hashing = hashing
        self.notifier = notifier
        self.token_ttl = token_ttl
        self.min_password_length = min_password_length
        self.min_entropy_bits = min_entropy_bits

    def invite(
        self,
        db: Session,
        account_type: AccountType,
        display_name: str,
        email: str,
        organizer_name: str | None = None,
        newsletter: bool = False,
    ) -> InvitationResult:
        """Create a pending account (and its organizer, for organizers) and mail the setup link."""
        token = generate_token()
        try:
            organizer_id = None
            if account_type == AccountType.ORGANIZER:
                organizer = Organizer(name=(organizer_name or display_name).strip(), newsletter=newsletter)
                db.add(organizer)
                db.flush()
                organizer_id = organizer.id

            account = self.credentials.create_pending(
                db,
                account_type=account_type,
                display_name=display_name,
                email=email,
                token_hash=hash_token(token),
                expires_at=utcnow() + self.token_ttl,
                organizer_id=organizer_id,
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("e-mail address already in use") from None
        except Exception:
            db.rollback()
            raise

        db.refresh(account)
        logger.info("Invited %s account %d (%s)", account_type.value, account.id, account.display_name)
        deliver(
            "invitation e-mail",
            self.notifier.send_invitation,
            account.email,
            account.display_name,
            account_type,
            token,
        )
        return InvitationResult(account=account, setup_token=token)

    def lookup_pending(self, db: Session, token: str) -> PendingAccount:
        """Describe the account behind a usable setup token.

        Unknown, expired and already-used tokens produce the same error so the
        unauthenticated caller learns nothing about which case applied.
        """
        account = self._pending_account(db, token)
        return PendingAccount(
            account_id=account.id,
            display_name=account.display_name,
            account_type=account.account_type,
            organizer_id=account.organizer_id,
        )

    def complete(self, db: Session, token: str, email: str, password: str) -> tuple[Account, uuid.UUID]:
        """Initialize the account behind a setup token and open its first session."""
        account = self._pending_account(db, token)
        validate_password(password, self.min_password_length, self.min_entropy_bits)
        password_hash = self.hashing.hash(password)

        try:
            if not self.credentials.initialize(db, account.id, hash_token(token.strip()), email, password_hash):
                raise ValidationError("account already initialized")
            session_id = self.sessions.create(db, account.id)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("e-mail address already in use") from None
        except Exception:
            db.rollback()
            raise

        db.refresh(account)
        logger.info("Account %d initialized (%s)", account.id, account.display_name)
        deliver(
            "welcome e-mail",
            self.notifier.send_welcome,
            account.email,
            account.display_name,
            account.account_type,
        )
        return account, session_id

    def regenerate_setup_token(self, db: Session, organizer_id: int) -> str:
        """Replace the setup token of a pending organizer account."""
        account = self.credentials.get_by_organizer(db, organizer_id)
        if account is None:
            raise NotFoundError("organizer account not found")

        token = generate_token()
        try:
            if not self.credentials.replace_setup_token(db, account.id, hash_token(token), utcnow() + self.token_ttl):
                raise ValidationError("account already initialized")
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("New setup token issued for organizer %d", organizer_id)
        return token

    def bootstrap_admin(self, db: Session, email: str, display_name: str) -> InvitationResult | None:
        """Invite the first admin when none exists yet."""
        if not email or self.credentials.has_admin(db):
            return None
        logger.warning("No admin account found; inviting bootstrap admin <%s>", email)
        return self.invite(db, AccountType.ADMIN, display_name, email)

    def _pending_account(self, db: Session, token: str) -> Account:
        token = token.strip()
        if not token:
            raise ValidationError(INVALID_SETUP_TOKEN)
        account = self.credentials.get_by_setup_token(db, hash_token(token))
        if account is None or account.password_hash is not None:
            raise ValidationError(INVALID_SETUP_TOKEN)
        if account.setup_token_expires_at is None or account.setup_token_expires_at <= utcnow():
            raise ValidationError(INVALID_SETUP_TOKEN)
        return account
