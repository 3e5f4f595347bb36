"""Self-service password reset with single-use, short-lived tokens."""

import logging
from datetime import timedelta

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import ValidationError
from app.models.account import Account
from app.models.password_reset import PasswordResetToken
from app.services.credentials import CredentialStore
from app.services.notifications import Notifier, deliver
from app.services.password_policy import validate_password
from app.services.security import PasswordHashing, generate_token, hash_token
from app.services.sessions import SessionManager

logger = logging.getLogger("campus_events")

INVALID_RESET_TOKEN = "invalid or expired reset token"


class PasswordResetService:
    """Issues reset tokens and applies new passwords."""

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

    def request(self, db: Session, email: str) -> None:
        """Issue a reset token for an initialized account with this e-mail.

        Returns nothing either way, and storage failures are logged rather
        than raised; callers must not reveal whether an account was found.
        """
        account = self.credentials.get_initialized_by_email(db, email)
        if account is None:
            logger.info("Password reset requested for unknown or uninitialized e-mail")
            return

        account_id = account.id
        token = generate_token()
        try:
            # Serialises concurrent requests for the same account
            db.execute(select(Account.id).where(Account.id == account_id).with_for_update())
            db.execute(
                delete(PasswordResetToken).where(
                    PasswordResetToken.account_id == account_id,
                    PasswordResetToken.used_at.is_(None),
                )
            )
            db.add(
                PasswordResetToken(
                    account_id=account_id,
                    token_hash=hash_token(token),
                    expires_at=utcnow() + self.token_ttl,
                )
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Concurrent password reset request for account %d already issued a token", account_id)
            return
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Could not store password reset token for account %d", account_id)
            return

        logger.info("Password reset token issued for account %d", account.id)
        deliver(
            "password reset e-mail",
            self.notifier.send_password_reset,
            account.email,
            account.display_name,
            token,
        )

    def confirm(self, db: Session, token: str, new_password: str) -> int:
        """Set a new password with a reset token and sign the account out everywhere.

        Marking the token used, replacing the hash and revoking sessions
        commit together. Returns the account id.
        """
        token_hash = hash_token(token.strip())
        row = db.execute(
            select(PasswordResetToken).where(
                PasswordResetToken.token_hash == token_hash,
                PasswordResetToken.used_at.is_(None),
                PasswordResetToken.expires_at > utcnow(),
            )
        ).scalar_one_or_none()
        if row is None:
            raise ValidationError(INVALID_RESET_TOKEN)

        token_id, account_id = row.id, row.account_id
        validate_password(new_password, self.min_password_length, self.min_entropy_bits)
        password_hash = self.hashing.hash(new_password)

        try:
            now = utcnow()
            consumed = db.execute(
                update(PasswordResetToken)
                .where(
                    and_(
                        PasswordResetToken.id == token_id,
                        PasswordResetToken.used_at.is_(None),
                        PasswordResetToken.expires_at > now,
                    )
                )
                .values(used_at=now)
                .execution_options(synchronize_session=False)
            )
            if consumed.rowcount != 1:
                raise ValidationError(INVALID_RESET_TOKEN)
            if not self.credentials.set_password_hash(db, account_id, password_hash):
                raise ValidationError(INVALID_RESET_TOKEN)
            revoked = self.sessions.revoke_all(db, account_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Password reset for account %d; %d session(s) revoked", account_id, revoked)
        return account_id

    def purge_expired(self, db: Session) -> int:
        """Drop unused tokens that can no longer be redeemed."""
        result = db.execute(
            delete(PasswordResetToken).where(
                PasswordResetToken.used_at.is_(None),
                PasswordResetToken.expires_at <= utcnow(),
            )
        )
        return result.rowcount or 0
