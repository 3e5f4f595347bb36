"""Persistence for account credentials.

All reads and writes of password hashes and setup-token state go through
CredentialStore. State transitions that consume a token are single
conditional UPDATE statements whose row count decides the outcome, so two
concurrent submissions of the same token cannot both succeed.
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.account import Account, AccountType


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Repository for Account rows."""

    def get(self, db: Session, account_id: int) -> Account | None:
        return db.get(Account, account_id)

    def get_by_email(self, db: Session, email: str) -> Account | None:
        return db.execute(select(Account).where(Account.email == normalize_email(email))).scalar_one_or_none()

    def get_initialized_by_email(self, db: Session, email: str) -> Account | None:
        """Account with this e-mail that has finished setup, if any."""
        return db.execute(
            select(Account).where(
                Account.email == normalize_email(email),
                Account.password_hash.is_not(None),
            )
        ).scalar_one_or_none()

    def get_by_setup_token(self, db: Session, token_hash: str) -> Account | None:
        return db.execute(select(Account).where(Account.setup_token_hash == token_hash)).scalar_one_or_none()

    def get_by_organizer(self, db: Session, organizer_id: int) -> Account | None:
        return db.execute(
            select(Account).where(
                Account.organizer_id == organizer_id,
                Account.account_type == AccountType.ORGANIZER,
            )
        ).scalar_one_or_none()

    def list_by_type(self, db: Session, account_type: AccountType) -> list[Account]:
        return list(
            db.execute(select(Account).where(Account.account_type == account_type).order_by(Account.created_at.desc()))
            .scalars()
            .all()
        )

    def has_admin(self, db: Session) -> bool:
        count = db.execute(
            select(func.count(Account.id)).where(Account.account_type == AccountType.ADMIN)
        ).scalar_one()
        return count > 0

    def create_pending(
        self,
        db: Session,
        account_type: AccountType,
        display_name: str,
        email: str,
        token_hash: str,
        expires_at: datetime,
        organizer_id: int | None = None,
    ) -> Account:
        """Insert an account that still has to be initialized through its setup token."""
        account = Account(
            account_type=account_type,
            organizer_id=organizer_id,
            display_name=display_name.strip(),
            email=normalize_email(email),
            password_hash=None,
            setup_token_hash=token_hash,
            setup_token_expires_at=expires_at,
        )
        db.add(account)
        db.flush()
        return account

    def initialize(self, db: Session, account_id: int, token_hash: str, email: str, password_hash: str) -> bool:
        """Consume a setup token and set the credentials in one conditional write.

        Returns False when no row matched: the token was already consumed,
        replaced, or expired since it was looked up.
        """
        now = utcnow()
        result = db.execute(
            update(Account)
            .where(
                Account.id == account_id,
                Account.setup_token_hash == token_hash,
                Account.password_hash.is_(None),
                Account.setup_token_expires_at > now,
            )
            .values(
                email=normalize_email(email),
                password_hash=password_hash,
                setup_token_hash=None,
                setup_token_expires_at=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def replace_setup_token(self, db: Session, account_id: int, token_hash: str, expires_at: datetime) -> bool:
        """Issue a new setup token for an account that is still pending."""
        result = db.execute(
            update(Account)
            .where(Account.id == account_id, Account.password_hash.is_(None))
            .values(setup_token_hash=token_hash, setup_token_expires_at=expires_at, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def set_password_hash(self, db: Session, account_id: int, password_hash: str) -> bool:
        """Replace the hash of an initialized account."""
        result = db.execute(
            update(Account)
            .where(Account.id == account_id, Account.password_hash.is_not(None))
            .values(password_hash=password_hash, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
