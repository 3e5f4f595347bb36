"""Account and organizer models."""

import enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text

from app.database import Base, utcnow


class AccountType(str, enum.Enum):
    """Role of an account. Organizer accounts own exactly one organizer."""

    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"


class Organizer(Base):
    """Student organization that publishes events."""

    __tablename__ = "organizers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False)
    description_de = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    website_url = Column(String(1024), nullable=True)
    instagram_url = Column(String(1024), nullable=True)
    location = Column(String(512), nullable=True)
    newsletter = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Account(Base):
    """Login identity for an admin or an organizer."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "(account_type = 'ORGANIZER' AND organizer_id IS NOT NULL) "
            "OR (account_type = 'ADMIN' AND organizer_id IS NULL)",
            name="ck_accounts_type_organizer",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_type = Column(Enum(AccountType, name="account_type"), nullable=False)
    organizer_id = Column(Integer, ForeignKey("organizers.id", ondelete="CASCADE"), nullable=True, unique=True)
    display_name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=True, unique=True, index=True)
    password_hash = Column(String(256), nullable=True)
    setup_token_hash = Column(String(64), nullable=True, index=True)  # sha256 hex of the raw token
    setup_token_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_initialized(self) -> bool:
        return self.password_hash is not None
