"""Password reset token model."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text

from app.database import Base, utcnow


class PasswordResetToken(Base):
    """Single-use, short-lived grant to set a new password."""

    __tablename__ = "password_reset_tokens"
    __table_args__ = (
        # At most one unused token per account
        Index(
            "uq_password_reset_tokens_unused_account",
            "account_id",
            unique=True,
            sqlite_where=text("used_at IS NULL"),
            postgresql_where=text("used_at IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
