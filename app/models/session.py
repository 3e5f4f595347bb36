"""Login session model."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Uuid

from app.database import Base, utcnow


class AuthSession(Base):
    """Server-side session; the id is the value of the session cookie."""

    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
