"""Audit log model."""

import enum

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Integer

from app.database import Base, utcnow


class AuditType(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLogEntry(Base):
    """Append-only before/after record of an event mutation.

    event_id and organizer_id are plain columns so entries survive deletion
    of the event they describe.
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, nullable=False, index=True)
    organizer_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(Enum(AuditType, name="audit_type"), nullable=False)
    at = Column(DateTime, nullable=False, default=utcnow)
    old_data = Column(JSON(none_as_null=True), nullable=True)
    new_data = Column(JSON(none_as_null=True), nullable=True)
