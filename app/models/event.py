"""Event model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.database import Base, utcnow


class Event(Base):
    """Event published by an organizer."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organizer_id = Column(Integer, ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True)
    title_de = Column(String(512), nullable=False)
    title_en = Column(String(512), nullable=False)
    description_de = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    start_date_time = Column(DateTime, nullable=False)
    end_date_time = Column(DateTime, nullable=True)
    event_url = Column(String(1024), nullable=True)
    location = Column(String(512), nullable=True)
    publish_app = Column(Boolean, nullable=False, default=True)
    publish_newsletter = Column(Boolean, nullable=False, default=True)
    publish_in_ical = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
