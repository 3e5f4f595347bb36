"""Pydantic schemas for event endpoints."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_naive_utc(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class EventCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    organizer_id: int | None = None  # required for admins; organizers default to their own
    title_de: str = Field(min_length=1, max_length=512)
    title_en: str = Field(min_length=1, max_length=512)
    description_de: str | None = None
    description_en: str | None = None
    start_date_time: datetime
    end_date_time: datetime | None = None
    event_url: str | None = None
    location: str | None = None
    publish_app: bool = True
    publish_newsletter: bool = True
    publish_in_ical: bool = True

    normalize_dates = field_validator("start_date_time", "end_date_time")(_as_naive_utc)


class EventUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title_de: str | None = Field(default=None, min_length=1, max_length=512)
    title_en: str | None = Field(default=None, min_length=1, max_length=512)
    description_de: str | None = None
    description_en: str | None = None
    start_date_time: datetime | None = None
    end_date_time: datetime | None = None
    event_url: str | None = None
    location: str | None = None
    publish_app: bool | None = None
    publish_newsletter: bool | None = None
    publish_in_ical: bool | None = None

    normalize_dates = field_validator("start_date_time", "end_date_time")(_as_naive_utc)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organizer_id: int
    title_de: str
    title_en: str
    description_de: str | None
    description_en: str | None
    start_date_time: datetime
    end_date_time: datetime | None
    event_url: str | None
    location: str | None
    publish_app: bool
    publish_newsletter: bool
    publish_in_ical: bool
    created_at: datetime
    updated_at: datetime
