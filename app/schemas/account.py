"""Pydantic schemas for admin and organizer management endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class InviteAdminRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=256)
    email: EmailStr


class CreateOrganizerRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    newsletter: bool = False


class UpdateOrganizerRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=256)
    description_de: str | None = None
    description_en: str | None = None
    website_url: str | None = Field(default=None, max_length=1024)
    instagram_url: str | None = Field(default=None, max_length=1024)
    location: str | None = Field(default=None, max_length=512)
    newsletter: bool | None = None


class OrganizerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description_de: str | None = None
    description_en: str | None = None
    website_url: str | None = None
    instagram_url: str | None = None
    location: str | None = None
    newsletter: bool


class AdminListItem(BaseModel):
    account_id: int
    display_name: str
    email: str | None
    invite_status: str
    created_at: datetime


class OrganizerAdminItem(BaseModel):
    id: int
    name: str
    newsletter: bool
    account_id: int | None
    email: str | None
    invite_status: str
    created_at: datetime
