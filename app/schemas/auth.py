"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.account import AccountType


class LoginRequest(BaseModel):
    email: str
    password: str


class SetupTokenLookupRequest(BaseModel):
    token: str = Field(min_length=1)


class InitAccountRequest(BaseModel):
    token: str = Field(min_length=1)
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class RequestPasswordResetRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str


class AuthUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account_id: int
    display_name: str
    account_type: AccountType
    organizer_id: int | None
    can_access_newsletter: bool


class SetupTokenInfoResponse(BaseModel):
    account_name: str
    account_type: AccountType


class SetupTokenResponse(BaseModel):
    setup_token: str
