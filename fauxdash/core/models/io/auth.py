"""
Authentication and user account I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from fauxdash.server.core import constant


class SetupStatus(BaseModel):
    needs_setup: bool
    user_count: int


class SetupInit(BaseModel):
    """First administrator account."""

    email: str = Field(description="Login email, stored lower-cased")
    password: str = Field(description="At least 8 characters")
    username: Optional[str] = Field(default=None, description="Defaults to the email local part")
    firstname: Optional[str] = None
    lastname: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_days: int = Field(
        default=2,
        ge=constant.MIN_REMEMBER_DAYS,
        le=constant.MAX_REMEMBER_DAYS,
        description="Session lifetime in days",
    )


class UserRead(BaseModel):
    """Schema for reading the signed-in user."""

    id: int
    email: str
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    is_admin: bool
    has_password: bool

    class Config:
        from_attributes = True


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str


class TokenStatus(BaseModel):
    valid: bool


class ProfileUpdate(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = Field(default=None, max_length=255)
    firstname: Optional[str] = Field(default=None, max_length=255)
    lastname: Optional[str] = Field(default=None, max_length=255)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class MessageResponse(BaseModel):
    message: str


class SmtpStatus(BaseModel):
    configured: bool
