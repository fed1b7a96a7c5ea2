"""
User account entity models.

Users sign in with email and password. An account without a password hash was
provisioned by an external identity provider and cannot use password login.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class UserBase(Base):
    """Base fields for a user account."""

    email: str = Field(index=True, unique=True, max_length=255, description="Login email, stored lower-cased")
    username: Optional[str] = Field(default=None, max_length=255, description="Display name")
    firstname: Optional[str] = Field(default=None, max_length=255)
    lastname: Optional[str] = Field(default=None, max_length=255)
    is_admin: bool = Field(default=False, description="Administrators manage content and settings")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: Optional[str] = Field(default=None, description="argon2 hash, null for external accounts")
    oidc_subject: Optional[str] = Field(default=None, max_length=255, description="External identity subject")

    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    updated_at: datetime = Field(
        sa_type=DateTime, default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, admin={self.is_admin})"


class PasswordResetToken(Base, table=True):
    """Single-use password reset token.

    Table: password_reset_tokens
    """

    __tablename__ = "password_reset_tokens"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    token: str = Field(max_length=64, unique=True, index=True)
    expires_at: datetime = Field(sa_type=DateTime)
    used: bool = Field(default=False)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
