"""
User and password reset token repositories.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.users import PasswordResetToken, User
from .base import SQLModelRepository


class UserRepository(SQLModelRepository[User]):
    """Repository for user accounts."""

    default_order = "id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively.

        Args:
            email: Login email

        Returns:
            User instance or None
        """
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(User))
        return int(result.scalar_one())

    async def set_password_hash(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        user.updated_at = utc_now()
        return await self.update(user)


class PasswordResetTokenRepository(SQLModelRepository[PasswordResetToken]):
    """Repository for single-use password reset tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PasswordResetToken)

    async def issue(self, user_id: int, ttl: timedelta = timedelta(hours=1)) -> PasswordResetToken:
        """Create a new random token for a user.

        Args:
            user_id: Owner of the token
            ttl: How long the token stays valid

        Returns:
            Persisted token (64 hex characters)
        """
        token = PasswordResetToken(
            user_id=user_id,
            token=secrets.token_hex(32),
            expires_at=utc_now() + ttl,
        )
        return await self.create(token)

    async def get_valid(self, token: str, now: Optional[datetime] = None) -> Optional[PasswordResetToken]:
        """Get a token that is unused and not expired.

        Args:
            token: Token string from the reset link
            now: Reference time, defaults to the current UTC time

        Returns:
            Token row or None
        """
        now = now or utc_now()
        stmt = select(PasswordResetToken).where(
            (PasswordResetToken.token == token)
            & (PasswordResetToken.used == False)  # noqa: E712
            & (PasswordResetToken.expires_at > now)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def mark_used(self, token: PasswordResetToken) -> PasswordResetToken:
        token.used = True
        return await self.update(token)
