"""
Authentication dependencies.

The signed session cookie carries the user id and an absolute expiry. Every
request re-loads the user so role changes and deletions apply immediately.
"""

from __future__ import annotations

import time
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.entities import User
from fauxdash.core.database.repositories import UserRepository
from fauxdash.geoip import get_client_ip

from ..core import constant


def start_session(request: Request, user: User, remember_days: int) -> float:
    """Store the signed-in user in the session.

    Args:
        request: Current request
        user: Authenticated user
        remember_days: Session lifetime in days, clamped to the allowed range

    Returns:
        Expiry as epoch seconds
    """
    days = max(constant.MIN_REMEMBER_DAYS, min(constant.MAX_REMEMBER_DAYS, remember_days))
    expires_at = time.time() + days * 86400
    request.session.clear()
    request.session[constant.SESSION_USER_KEY] = user.id
    request.session[constant.SESSION_EXPIRES_KEY] = expires_at
    return expires_at


def end_session(request: Request) -> None:
    request.session.clear()


async def get_current_user_optional(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """Signed-in user, or None for anonymous callers and expired sessions."""
    user_id = request.session.get(constant.SESSION_USER_KEY)
    if user_id is None:
        return None

    expires_at = request.session.get(constant.SESSION_EXPIRES_KEY)
    if expires_at is None or float(expires_at) < time.time():
        request.session.clear()
        return None

    user = await UserRepository(session).get_by_id(int(user_id))
    if user is None:
        request.session.clear()
    return user


async def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def client_ip(request: Request) -> str:
    """Client address from proxy headers, falling back to the socket peer."""
    fallback = request.client.host if request.client else None
    return get_client_ip(request.headers, fallback)


OptionalUserDep = Annotated[Optional[User], Depends(get_current_user_optional)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
AdminDep = Annotated[User, Depends(require_admin)]
