"""
Signed-in user account endpoints: profile and password change.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session, utc_now
from fauxdash.core.database.repositories import UserRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import MessageResponse, PasswordChange, ProfileUpdate, UserRead
from fauxdash.server.security.deps import CurrentUserDep
from fauxdash.server.security.password_policy import validate_password
from fauxdash.server.security.passwords import hash_password, verify_password
from fauxdash.server.security.rate_limit import enforce_rate_limit

from .setup import normalize_email

logger = get_logger(__name__)

router = APIRouter()


@router.patch(
    "/profile",
    response_model=UserRead,
    summary="Update Profile",
    description="Change the email, username, first name or last name of the signed-in user.",
    response_description="The updated user.",
    responses={
        400: {"description": "Invalid email"},
        409: {"description": "Email already used by another account"},
    },
)
async def update_profile(
    payload: ProfileUpdate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    users = UserRepository(session)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("email"):
        email = normalize_email(changes["email"])
        existing = await users.get_by_email(email)
        if existing is not None and existing.id != user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use")
        changes["email"] = email
    else:
        changes.pop("email", None)

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utc_now()
    user = await users.update(user)
    logger.info(f"Profile updated for user {user.id}: {sorted(changes)}")
    return UserRead.model_validate(user)


@router.post(
    "/password",
    response_model=MessageResponse,
    summary="Change Password",
    description="Change the password after confirming the current one. Limited to 5 changes per hour.",
    response_description="Confirmation message.",
    responses={
        400: {"description": "Wrong current password, weak new password, or account without password"},
        429: {"description": "Too many attempts"},
    },
)
async def change_password(
    payload: PasswordChange,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """
    Change the signed-in user's password.

    The new password must pass the default policy: at least 8 characters with
    upper case, lower case and a digit, not a common password, no long runs of
    one character and no simple sequences.
    """
    enforce_rate_limit(str(user.id), "password_change")

    if not user.password_hash:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This account signs in through an external provider and has no password",
        )
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    result = validate_password(payload.new_password)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Password does not meet requirements", "errors": result.errors},
        )

    await UserRepository(session).set_password_hash(user, hash_password(payload.new_password))
    logger.info(f"Password changed for user {user.id}")
    return MessageResponse(message="Password changed")
