"""
First-run setup endpoints.

A fresh installation has no users. The setup wizard asks whether setup is
still needed and then creates the first account, which is always an admin.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.entities import User
from fauxdash.core.database.repositories import UserRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import SetupInit, SetupStatus, UserRead
from fauxdash.server.core.config import settings
from fauxdash.server.security.deps import start_session
from fauxdash.server.security.passwords import hash_password

logger = get_logger(__name__)

router = APIRouter()

MIN_SETUP_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    """Validate an address syntactically and return it lower-cased.

    Raises:
        HTTPException: 400 when the address is not valid
    """
    try:
        validated = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid email address: {e}") from e
    return validated.normalized.lower()


@router.get(
    "/status",
    response_model=SetupStatus,
    summary="Setup Status",
    description="Report whether the first administrator still has to be created.",
    response_description="Setup flag and current user count.",
)
async def setup_status(session: AsyncSession = Depends(get_session)) -> SetupStatus:
    count = await UserRepository(session).count()
    return SetupStatus(needs_setup=count == 0, user_count=count)


@router.post(
    "/init",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create First Administrator",
    description="Create the initial admin account. Only allowed while no user exists.",
    response_description="The created administrator, already signed in.",
    responses={
        201: {"description": "Administrator created"},
        400: {"description": "Setup already completed or invalid credentials"},
    },
)
async def setup_init(
    payload: SetupInit,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    """
    Create the first administrator.

    - **email**: Login email, validated and stored lower-cased.
    - **password**: At least 8 characters.
    - **username**: Optional, defaults to the local part of the email.
    """
    users = UserRepository(session)
    if await users.count() > 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Setup has already been completed")

    email = normalize_email(payload.email)
    if len(payload.password) < MIN_SETUP_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_SETUP_PASSWORD_LENGTH} characters",
        )

    user = await users.create(
        User(
            email=email,
            username=payload.username or email.split("@", 1)[0],
            firstname=payload.firstname,
            lastname=payload.lastname,
            password_hash=hash_password(payload.password),
            is_admin=True,
        )
    )
    start_session(request, user, settings.session.max_age_days)
    logger.info(f"Setup completed, administrator created: {user.email}")
    return UserRead.model_validate(user)
