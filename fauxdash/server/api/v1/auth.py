"""
Authentication endpoints.

Password sign-in backed by a signed session cookie, sign-out, the current
user, and the emailed password reset flow.
"""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.repositories import PasswordResetTokenRepository, UserRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SmtpStatus,
    TokenStatus,
    UserRead,
)
from fauxdash.server.core.config import settings
from fauxdash.server.security.deps import CurrentUserDep, client_ip, end_session, start_session
from fauxdash.server.security.passwords import hash_password, verify_password
from fauxdash.server.security.rate_limit import enforce_rate_limit
from fauxdash.server.services.mailer import EmailSender, SMTPSettings, build_email_html, get_email_sender
from fauxdash.server.services.settings_service import get_global_settings

logger = get_logger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"
FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a password reset link has been sent."
MIN_RESET_PASSWORD_LENGTH = 8


@router.post(
    "/login",
    response_model=UserRead,
    summary="Sign In",
    description="Verify email and password and start a session. Limited to 5 attempts per minute per client.",
    response_description="The signed-in user.",
    responses={
        401: {"description": "Invalid email or password"},
        403: {"description": "Password login is disabled"},
        429: {"description": "Too many attempts"},
    },
)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    """
    Sign in with email and password.

    - **email**: Login email (case-insensitive).
    - **password**: Account password.
    - **remember_days**: Session lifetime, 1 to 30 days.
    """
    ip = client_ip(request)
    enforce_rate_limit(ip, "login")

    values = await get_global_settings(session)
    if values["disablePasswordLogin"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Password login is disabled")

    user = await UserRepository(session).get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info(f"Failed login attempt from {ip}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    start_session(request, user, payload.remember_days)
    logger.info(f"User {user.id} signed in for {payload.remember_days} day(s)")
    return UserRead.model_validate(user)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Sign Out",
    description="Clear the session cookie.",
    response_description="Confirmation message.",
)
async def logout(request: Request) -> MessageResponse:
    end_session(request)
    return MessageResponse(message="Signed out")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current User",
    description="Return the signed-in user.",
    response_description="The signed-in user.",
    responses={401: {"description": "Not authenticated"}},
)
async def me(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request Password Reset",
    description=(
        "Email a single-use reset link valid for one hour. The answer is the same whether or not "
        "the account exists. Limited to 3 requests per hour per client."
    ),
    response_description="Generic confirmation message.",
    responses={
        429: {"description": "Too many requests"},
        503: {"description": "Email delivery is not configured"},
    },
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    sender_factory: Callable[[SMTPSettings], EmailSender] = Depends(get_email_sender),
) -> MessageResponse:
    """
    Start the password reset flow.

    Accounts without a password (external sign-in only) never receive a link.
    """
    enforce_rate_limit(client_ip(request), "password_reset")

    values = await get_global_settings(session)
    smtp = SMTPSettings.from_settings(values)
    if not smtp.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Password reset is not available: email is not configured",
        )

    user = await UserRepository(session).get_by_email(payload.email)
    if user is None or not user.password_hash:
        logger.info("Password reset requested for an unknown or password-less account")
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    token = await PasswordResetTokenRepository(session).issue(user.id)
    reset_url = f"{settings.public_base_url.rstrip('/')}/reset-password?token={token.token}"
    site_title = values["siteTitle"]
    result = await sender_factory(smtp).send(
        to=user.email,
        subject=f"Reset your {site_title} password",
        text=(
            "A password reset was requested for your account.\n\n"
            f"Open this link to choose a new password (valid for 1 hour):\n{reset_url}\n\n"
            "If you did not request this, you can ignore this email."
        ),
        html_body=build_email_html(
            title="Reset your password",
            body=(
                "<p>A password reset was requested for your account.</p>"
                "<p>The link below is valid for 1 hour. If you did not request this, "
                "you can ignore this email.</p>"
            ),
            button_text="Choose a new password",
            button_url=reset_url,
            site_title=site_title,
        ),
    )
    if not result.success:
        logger.error(f"Password reset email for user {user.id} was not delivered: {result.error}")
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.get(
    "/reset-password",
    response_model=TokenStatus,
    summary="Check Reset Token",
    description="Report whether a reset token is unused and not expired.",
    response_description="Token validity flag.",
)
async def check_reset_token(
    token: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
) -> TokenStatus:
    record = await PasswordResetTokenRepository(session).get_valid(token)
    return TokenStatus(valid=record is not None)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password",
    description="Set a new password using a valid reset token. The token is consumed.",
    response_description="Confirmation message.",
    responses={400: {"description": "Invalid or expired token, or password too short"}},
)
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    tokens = PasswordResetTokenRepository(session)
    record = await tokens.get_valid(payload.token)
    if record is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")
    if len(payload.new_password) < MIN_RESET_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_RESET_PASSWORD_LENGTH} characters",
        )

    users = UserRepository(session)
    user = await users.get_by_id(record.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    await users.set_password_hash(user, hash_password(payload.new_password))
    await tokens.mark_used(record)
    logger.info(f"Password reset completed for user {user.id}")
    return MessageResponse(message="Password has been reset. You can now sign in.")


@router.get(
    "/smtp-status",
    response_model=SmtpStatus,
    summary="Email Availability",
    description="Report whether outgoing email is configured, so the sign-in page can offer password reset.",
    response_description="Configured flag.",
)
async def smtp_status(session: AsyncSession = Depends(get_session)) -> SmtpStatus:
    smtp = SMTPSettings.from_settings(await get_global_settings(session))
    return SmtpStatus(configured=smtp.is_configured)
