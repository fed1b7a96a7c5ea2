"""
Dashboard settings endpoints.

Administrators write global values; other users write personal overrides for
appearance keys. Secrets are never returned, only a ``<key>Set`` flag.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.logging_config import get_logger, set_log_level
from fauxdash.server.security.deps import CurrentUserDep
from fauxdash.server.services.settings_service import (
    LOG_LEVELS,
    UnknownSettingError,
    get_effective_settings,
    get_global_settings,
    is_global_only,
    prepare_updates,
    public_view,
    save_settings,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="Get Settings",
    description="Effective settings for the signed-in user: global values overlaid with personal overrides.",
    response_description="Typed settings with secrets masked.",
    responses={401: {"description": "Not authenticated"}},
)
async def read_settings(user: CurrentUserDep, session: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    return await get_effective_settings(session, None if user.is_admin else user.id)


@router.put(
    "",
    summary="Update Settings",
    description=(
        "Upsert the supplied keys. Administrators write global values; other users write personal "
        "overrides and may not change authentication, SMTP, GeoIP or maintenance keys."
    ),
    response_description="Effective settings after the update.",
    responses={
        400: {"description": "Unknown key or invalid value"},
        401: {"description": "Not authenticated"},
        403: {"description": "Key may only be changed by an administrator"},
    },
)
async def update_settings(
    user: CurrentUserDep,
    payload: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    """
    Update settings.

    Secret keys keep their stored value when sent as an empty string (the
    masked value clients receive); send null to clear one.
    """
    try:
        updates = prepare_updates(payload)
    except UnknownSettingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if not user.is_admin:
        restricted = sorted(key for key in updates if is_global_only(key))
        if restricted:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only administrators can change: {', '.join(restricted)}",
            )

    level = updates.get("logLevel")
    if level is not None and level not in LOG_LEVELS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid logLevel '{level}'. Expected one of: {', '.join(LOG_LEVELS)}",
        )

    scope = None if user.is_admin else user.id
    if updates:
        await save_settings(session, updates, scope)
    if level is not None:
        set_log_level(level)
        logger.info(f"Log level changed to {level}")

    return await get_effective_settings(session, scope)


@router.get(
    "/public",
    summary="Get Public Settings",
    description="Branding and sign-in page options, available without signing in.",
    response_description="Subset of the global settings.",
)
async def read_public_settings(session: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    return public_view(await get_global_settings(session))
