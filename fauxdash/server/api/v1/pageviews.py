"""
Pageview tracking endpoint.

The pageview is stored before answering; geolocation runs afterwards as a
background task with its own database session.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fauxdash.core.database import get_session, get_session_factory
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import ClickResponse, PageviewCreate
from fauxdash.server.security.deps import client_ip
from fauxdash.server.services.pageview_service import enrich_pageview, record_pageview

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ClickResponse,
    summary="Record Pageview",
    description="Store a visit to a dashboard page. Public. Geolocation is resolved after the response.",
    response_description="Acknowledgement.",
    responses={422: {"description": "Missing or empty path"}},
)
async def track_pageview(
    payload: PageviewCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> ClickResponse:
    ip = client_ip(request)
    pageview = await record_pageview(session, payload.path, ip, request.headers.get("user-agent"))
    background_tasks.add_task(enrich_pageview, session_factory, pageview.id, ip)
    return ClickResponse()
