"""
Admin maintenance endpoints: favicon cleanup, database vacuum and cache reset.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.repositories import BookmarkRepository, GeoCacheRepository, ServiceRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import CacheClearResponse, PruneResponse, VacuumResponse
from fauxdash.favicons import prune_orphan_favicons
from fauxdash.geoip import geoip_registry
from fauxdash.server.security.deps import require_admin
from fauxdash.server.services.catalog_service import invalidate_catalog
from fauxdash.server.services.settings_service import global_settings_cache

from .favicons import get_favicon_dir

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def database_file_size(engine: AsyncEngine) -> Optional[int]:
    path = engine.url.database
    if not path or path == ":memory:" or not os.path.isfile(path):
        return None
    return os.path.getsize(path)


@router.post(
    "/tools/prune-orphans",
    response_model=PruneResponse,
    summary="Prune Orphan Favicons",
    description="Delete stored favicon files that no bookmark or service icon refers to.",
    response_description="Files scanned, files removed and space freed.",
)
async def prune_orphans(
    session: AsyncSession = Depends(get_session),
    directory: Path = Depends(get_favicon_dir),
) -> PruneResponse:
    icons = await BookmarkRepository(session).list_icons() + await ServiceRepository(session).list_icons()
    result = prune_orphan_favicons(icons, directory)
    return PruneResponse(total_files=result.total_files, removed=result.removed, space_freed=result.space_freed)


@router.post(
    "/tools/vacuum-db",
    response_model=VacuumResponse,
    summary="Vacuum Database",
    description="Rebuild the SQLite database file to reclaim free pages. Only available on SQLite.",
    response_description="File size before and after, when the database is a file.",
    responses={400: {"description": "Database is not SQLite"}},
)
async def vacuum_db(session: AsyncSession = Depends(get_session)) -> VacuumResponse:
    engine = session.bind
    if engine.dialect.name != "sqlite":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"VACUUM is only supported on SQLite (current: {engine.dialect.name})",
        )

    size_before = database_file_size(engine)
    async with engine.connect() as conn:
        conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
        await conn.exec_driver_sql("VACUUM")
    size_after = database_file_size(engine)
    logger.info(f"Database vacuumed: {size_before} -> {size_after} bytes")
    return VacuumResponse(success=True, size_before=size_before, size_after=size_after)


@router.post(
    "/cache/clear",
    response_model=CacheClearResponse,
    summary="Clear Caches",
    description=(
        "Drop the cached category listings, the cached global settings and the GeoIP provider with "
        "its memory cache. Expired rows of the GeoIP cache table are purged as well."
    ),
    response_description="Names of the cleared caches.",
)
async def clear_caches(session: AsyncSession = Depends(get_session)) -> CacheClearResponse:
    invalidate_catalog()
    global_settings_cache.invalidate()
    await geoip_registry.reset()
    purged = await GeoCacheRepository(session).purge_expired()
    logger.info(f"Caches cleared, {purged} expired GeoIP cache row(s) purged")
    return CacheClearResponse(cleared=["categories", "settings", "geoip"])
