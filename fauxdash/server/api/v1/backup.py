"""
CSV import/export and full backup endpoints.

CSV files carry bookmarks or services with their category names. A backup is
a ZIP with the content CSVs, non-secret global settings and analytics rows.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.backup import InvalidBackupError, backup_filename, build_backup_zip, read_backup_zip
from fauxdash.core.database import get_session, utc_now
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import ImportResult, RestoreResponse
from fauxdash.server.security.deps import require_admin
from fauxdash.server.services.backup_service import (
    build_archive,
    export_items_csv,
    import_items_csv,
    restore_archive,
)

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

ContentType = Literal["bookmarks", "services"]


def attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


async def read_text_upload(file: UploadFile) -> str:
    raw = await file.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be UTF-8 encoded CSV") from e


@router.get(
    "/export/csv",
    summary="Export CSV",
    description="Download every bookmark or service as CSV, with its category name.",
    response_description="CSV attachment.",
)
async def export_csv(
    type: ContentType = Query(...),
    session: AsyncSession = Depends(get_session),
) -> Response:
    content = await export_items_csv(session, type)
    filename = f"fauxdash-{type}-{utc_now().strftime('%Y-%m-%d')}.csv"
    return Response(content=content, media_type="text/csv; charset=utf-8", headers=attachment(filename))


@router.post(
    "/import/csv",
    response_model=ImportResult,
    summary="Import CSV",
    description=(
        "Create bookmarks or services from an uploaded CSV. Categories are matched by name, ignoring "
        "case, and created when missing. Rows without a name or URL are skipped."
    ),
    response_description="Import counters and per-row errors.",
    responses={400: {"description": "Unreadable file"}},
)
async def import_csv(
    type: ContentType = Query(...),
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
) -> ImportResult:
    content = await read_text_upload(file)
    result = await import_items_csv(session, type, content)
    if result.imported == 0 and result.skipped == 0 and not result.errors:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No data rows found in file")
    return result


@router.get(
    "/backup",
    summary="Download Backup",
    description=(
        "Download a ZIP with bookmarks, services, both category lists, global settings (without "
        "secrets), analytics and metadata. Records the backup date in the settings."
    ),
    response_description="ZIP attachment.",
)
async def download_backup(session: AsyncSession = Depends(get_session)) -> Response:
    now = utc_now()
    archive = await build_archive(session, now)
    data = build_backup_zip(archive)
    logger.info(f"Backup created: {len(data)} bytes, counts={archive.metadata.get('counts')}")
    return Response(content=data, media_type="application/zip", headers=attachment(backup_filename(now)))


@router.post(
    "/backup/restore",
    response_model=RestoreResponse,
    summary="Restore Backup",
    description=(
        "Restore a backup ZIP. Categories come first, then items, settings and analytics. "
        "Row errors are reported without aborting. With clear_existing, current content and "
        "analytics are deleted first."
    ),
    response_description="Restore counters and collected errors.",
    responses={400: {"description": "Not a backup archive"}},
)
async def restore_backup(
    file: UploadFile = File(...),
    clear_existing: bool = Query(False),
    session: AsyncSession = Depends(get_session),
) -> RestoreResponse:
    try:
        archive = read_backup_zip(await file.read())
    except InvalidBackupError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info(
        f"Restoring backup version={archive.metadata.get('version', 'unknown')} clear_existing={clear_existing}"
    )
    result = await restore_archive(session, archive, clear_existing)
    return RestoreResponse(success=True, **asdict(result))
