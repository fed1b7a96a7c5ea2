"""
GeoIP endpoints: provider diagnostics and MaxMind database upload.
"""

from __future__ import annotations

import asyncio
import re
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import GeoIPTestResponse, GeoIPUploadResponse
from fauxdash.geoip import ChainProvider, GeoIPOptions, geoip_registry
from fauxdash.server.core.config import settings
from fauxdash.server.security.deps import client_ip, require_admin
from fauxdash.server.services.settings_service import get_global_settings

logger = get_logger(__name__)

router = APIRouter()

MAX_DATABASE_BYTES = 200 * 1024 * 1024
MIN_DATABASE_BYTES = 100
METADATA_MARKER = b"\xab\xcd\xefMaxMind.com"
METADATA_WINDOW = 128 * 1024


def get_geoip_data_dir() -> Path:
    """Dependency returning the directory that receives uploaded databases."""
    return Path(settings.geoip.data_dir)


def is_maxmind_database(data: bytes) -> bool:
    """Check size and look for the metadata marker MaxMind writes near the end of every database."""
    return len(data) >= MIN_DATABASE_BYTES and METADATA_MARKER in data[-METADATA_WINDOW:]


def database_filename(original: str, timestamp_ms: int) -> str:
    stem = original[: -len(".mmdb")] if original.lower().endswith(".mmdb") else original
    return f"{re.sub(r'[^a-zA-Z0-9.-]', '_', stem)}_{timestamp_ms}.mmdb"


def _write_database(directory: Path, filename: str, data: bytes) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / filename
    target.write_bytes(data)
    return target


@router.get(
    "/test",
    response_model=GeoIPTestResponse,
    dependencies=[Depends(require_admin)],
    summary="Test GeoIP Lookup",
    description="Look up an address with the configured provider chain and report the outcome and timing.",
    response_description="Provider, lookup result and duration.",
)
async def test_lookup(
    request: Request,
    ip: Optional[str] = Query(None, description="Address to look up, defaults to the caller's address"),
    session: AsyncSession = Depends(get_session),
) -> GeoIPTestResponse:
    address = (ip or "").strip() or client_ip(request)
    options = GeoIPOptions.from_settings(await get_global_settings(session))
    provider = await geoip_registry.get(options)

    started = time.perf_counter()
    result = await provider.lookup(address)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)

    logger.info(f"GeoIP test lookup via {provider.name}: success={result.success} in {duration_ms} ms")
    return GeoIPTestResponse(
        ip=address,
        provider=options.provider if options.enabled else provider.name,
        providers=provider.provider_names if isinstance(provider, ChainProvider) else [provider.name],
        success=result.success,
        data=result.data.model_dump() if result.data else None,
        error=result.error.model_dump(mode="json") if result.error else None,
        duration_ms=duration_ms,
    )


@router.post(
    "/upload",
    response_model=GeoIPUploadResponse,
    dependencies=[Depends(require_admin)],
    summary="Upload MaxMind Database",
    description=(
        "Store an uploaded GeoLite2 .mmdb file (200 MB at most) in the GeoIP data directory. "
        "The returned path can then be saved as the geoipMaxmindPath setting."
    ),
    response_description="Stored path and file name.",
    responses={400: {"description": "Wrong file type, too large or not a MaxMind database"}},
)
async def upload_database(
    database: UploadFile = File(...),
    directory: Path = Depends(get_geoip_data_dir),
) -> GeoIPUploadResponse:
    """
    Upload a MaxMind database.

    The file is checked for the MaxMind metadata marker before it is written.
    """
    original = database.filename or ""
    if not original.lower().endswith(".mmdb"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file type. Please upload a .mmdb file."
        )
    if database.size is not None and database.size > MAX_DATABASE_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large. Maximum size is 200MB.")

    data = await database.read(MAX_DATABASE_BYTES + 1)
    if len(data) > MAX_DATABASE_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large. Maximum size is 200MB.")
    if not is_maxmind_database(data):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid MaxMind database file.")

    filename = database_filename(original, int(time.time() * 1000))
    target = await asyncio.to_thread(_write_database, directory, filename, data)
    size_mb = len(data) / (1024 * 1024)
    logger.info(f"Stored uploaded GeoIP database {filename} ({size_mb:.1f}MB)")
    return GeoIPUploadResponse(
        message=f"Database uploaded successfully ({size_mb:.1f}MB)",
        path=str(target),
        filename=filename,
    )
