"""
Favicon endpoints.

Admins fetch favicons for a site, refresh them in batches and derive colour
variants; stored files are served publicly with long-lived cache headers.
Image work runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session
from fauxdash.core.database.repositories import BookmarkRepository, ServiceRepository
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import (
    ColorResponse,
    FaviconBatchItem,
    FaviconBatchRequest,
    FaviconBatchResponse,
    FaviconColorRequest,
    FaviconFetchRequest,
    FaviconFetchResponse,
    FaviconVariantRequest,
    GrayscaleResponse,
    InvertResponse,
    MonotoneResponse,
)
from fauxdash.favicons import (
    base_name,
    content_type_for,
    convert_to_grayscale,
    convert_to_monotone,
    favicon_dir,
    fetch_and_save_favicon,
    filename_from_reference,
    find_source_file,
    invert_colors,
    is_readable_image,
    is_safe_filename,
    parse_color,
    serve_path,
    tint_favicon,
)
from fauxdash.favicons.storage import ICON_PREFIX
from fauxdash.server.core.config import settings
from fauxdash.server.security.deps import require_admin
from fauxdash.server.services.catalog_service import invalidate_catalog

logger = get_logger(__name__)

router = APIRouter()

CACHE_CONTROL = "public, max-age=31536000, immutable"
IMAGE_ERRORS = (OSError, ValueError)


def get_favicon_dir() -> Path:
    """Dependency returning the favicon storage directory."""
    return favicon_dir()


def resolve_source(reference: str, directory: Path) -> tuple[str, Path]:
    """Validate a file reference and locate the best source image for a variant.

    Raises:
        HTTPException: 400 for an unsafe name, 404 when no source file exists
    """
    filename = filename_from_reference(reference)
    if not is_safe_filename(filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filename")
    source = find_source_file(filename, directory)
    if source is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favicon not found")
    return filename, source


@router.post(
    "/fetch",
    response_model=FaviconFetchResponse,
    dependencies=[Depends(require_admin)],
    summary="Fetch Favicon",
    description=(
        "Download a favicon for a site, trying several icon sources in turn, and store it as PNG. "
        "With is_direct_favicon_url only the given URL is tried."
    ),
    response_description="Serve path and file name of the stored favicon.",
    responses={404: {"description": "No source produced a usable favicon"}},
)
async def fetch_favicon(
    payload: FaviconFetchRequest,
    directory: Path = Depends(get_favicon_dir),
):
    result = await fetch_and_save_favicon(
        payload.url,
        direct=payload.is_direct_favicon_url,
        timeout=settings.favicons.fetch_timeout,
        directory=directory,
    )
    if not result.success:
        logger.info(f"No favicon found for {payload.url}: {result.error}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "success": False,
                "no_favicon": True,
                "error": result.error or "No favicon found",
                "domain": result.domain,
            },
        )
    return FaviconFetchResponse(success=True, path=result.path, filename=result.filename, domain=result.domain)


@router.get(
    "/serve/{filename}",
    summary="Serve Favicon",
    description="Return a stored favicon file. Public and cacheable for a year.",
    response_description="Image bytes.",
    responses={
        400: {"description": "Invalid filename"},
        404: {"description": "File not found"},
    },
)
async def serve_favicon(filename: str, directory: Path = Depends(get_favicon_dir)) -> FileResponse:
    if not is_safe_filename(filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filename")
    path = directory / filename
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favicon not found")
    return FileResponse(path, media_type=content_type_for(filename), headers={"Cache-Control": CACHE_CONTROL})


@router.post(
    "/grayscale",
    response_model=GrayscaleResponse,
    dependencies=[Depends(require_admin)],
    summary="Grayscale Variants",
    description="Create black and white grayscale variants of a stored favicon.",
    response_description="Serve paths of both variants.",
    responses={
        400: {"description": "Invalid filename or unreadable image"},
        404: {"description": "Favicon not found"},
    },
)
async def grayscale_favicon(
    payload: FaviconVariantRequest,
    directory: Path = Depends(get_favicon_dir),
) -> GrayscaleResponse:
    filename, source = resolve_source(payload.filename, directory)
    try:
        black, white = await asyncio.to_thread(convert_to_grayscale, source, base_name(filename), directory)
    except IMAGE_ERRORS as e:
        logger.warning(f"Grayscale conversion failed for {filename}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not process image") from e
    return GrayscaleResponse(black=serve_path(black), white=serve_path(white))


@router.post(
    "/invert",
    response_model=InvertResponse,
    dependencies=[Depends(require_admin)],
    summary="Inverted Variant",
    description="Create a colour-inverted variant of a stored favicon, keeping transparency.",
    response_description="Serve path of the variant.",
    responses={
        400: {"description": "Invalid filename or unreadable image"},
        404: {"description": "Favicon not found"},
    },
)
async def invert_favicon(
    payload: FaviconVariantRequest,
    directory: Path = Depends(get_favicon_dir),
) -> InvertResponse:
    filename, source = resolve_source(payload.filename, directory)
    target_name = f"{base_name(filename)}_inverted.png"
    try:
        await asyncio.to_thread(invert_colors, source, directory / target_name)
    except IMAGE_ERRORS as e:
        logger.warning(f"Invert failed for {filename}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not process image") from e
    return InvertResponse(path=serve_path(target_name))


@router.post(
    "/monotone",
    response_model=MonotoneResponse,
    dependencies=[Depends(require_admin)],
    summary="Monotone Variants",
    description=(
        "Create the _monotone_black / _monotone_white pair of a stored favicon. "
        "An existing pair is reused. Clients append _black.png or _white.png to the returned path."
    ),
    response_description="Serve path stem of the pair.",
    responses={
        400: {"description": "Invalid filename, SVG source or unreadable image"},
        404: {"description": "Favicon not found"},
    },
)
async def monotone_favicon(
    payload: FaviconVariantRequest,
    directory: Path = Depends(get_favicon_dir),
) -> MonotoneResponse:
    if filename_from_reference(payload.filename).lower().endswith(".svg"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="SVG files are not supported for monotone conversion",
        )
    filename, source = resolve_source(payload.filename, directory)
    stem = f"{base_name(filename)}_monotone"
    if (directory / f"{stem}_black.png").is_file() and (directory / f"{stem}_white.png").is_file():
        return MonotoneResponse(path=serve_path(stem), cached=True)

    try:
        await asyncio.to_thread(convert_to_monotone, source, base_name(filename), directory)
    except IMAGE_ERRORS as e:
        logger.warning(f"Monotone conversion failed for {filename}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not process image") from e
    logger.info(f"Created monotone variants for {filename}")
    return MonotoneResponse(path=serve_path(stem))


@router.post(
    "/color",
    response_model=ColorResponse,
    dependencies=[Depends(require_admin)],
    summary="Theme Colour Variant",
    description=(
        "Create a single-hue copy of a stored favicon in a hex colour or a theme colour name. "
        "When the stored image is unreadable and item_url is given, the favicon is fetched again first."
    ),
    response_description="Serve path of the variant.",
    responses={
        400: {"description": "Invalid filename or colour, or the image could not be converted"},
        404: {"description": "Favicon not found"},
    },
)
async def color_favicon(
    payload: FaviconColorRequest,
    directory: Path = Depends(get_favicon_dir),
) -> ColorResponse:
    rgb = parse_color(payload.color)
    if rgb is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid color")
    filename, source = resolve_source(payload.filename, directory)
    target_name = f"{base_name(filename)}_themed_{payload.color.strip().lstrip('#')}.png"
    target = directory / target_name

    if target.is_file() and await asyncio.to_thread(is_readable_image, target):
        return ColorResponse(path=serve_path(target_name), cached=True)

    try:
        await asyncio.to_thread(tint_favicon, source, target, rgb)
    except IMAGE_ERRORS as e:
        logger.warning(f"Colour conversion failed for {filename}: {e}")
        if not payload.item_url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unable to convert favicon: {e}"
            ) from e
        source = await _refetch_source(payload.item_url, directory)
        try:
            await asyncio.to_thread(tint_favicon, source, target, rgb)
        except IMAGE_ERRORS as retry_error:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unable to convert favicon: {retry_error}"
            ) from retry_error

    logger.info(f"Created {payload.color} variant for {filename}")
    return ColorResponse(path=serve_path(target_name))


async def _refetch_source(url: str, directory: Path) -> Path:
    result = await fetch_and_save_favicon(url, timeout=settings.favicons.fetch_timeout, directory=directory)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Could not re-fetch favicon: {result.error}"
        )
    logger.info(f"Re-fetched favicon from {url}")
    source = find_source_file(result.filename or "", directory)
    if source is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not re-fetch favicon")
    return source


@router.post(
    "/batch",
    response_model=FaviconBatchResponse,
    dependencies=[Depends(require_admin)],
    summary="Batch Re-fetch",
    description=(
        "Fetch the favicon of each listed bookmark or service again and point its icon at the new file. "
        "Failures are reported per item."
    ),
    response_description="Per-item outcome and totals.",
)
async def batch_fetch_favicons(
    payload: FaviconBatchRequest,
    session: AsyncSession = Depends(get_session),
    directory: Path = Depends(get_favicon_dir),
) -> FaviconBatchResponse:
    repo = BookmarkRepository(session) if payload.type == "bookmark" else ServiceRepository(session)
    items = await repo.list_by_ids(payload.ids)
    logger.info(f"Batch favicon fetch for {len(items)} of {len(payload.ids)} requested {payload.type}s")

    results = []
    for item in items:
        fetched = await fetch_and_save_favicon(
            item.url, timeout=settings.favicons.fetch_timeout, directory=directory
        )
        if not fetched.success:
            logger.warning(f"Favicon fetch failed for {payload.type} {item.id} ({item.url}): {fetched.error}")
            results.append(FaviconBatchItem(id=item.id, success=False, error=fetched.error or "Failed to fetch"))
            continue
        item.icon = f"{ICON_PREFIX}{fetched.path}"
        await repo.update(item)
        results.append(FaviconBatchItem(id=item.id, success=True, path=item.icon))

    successful = sum(1 for result in results if result.success)
    if successful:
        invalidate_catalog()
    logger.info(f"Batch favicon fetch complete: {successful}/{len(payload.ids)} successful")
    return FaviconBatchResponse(results=results, total=len(payload.ids), successful=successful)
