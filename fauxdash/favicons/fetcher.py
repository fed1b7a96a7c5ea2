"""
Favicon fetching.

Given a site URL, a list of favicon services is tried in order. The first
response that is large enough to be a real image and converts cleanly to PNG
wins and is written to the favicon directory.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from fauxdash.core.logging_config import get_logger

from .converter import convert_to_png
from .storage import favicon_dir, serve_path

logger = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MIN_ICON_BYTES = 100


@dataclass
class FaviconResult:
    """Outcome of a fetch: where the favicon was saved, or why it was not."""

    success: bool
    path: Optional[str] = None
    filename: Optional[str] = None
    domain: Optional[str] = None
    error: Optional[str] = None


def domain_of(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


def build_favicon_sources(url: str, direct: bool = False) -> List[str]:
    """List candidate favicon URLs for a site, best first.

    Args:
        url: Site URL (or the favicon URL itself when ``direct``)
        direct: Only try ``url``

    Returns:
        Ordered candidate URLs
    """
    if direct:
        return [url]

    parsed = urlparse(url)
    host = parsed.hostname or ""
    scheme = parsed.scheme or "https"
    domain = domain_of(url)
    alternate_host = host[4:] if host.startswith("www.") else f"www.{host}"

    return [
        f"https://www.google.com/s2/favicons?domain={domain}&sz=128",
        f"https://icon.horse/icon/{domain}",
        f"https://favicons.githubusercontent.com/{domain}",
        f"{scheme}://{host}/favicon.ico",
        f"https://icons.duckduckgo.com/ip3/{domain}.ico",
        f"{scheme}://{alternate_host}/favicon.ico",
        f"https://logo.clearbit.com/{domain}",
    ]


async def _download(client: httpx.AsyncClient, source: str) -> tuple[Optional[bytes], Optional[str]]:
    try:
        response = await client.get(source, headers={"User-Agent": USER_AGENT})
    except httpx.HTTPError as e:
        return None, str(e) or type(e).__name__
    if not response.is_success:
        return None, f"HTTP {response.status_code} from {source}"
    if len(response.content) < MIN_ICON_BYTES:
        return None, "Response too small"
    return response.content, None


def _store(directory: Path, base: str, png: bytes) -> None:
    (directory / f"{base}_original.png").write_bytes(png)
    (directory / f"{base}.png").write_bytes(png)


async def fetch_and_save_favicon(
    url: str,
    direct: bool = False,
    timeout: float = 10.0,
    directory: Optional[Path] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FaviconResult:
    """Fetch a favicon for ``url`` and store it as PNG.

    Args:
        url: Site URL, or a favicon URL when ``direct``
        direct: Treat ``url`` as the favicon itself
        timeout: Per-request timeout in seconds
        directory: Favicon directory, defaults to the configured one
        client: httpx client to reuse (tests pass a mocked transport)

    Returns:
        FaviconResult describing the saved file or the last error
    """
    if not urlparse(url).hostname:
        return FaviconResult(success=False, error="Invalid URL")

    domain = domain_of(url)
    target_dir = directory or favicon_dir()
    png: Optional[bytes] = None
    last_error = "No favicon found"

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
    try:
        for source in build_favicon_sources(url, direct):
            logger.debug(f"Trying favicon source: {source}")
            data, error = await _download(client, source)
            if data is None:
                last_error = error or last_error
                continue
            converted = await asyncio.to_thread(convert_to_png, data)
            if converted.success:
                png = converted.data
                logger.info(f"Fetched favicon for {domain} from {source}")
                break
            last_error = converted.error or "Conversion failed"
    finally:
        if owns_client:
            await client.aclose()

    if png is None:
        logger.info(f"No favicon found for {domain}: {last_error}")
        return FaviconResult(success=False, domain=domain, error=last_error)

    base = f"{domain.replace('.', '_')}_{int(time.time() * 1000)}"
    active_name = f"{base}.png"
    await asyncio.to_thread(_store, target_dir, base, png)

    return FaviconResult(success=True, path=serve_path(active_name), filename=active_name, domain=domain)
