"""
Pageview Service.

Pageviews are stored synchronously with the salted IP hash only. Geolocation
runs afterwards as a background task with its own database session: the
GeoIP cache table is consulted first, then the provider chain.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fauxdash.core.database import utc_now
from fauxdash.core.database.entities import Pageview
from fauxdash.core.database.repositories import GeoCacheRepository
from fauxdash.core.database.repositories.geo_cache import GEO_FIELDS
from fauxdash.core.logging_config import get_logger
from fauxdash.geoip import GeoIPOptions, GeoLocation, geoip_registry, hash_ip, is_private_ip

from .settings_service import SETTING_DEFAULTS, get_global_settings

logger = get_logger(__name__)


async def record_pageview(session: AsyncSession, path: str, ip: str, user_agent: Optional[str]) -> Pageview:
    pageview = Pageview(path=path, user_agent=user_agent, ip_hash=hash_ip(ip))
    session.add(pageview)
    await session.commit()
    await session.refresh(pageview)
    return pageview


async def resolve_location(session: AsyncSession, ip: str, ip_hash: str) -> Optional[GeoLocation]:
    """Location for an address: database cache first, then the provider chain.

    Successful provider answers are written back to the cache table for
    ``geoipCacheDuration`` seconds.
    """
    cache = GeoCacheRepository(session)
    cached = await cache.get_valid(ip_hash)
    if cached is not None:
        return GeoLocation(**{f: getattr(cached, f) for f in GEO_FIELDS if getattr(cached, f) is not None})

    values = await get_global_settings(session)
    provider = await geoip_registry.get(GeoIPOptions.from_settings(values))
    result = await provider.lookup(ip)
    if not result.success or result.data is None:
        logger.debug(f"No location for pageview address: {result.error.code if result.error else 'unknown'}")
        return None

    ttl = values.get("geoipCacheDuration") or SETTING_DEFAULTS["geoipCacheDuration"]
    await cache.upsert(ip_hash, result.data.model_dump(), provider.name, utc_now() + timedelta(seconds=ttl))
    return result.data


async def enrich_pageview(session_factory: async_sessionmaker, pageview_id: int, ip: str) -> None:
    """Attach geolocation to a stored pageview.

    The pageview is marked ``geo_enriched`` even when nothing was found, so it
    is not retried. Errors are logged and never raised.

    Args:
        session_factory: Factory for a fresh database session
        pageview_id: Row to update
        ip: Client address (never persisted)
    """
    try:
        async with session_factory() as session:
            pageview = await session.get(Pageview, pageview_id)
            if pageview is None:
                return

            if not is_private_ip(ip):
                location = await resolve_location(session, ip, pageview.ip_hash or hash_ip(ip))
                if location is not None:
                    for field in GEO_FIELDS:
                        setattr(pageview, field, getattr(location, field))

            pageview.geo_enriched = True
            session.add(pageview)
            await session.commit()
    except Exception as e:
        logger.error(f"Geo enrichment failed for pageview {pageview_id}: {e}", exc_info=True)
