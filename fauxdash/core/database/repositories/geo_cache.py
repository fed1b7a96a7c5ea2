"""
GeoIP cache repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.geo_cache import GeoCache
from .base import SQLModelRepository

GEO_FIELDS = ("country", "country_name", "city", "region", "latitude", "longitude", "timezone")


class GeoCacheRepository(SQLModelRepository[GeoCache]):
    """Repository for cached geolocation lookups keyed by IP hash."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GeoCache)

    async def get_valid(self, ip_hash: str, now: Optional[datetime] = None) -> Optional[GeoCache]:
        """Get the cached location for a hash if it has not expired."""
        now = now or utc_now()
        stmt = select(GeoCache).where((GeoCache.ip_hash == ip_hash) & (GeoCache.expires_at > now))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert(
        self, ip_hash: str, location: Dict[str, Any], provider: Optional[str], expires_at: datetime
    ) -> GeoCache:
        """Insert or refresh the cache row for an IP hash.

        Args:
            ip_hash: Salted IP hash
            location: Geo fields (country, city, ...)
            provider: Name of the provider that answered
            expires_at: When the row stops being trusted

        Returns:
            Persisted cache row
        """
        stmt = select(GeoCache).where(GeoCache.ip_hash == ip_hash)
        result = await self.session.execute(stmt)
        row = result.scalars().first()
        if row is None:
            row = GeoCache(ip_hash=ip_hash, expires_at=expires_at)
        for field in GEO_FIELDS:
            setattr(row, field, location.get(field))
        row.provider = provider
        row.expires_at = expires_at
        row.created_at = utc_now()
        return await self.update(row)

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        result = await self.session.execute(sa_delete(GeoCache).where(GeoCache.expires_at <= now))
        await self.session.commit()
        return int(result.rowcount or 0)
