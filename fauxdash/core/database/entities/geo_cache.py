"""
GeoIP lookup cache entity.

Keyed by the visitor IP hash so that the raw address never needs to be stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class GeoCache(Base, table=True):
    """Cached geolocation for one IP hash.

    Table: geo_cache
    """

    __tablename__ = "geo_cache"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    ip_hash: str = Field(max_length=64, unique=True, index=True)
    country: Optional[str] = Field(default=None, max_length=2)
    country_name: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=255)
    region: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    timezone: Optional[str] = Field(default=None, max_length=64)
    provider: Optional[str] = Field(default=None, max_length=32)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utc_now)
    expires_at: datetime = Field(sa_type=DateTime, index=True)
