"""
Analytics entity models.

Pageviews keep only a salted hash of the visitor address. Clicks store the
hour and weekday they happened at so heatmaps can be built without date
functions that differ between database backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class Pageview(Base, table=True):
    """A single page visit.

    Table: pageviews
    """

    __tablename__ = "pageviews"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    path: str = Field(max_length=2048)
    user_agent: Optional[str] = Field(default=None)
    ip_hash: Optional[str] = Field(default=None, max_length=64, index=True)
    country: Optional[str] = Field(default=None, max_length=2, index=True)
    country_name: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=255)
    region: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    timezone: Optional[str] = Field(default=None, max_length=64)
    geo_enriched: bool = Field(default=False)
    timestamp: datetime = Field(sa_type=DateTime, default_factory=utc_now, index=True)


class ClickBase(Base):
    """Time breakdown stored with every click."""

    clicked_at: datetime = Field(sa_type=DateTime, default_factory=utc_now, index=True)
    hour_of_day: int = Field(description="0-23")
    day_of_week: int = Field(description="0 = Sunday ... 6 = Saturday")
    day_of_month: int = Field(description="1-31")


class BookmarkClick(ClickBase, table=True):
    """Bookmark click event.

    Table: bookmark_clicks
    """

    __tablename__ = "bookmark_clicks"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    bookmark_id: int = Field(foreign_key="bookmarks.id", index=True)


class ServiceClick(ClickBase, table=True):
    """Service click event.

    Table: service_clicks
    """

    __tablename__ = "service_clicks"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    service_id: int = Field(foreign_key="services.id", index=True)


class AnalyticsDaily(Base, table=True):
    """Per-day rollup row.

    ``type`` is ``pageviews``, ``bookmarks`` or ``services``.

    Table: analytics_daily
    """

    __tablename__ = "analytics_daily"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(max_length=10, index=True, description="YYYY-MM-DD")
    type: str = Field(max_length=32)
    item_id: Optional[int] = Field(default=None)
    country: Optional[str] = Field(default=None, max_length=2)
    count: int = Field(default=0)
    unique_visitors: int = Field(default=0)
