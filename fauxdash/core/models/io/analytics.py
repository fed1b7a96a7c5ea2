"""
Analytics I/O models.

Request parameters are validated with FastAPI ``Query`` types in the router;
these models describe the response documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

StatsPeriod = Literal["hour", "day", "week", "month", "year"]
ClicksPeriod = Literal["day", "week", "month", "year"]
GeoPeriod = Literal["day", "week", "month", "year", "all"]
HeatmapPeriod = Literal["week", "month", "year"]
ClickType = Literal["bookmarks", "services", "all"]
ItemType = Literal["bookmarks", "services"]
HeatmapType = Literal["bookmarks", "services", "pageviews", "all"]
GroupBy = Literal["hour", "day", "week", "month"]
GeoLevel = Literal["country", "city"]


class PageviewCreate(BaseModel):
    path: str = Field(min_length=1, max_length=2048, description="Visited path")


class TrendValue(BaseModel):
    value: int
    trend: int = Field(description="Percentage change against the previous window")


class TopCountry(BaseModel):
    name: str
    count: int


class StatsResponse(BaseModel):
    pageviews: TrendValue
    unique_visitors: TrendValue
    total_clicks: TrendValue
    top_country: TopCountry
    period: str


class ClicksDataset(BaseModel):
    label: str
    data: List[int]


class ClicksResponse(BaseModel):
    labels: List[str]
    datasets: List[ClicksDataset]
    period: str
    group_by: str


class TopItem(BaseModel):
    id: int
    name: str
    clicks: int
    trend: int


class TopItemsResponse(BaseModel):
    items: List[TopItem]
    type: str
    period: str


class HeatmapCell(BaseModel):
    day_of_week: int = Field(description="0 = Sunday")
    hour: int
    value: int


class HeatmapResponse(BaseModel):
    data: List[HeatmapCell]
    max_value: int
    period: str
    type: str


class GeoLocationCount(BaseModel):
    country: str
    country_name: str
    city: Optional[str] = None
    region: Optional[str] = None
    count: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GeoResponse(BaseModel):
    locations: List[GeoLocationCount]
    total: int
    level: str
    period: str


class SummaryWindow(BaseModel):
    pageviews: int
    bookmark_clicks: int
    service_clicks: int


class SummaryResponse(BaseModel):
    today: SummaryWindow
    last_24h: SummaryWindow
    last_week: SummaryWindow
    last_month: SummaryWindow


class RollupResponse(BaseModel):
    date: str
    rows: int


class FaviconFileGroup(BaseModel):
    type: str
    count: int
    size: int
    size_formatted: str


class FaviconFile(BaseModel):
    name: str
    size: int
    modified: datetime


class FaviconStatsResponse(BaseModel):
    total_files: int
    total_size: int
    total_size_formatted: str
    original_count: int
    original_size: int
    modified_count: int
    modified_size: int
    breakdown: List[FaviconFileGroup]
    recent_files: List[FaviconFile]
