"""
Admin analytics endpoints.

Summary cards, click time series, top items, activity heatmap, visitor
geography, favicon storage and the daily rollup job. Every route requires an administrator.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.core.database import get_session, utc_now
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import (
    ClicksResponse,
    FaviconStatsResponse,
    GeoResponse,
    HeatmapResponse,
    RollupResponse,
    StatsResponse,
    SummaryResponse,
    TopItemsResponse,
)
from fauxdash.core.models.io.analytics import (
    ClicksPeriod,
    ClickType,
    GeoLevel,
    GeoPeriod,
    GroupBy,
    HeatmapPeriod,
    HeatmapType,
    ItemType,
    StatsPeriod,
)
from fauxdash.favicons import favicon_stats
from fauxdash.server.api.v1.favicons import get_favicon_dir
from fauxdash.server.security.deps import require_admin
from fauxdash.server.services.analytics_service import AnalyticsService

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def get_analytics_service(session: AsyncSession = Depends(get_session)) -> AnalyticsService:
    return AnalyticsService(session)


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Overview Statistics",
    description="Pageviews, unique visitors and clicks for the period, with the change against the previous period.",
    response_description="Values with trend percentages and the top country.",
)
async def get_stats(
    period: StatsPeriod = Query("week"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> StatsResponse:
    return await service.stats(period, utc_now())


@router.get(
    "/clicks",
    response_model=ClicksResponse,
    summary="Clicks Over Time",
    description="Click counts bucketed by hour, day, ISO week or month, downsampled for charting.",
    response_description="Chart labels and one dataset per item type.",
)
async def get_clicks(
    period: ClicksPeriod = Query("week"),
    type: ClickType = Query("all"),
    group_by: GroupBy = Query("day"),
    downsample: int = Query(150, ge=50, le=500),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
) -> ClicksResponse:
    """
    Click time series.

    - **period**: Window used when no start_date is given.
    - **type**: bookmarks, services or all.
    - **group_by**: hour, day, week or month.
    - **downsample**: Maximum points per dataset (50-500).
    - **start_date** / **end_date**: Optional inclusive day range.
    """
    return await service.clicks(period, type, group_by, downsample, utc_now(), start_date, end_date)


@router.get(
    "/top-items",
    response_model=TopItemsResponse,
    summary="Top Items",
    description="Most clicked bookmarks or services in the period, with the change against the previous period.",
    response_description="Ranked items.",
)
async def get_top_items(
    type: ItemType = Query(...),
    period: ClicksPeriod = Query("week"),
    limit: int = Query(10, ge=1, le=100),
    service: AnalyticsService = Depends(get_analytics_service),
) -> TopItemsResponse:
    return await service.top_items(type, period, limit, utc_now())


@router.get(
    "/heatmap",
    response_model=HeatmapResponse,
    summary="Activity Heatmap",
    description="Activity per weekday (Sunday = 0) and hour as a full 7x24 grid.",
    response_description="Heatmap cells and the largest cell value.",
)
async def get_heatmap(
    period: HeatmapPeriod = Query("month"),
    type: HeatmapType = Query("all"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> HeatmapResponse:
    return await service.heatmap(period, type, utc_now())


@router.get(
    "/geo",
    response_model=GeoResponse,
    summary="Visitor Geography",
    description="Pageviews grouped by country or city, with average coordinates.",
    response_description="Locations in descending count order.",
)
async def get_geo(
    period: GeoPeriod = Query("month"),
    level: GeoLevel = Query("country"),
    limit: int = Query(100, ge=1, le=1000),
    service: AnalyticsService = Depends(get_analytics_service),
) -> GeoResponse:
    return await service.geo(period, level, limit, utc_now())


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Activity Summary",
    description="Pageview and click counts for today, the last 24 hours, the last week and the last month.",
    response_description="Counts per window.",
)
async def get_summary(service: AnalyticsService = Depends(get_analytics_service)) -> SummaryResponse:
    return await service.summary(utc_now())


@router.post(
    "/rollup",
    response_model=RollupResponse,
    summary="Daily Rollup",
    description="Aggregate one day into the daily analytics table, replacing any earlier rollup of that day.",
    response_description="The aggregated day and the number of rows written.",
)
async def run_rollup(
    day: Optional[date] = Query(None, alias="date", description="Day to aggregate, defaults to yesterday (UTC)"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> RollupResponse:
    target = day or (utc_now() - timedelta(days=1)).date()
    rows = await service.rollup(target)
    return RollupResponse(date=target.isoformat(), rows=rows)


@router.get(
    "/favicon-stats",
    response_model=FaviconStatsResponse,
    summary="Favicon Storage",
    description="Files and disk usage of the favicon directory, split into downloaded originals and derived variants.",
    response_description="Totals, a per-variant breakdown and the five newest files.",
)
async def get_favicon_stats(directory: Path = Depends(get_favicon_dir)) -> FaviconStatsResponse:
    stats = await asyncio.to_thread(favicon_stats, directory)
    return FaviconStatsResponse(**stats.to_dict())
