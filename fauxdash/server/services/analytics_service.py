"""
Analytics Service.

Assembles the admin analytics documents from repository aggregates. Calendar
bucketing (hour, ISO week, month labels) and heatmap cells for pageviews are
computed here from timestamps so the SQL stays portable across SQLite and
PostgreSQL.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from fauxdash.analytics import (
    bucket_label,
    calculate_trend,
    day_of_week,
    downsample_date_data,
    period_start,
    period_windows,
    start_of_day,
)
from fauxdash.core.database.entities import AnalyticsDaily, BookmarkClick, ServiceClick
from fauxdash.core.database.repositories import AnalyticsRepository
from fauxdash.core.database.repositories.analytics import CLICK_SOURCES
from fauxdash.core.logging_config import get_logger
from fauxdash.core.models.io import (
    ClicksDataset,
    ClicksResponse,
    GeoLocationCount,
    GeoResponse,
    HeatmapCell,
    HeatmapResponse,
    StatsResponse,
    SummaryResponse,
    SummaryWindow,
    TopCountry,
    TopItem,
    TopItemsResponse,
    TrendValue,
)

logger = get_logger(__name__)

DATASET_LABELS = {"bookmarks": "Bookmark Clicks", "services": "Service Clicks"}


def _click_types(selected: str) -> List[str]:
    return ["bookmarks", "services"] if selected == "all" else [selected]


def _click_model(item_type: str):
    return CLICK_SOURCES[item_type][1]


def date_range(
    start_date: Optional[date], end_date: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive calendar dates to a half-open datetime window."""
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time.min) + timedelta(days=1) if end_date else None
    return start, end


def bucket_counts(timestamps: List[datetime], group_by: str) -> List[Dict[str, object]]:
    counts = Counter(bucket_label(ts, group_by) for ts in timestamps)
    return [{"date": label, "count": counts[label]} for label in sorted(counts)]


def align_datasets(series: Dict[str, List[Dict[str, object]]]) -> Tuple[List[str], List[ClicksDataset]]:
    """Put every series on the sorted union of labels, filling gaps with 0."""
    labels = sorted({row["date"] for rows in series.values() for row in rows})
    datasets = []
    for item_type, rows in series.items():
        by_label = {row["date"]: row["count"] for row in rows}
        datasets.append(
            ClicksDataset(label=DATASET_LABELS[item_type], data=[int(by_label.get(label, 0)) for label in labels])
        )
    return labels, datasets


class AnalyticsService:
    """Read-only analytics queries plus the daily rollup job."""

    def __init__(self, session: AsyncSession) -> None:
        self.repo = AnalyticsRepository(session)

    async def stats(self, period: str, now: datetime) -> StatsResponse:
        (current_start, current_end), (previous_start, previous_end) = period_windows(period, now)

        pageviews = await self.repo.count_pageviews(current_start, current_end)
        previous_pageviews = await self.repo.count_pageviews(previous_start, previous_end)
        visitors = await self.repo.count_unique_visitors(current_start, current_end)
        previous_visitors = await self.repo.count_unique_visitors(previous_start, previous_end)

        clicks = previous_clicks = 0
        for model in (BookmarkClick, ServiceClick):
            clicks += await self.repo.count_clicks(model, current_start, current_end)
            previous_clicks += await self.repo.count_clicks(model, previous_start, previous_end)

        top = await self.repo.top_country(current_start)
        top_country = TopCountry(name=top[0], count=top[1]) if top else TopCountry(name="Unknown", count=0)

        return StatsResponse(
            pageviews=TrendValue(value=pageviews, trend=calculate_trend(pageviews, previous_pageviews)),
            unique_visitors=TrendValue(value=visitors, trend=calculate_trend(visitors, previous_visitors)),
            total_clicks=TrendValue(value=clicks, trend=calculate_trend(clicks, previous_clicks)),
            top_country=top_country,
            period=period,
        )

    async def clicks(
        self,
        period: str,
        click_type: str,
        group_by: str,
        downsample: int,
        now: datetime,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ClicksResponse:
        """Click counts over time, one dataset per item type.

        Args:
            period: Window length when no explicit start date is given
            click_type: ``bookmarks``, ``services`` or ``all``
            group_by: Bucket size (hour, day, week, month)
            downsample: Maximum points per dataset
            now: Reference time
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)

        Returns:
            Labels and aligned datasets
        """
        start, end = date_range(start_date, end_date)
        if start is None:
            start = period_start(period, now)

        series = {}
        for item_type in _click_types(click_type):
            timestamps = await self.repo.click_timestamps(_click_model(item_type), start, end)
            series[item_type] = downsample_date_data(bucket_counts(timestamps, group_by), downsample)

        labels, datasets = align_datasets(series)
        return ClicksResponse(labels=labels, datasets=datasets, period=period, group_by=group_by)

    async def top_items(self, item_type: str, period: str, limit: int, now: datetime) -> TopItemsResponse:
        (current_start, _), (previous_start, previous_end) = period_windows(period, now)
        rows = await self.repo.top_items(item_type, current_start, limit)
        previous = await self.repo.clicks_per_item(item_type, [row[0] for row in rows], previous_start, previous_end)
        items = [
            TopItem(id=item_id, name=name, clicks=clicks, trend=calculate_trend(clicks, previous.get(item_id, 0)))
            for item_id, name, clicks in rows
        ]
        return TopItemsResponse(items=items, type=item_type, period=period)

    async def heatmap(self, period: str, heatmap_type: str, now: datetime) -> HeatmapResponse:
        """Activity per weekday and hour as a full 7x24 grid (Sunday = 0)."""
        start = period_start(period, now)
        grid: Counter = Counter()

        if heatmap_type in ("bookmarks", "services", "all"):
            for item_type in _click_types("all" if heatmap_type == "all" else heatmap_type):
                for dow, hour, count in await self.repo.click_grid(_click_model(item_type), start):
                    grid[(dow, hour)] += count

        if heatmap_type in ("pageviews", "all"):
            for ts in await self.repo.pageview_timestamps(start):
                grid[(day_of_week(ts), ts.hour)] += 1

        cells = [HeatmapCell(day_of_week=d, hour=h, value=grid[(d, h)]) for d in range(7) for h in range(24)]
        max_value = max([1, *grid.values()])
        return HeatmapResponse(data=cells, max_value=max_value, period=period, type=heatmap_type)

    async def geo(self, period: str, level: str, limit: int, now: datetime) -> GeoResponse:
        start = period_start(period, now)
        if level == "city":
            rows = await self.repo.geo_by_city(start, limit)
        else:
            rows = await self.repo.geo_by_country(start, limit)
        total = await self.repo.count_geolocated(start)
        return GeoResponse(
            locations=[GeoLocationCount(**row) for row in rows], total=total, level=level, period=period
        )

    async def summary(self, now: datetime) -> SummaryResponse:
        async def window(start: datetime) -> SummaryWindow:
            return SummaryWindow(
                pageviews=await self.repo.count_pageviews(start, None),
                bookmark_clicks=await self.repo.count_clicks(BookmarkClick, start, None),
                service_clicks=await self.repo.count_clicks(ServiceClick, start, None),
            )

        return SummaryResponse(
            today=await window(start_of_day(now)),
            last_24h=await window(now - timedelta(days=1)),
            last_week=await window(now - timedelta(days=7)),
            last_month=await window(now - timedelta(days=30)),
        )

    async def rollup(self, day: date) -> int:
        """Aggregate one calendar day into ``analytics_daily``, replacing earlier rows.

        Pageviews produce one row per country with count and unique visitors;
        clicks produce one row per item.

        Args:
            day: Day to aggregate (UTC)

        Returns:
            Number of rows written
        """
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        label = day.isoformat()

        rows = [
            AnalyticsDaily(date=label, type="pageviews", country=country, count=count, unique_visitors=unique)
            for country, count, unique in await self.repo.pageview_rollup(start, end)
        ]
        for item_type in ("bookmarks", "services"):
            for item_id, count in (await self.repo.clicks_per_item(item_type, None, start, end)).items():
                rows.append(AnalyticsDaily(date=label, type=item_type, item_id=item_id, count=count))

        written = await self.repo.replace_daily(label, rows)
        logger.info(f"Analytics rollup for {label}: {written} row(s)")
        return written
