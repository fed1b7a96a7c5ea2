"""
Analytics repository.

Aggregate queries over pageviews and click events. Only portable SQL is used
(COUNT, COUNT DISTINCT, AVG, GROUP BY on stored columns); anything that needs
calendar arithmetic is bucketed in Python by the analytics service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import and_, desc, func
from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.analytics import AnalyticsDaily, BookmarkClick, Pageview, ServiceClick
from ..entities.items import Bookmark, Service
from .base import SQLModelRepository

CLICK_SOURCES: Dict[str, Tuple[type, type, str]] = {
    "bookmarks": (Bookmark, BookmarkClick, "bookmark_id"),
    "services": (Service, ServiceClick, "service_id"),
}


def _window(column, start: Optional[datetime], end: Optional[datetime]):
    clauses = []
    if start is not None:
        clauses.append(column >= start)
    if end is not None:
        clauses.append(column < end)
    return and_(True, *clauses)


class AnalyticsRepository(SQLModelRepository[Pageview]):
    """Repository for pageviews, click events and daily rollups."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Pageview)

    # ------------------------------------------------------------------
    # Pageviews
    # ------------------------------------------------------------------

    async def count_pageviews(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        stmt = select(func.count(Pageview.id)).where(_window(Pageview.timestamp, start, end))
        result = await self.session.execute(stmt)
        return int(result.scalar_one() or 0)

    async def count_unique_visitors(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        stmt = select(func.count(func.distinct(Pageview.ip_hash))).where(
            _window(Pageview.timestamp, start, end)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one() or 0)

    async def top_country(self, start: Optional[datetime] = None) -> Optional[Tuple[str, int]]:
        """Most frequent country (display name) among pageviews since ``start``."""
        count_col = func.count(Pageview.id).label("cnt")
        stmt = (
            select(Pageview.country_name, count_col)
            .where(_window(Pageview.timestamp, start, None) & Pageview.country_name.is_not(None))
            .group_by(Pageview.country_name)
            .order_by(desc(count_col))
            .limit(1)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return row[0], int(row[1])

    async def pageview_timestamps(self, start: Optional[datetime] = None) -> List[datetime]:
        stmt = select(Pageview.timestamp).where(_window(Pageview.timestamp, start, None))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def geo_by_country(self, start: Optional[datetime], limit: int) -> List[Dict[str, Any]]:
        count_col = func.count(Pageview.id).label("cnt")
        stmt = (
            select(
                Pageview.country,
                func.max(Pageview.country_name),
                count_col,
                func.avg(Pageview.latitude),
                func.avg(Pageview.longitude),
            )
            .where(_window(Pageview.timestamp, start, None) & Pageview.country.is_not(None))
            .group_by(Pageview.country)
            .order_by(desc(count_col))
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        return [
            {
                "country": row[0],
                "country_name": row[1] or row[0],
                "count": int(row[2]),
                "latitude": float(row[3]) if row[3] is not None else None,
                "longitude": float(row[4]) if row[4] is not None else None,
            }
            for row in rows
        ]

    async def geo_by_city(self, start: Optional[datetime], limit: int) -> List[Dict[str, Any]]:
        count_col = func.count(Pageview.id).label("cnt")
        stmt = (
            select(
                Pageview.city,
                Pageview.region,
                Pageview.country,
                func.max(Pageview.country_name),
                count_col,
                func.avg(Pageview.latitude),
                func.avg(Pageview.longitude),
            )
            .where(
                _window(Pageview.timestamp, start, None)
                & Pageview.country.is_not(None)
                & Pageview.city.is_not(None)
            )
            .group_by(Pageview.city, Pageview.region, Pageview.country)
            .order_by(desc(count_col))
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        return [
            {
                "city": row[0],
                "region": row[1],
                "country": row[2],
                "country_name": row[3] or row[2],
                "count": int(row[4]),
                "latitude": float(row[5]) if row[5] is not None else None,
                "longitude": float(row[6]) if row[6] is not None else None,
            }
            for row in rows
        ]

    async def count_geolocated(self, start: Optional[datetime]) -> int:
        stmt = select(func.count(Pageview.id)).where(
            _window(Pageview.timestamp, start, None) & Pageview.country.is_not(None)
        )
        return int((await self.session.execute(stmt)).scalar_one() or 0)

    async def list_pageviews(self) -> List[Pageview]:
        result = await self.session.execute(select(Pageview).order_by(Pageview.id))
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Clicks
    # ------------------------------------------------------------------

    async def count_clicks(
        self, click_model: Type, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        stmt = select(func.count(click_model.id)).where(_window(click_model.clicked_at, start, end))
        return int((await self.session.execute(stmt)).scalar_one() or 0)

    async def click_timestamps(
        self, click_model: Type, start: Optional[datetime], end: Optional[datetime] = None
    ) -> List[datetime]:
        stmt = select(click_model.clicked_at).where(_window(click_model.clicked_at, start, end))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def click_grid(self, click_model: Type, start: Optional[datetime]) -> List[Tuple[int, int, int]]:
        """Click counts grouped by (day_of_week, hour_of_day)."""
        stmt = (
            select(click_model.day_of_week, click_model.hour_of_day, func.count(click_model.id))
            .where(_window(click_model.clicked_at, start, None))
            .group_by(click_model.day_of_week, click_model.hour_of_day)
        )
        rows = (await self.session.execute(stmt)).all()
        return [(int(row[0]), int(row[1]), int(row[2])) for row in rows]

    async def top_items(
        self, item_type: str, start: Optional[datetime], limit: int
    ) -> List[Tuple[int, str, int]]:
        """Items ranked by clicks inside the window, zero-click items included.

        Args:
            item_type: ``bookmarks`` or ``services``
            start: Window start
            limit: Maximum rows

        Returns:
            List of (id, name, clicks)
        """
        item_model, click_model, fk = CLICK_SOURCES[item_type]
        fk_col = getattr(click_model, fk)
        join_cond = fk_col == item_model.id
        if start is not None:
            join_cond = and_(join_cond, click_model.clicked_at >= start)
        clicks = func.count(click_model.id).label("clicks")
        stmt = (
            select(item_model.id, item_model.name, clicks)
            .select_from(item_model)
            .outerjoin(click_model, join_cond)
            .group_by(item_model.id, item_model.name)
            .order_by(desc(clicks), item_model.id)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        return [(int(row[0]), row[1], int(row[2])) for row in rows]

    async def clicks_per_item(
        self,
        item_type: str,
        item_ids: Optional[List[int]],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> Dict[int, int]:
        """Click counts per item id inside a window; ``item_ids=None`` means every item."""
        if item_ids is not None and not item_ids:
            return {}
        _, click_model, fk = CLICK_SOURCES[item_type]
        fk_col = getattr(click_model, fk)
        stmt = select(fk_col, func.count(click_model.id)).where(_window(click_model.clicked_at, start, end))
        if item_ids is not None:
            stmt = stmt.where(fk_col.in_(item_ids))
        stmt = stmt.group_by(fk_col)
        rows = (await self.session.execute(stmt)).all()
        return {int(row[0]): int(row[1]) for row in rows}

    async def list_clicks(self, click_model: Type) -> List[Any]:
        result = await self.session.execute(select(click_model).order_by(click_model.id))
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Daily rollups
    # ------------------------------------------------------------------

    async def pageview_rollup(self, start: datetime, end: datetime) -> List[Tuple[Optional[str], int, int]]:
        """Per-country pageview count and distinct visitors for one window."""
        stmt = (
            select(Pageview.country, func.count(Pageview.id), func.count(func.distinct(Pageview.ip_hash)))
            .where(_window(Pageview.timestamp, start, end))
            .group_by(Pageview.country)
        )
        rows = (await self.session.execute(stmt)).all()
        return [(row[0], int(row[1]), int(row[2])) for row in rows]

    async def replace_daily(self, date: str, rows: List[AnalyticsDaily]) -> int:
        await self.session.execute(sa_delete(AnalyticsDaily).where(AnalyticsDaily.date == date))
        self.session.add_all(rows)
        await self.session.commit()
        return len(rows)

    async def list_daily(self) -> List[AnalyticsDaily]:
        result = await self.session.execute(select(AnalyticsDaily).order_by(AnalyticsDaily.date, AnalyticsDaily.id))
        return list(result.scalars().all())

    async def delete_all(self) -> None:
        for model in (BookmarkClick, ServiceClick, Pageview, AnalyticsDaily):
            await self.session.execute(sa_delete(model))
        await self.session.commit()
