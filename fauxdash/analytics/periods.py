"""
Reporting windows, trends and date bucketing used by the analytics endpoints.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Tuple

PERIOD_LENGTHS = {
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


def period_start(period: str, now: datetime) -> Optional[datetime]:
    """Start of the window ending at ``now``; None for ``all``."""
    if period == "all":
        return None
    return now - PERIOD_LENGTHS.get(period, PERIOD_LENGTHS["week"])


def period_windows(period: str, now: datetime) -> Tuple[Tuple[datetime, datetime], Tuple[datetime, datetime]]:
    """Current window and the equally long window right before it.

    Returns:
        ((current_start, now), (previous_start, current_start))
    """
    length = PERIOD_LENGTHS.get(period, PERIOD_LENGTHS["week"])
    current_start = now - length
    return (current_start, now), (current_start - length, current_start)


def calculate_trend(current: int, previous: int) -> int:
    """Percentage change from ``previous`` to ``current``, rounded.

    A rise from zero counts as 100, no activity at all as 0.
    """
    if previous > 0:
        return round((current - previous) / previous * 100)
    return 100 if current > 0 else 0


def day_of_week(moment: datetime) -> int:
    """Weekday number with Sunday = 0."""
    return (moment.weekday() + 1) % 7


def bucket_label(moment: datetime, group_by: str) -> str:
    """Label of the bucket a timestamp falls into.

    hour ``YYYY-MM-DD HH:00``, day ``YYYY-MM-DD``, week ``YYYY-Www`` (ISO week),
    month ``YYYY-MM``.
    """
    if group_by == "hour":
        return moment.strftime("%Y-%m-%d %H:00")
    if group_by == "week":
        iso_year, iso_week, _ = moment.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if group_by == "month":
        return moment.strftime("%Y-%m")
    return moment.strftime("%Y-%m-%d")


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
