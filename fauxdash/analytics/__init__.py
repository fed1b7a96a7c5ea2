"""
Analytics helpers: reporting windows, trend arithmetic and LTTB downsampling.
"""

from .downsampling import downsample_date_data, lttb_downsample, lttb_indices
from .periods import (
    PERIOD_LENGTHS,
    bucket_label,
    calculate_trend,
    day_of_week,
    period_start,
    period_windows,
    start_of_day,
)

__all__ = [
    "PERIOD_LENGTHS",
    "bucket_label",
    "calculate_trend",
    "day_of_week",
    "downsample_date_data",
    "lttb_downsample",
    "lttb_indices",
    "period_start",
    "period_windows",
    "start_of_day",
]
