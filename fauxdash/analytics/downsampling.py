"""
Largest-Triangle-Three-Buckets downsampling.

Reduces a time series to a fixed number of points while keeping its visual
shape: the first and last points are always kept, and from every bucket in
between the point forming the largest triangle with the previously kept point
and the average of the next bucket is chosen.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence, Tuple

Point = Tuple[float, float]


def lttb_indices(points: Sequence[Point], threshold: int) -> List[int]:
    """Indices of the points LTTB keeps.

    Args:
        points: (x, y) pairs ordered by x
        threshold: Desired number of points

    Returns:
        Sorted indices into ``points``
    """
    length = len(points)
    if length <= threshold:
        return list(range(length))
    if threshold < 3:
        return [0, length - 1]

    kept = [0]
    bucket_size = (length - 2) / (threshold - 2)
    a = 0

    for i in range(threshold - 2):
        avg_start = math.floor((i + 1) * bucket_size) + 1
        avg_end = min(math.floor((i + 2) * bucket_size) + 1, length - 1)

        avg_x = avg_y = 0.0
        avg_count = avg_end - avg_start
        for j in range(avg_start, avg_end):
            avg_x += points[j][0]
            avg_y += points[j][1]
        if avg_count > 0:
            avg_x /= avg_count
            avg_y /= avg_count

        range_start = math.floor(i * bucket_size) + 1
        range_end = min(math.floor((i + 1) * bucket_size) + 1, length)

        ax, ay = points[a]
        max_area = -1.0
        max_index = range_start
        for j in range(range_start, range_end):
            area = abs((ax - avg_x) * (points[j][1] - ay) - (ax - points[j][0]) * (avg_y - ay))
            if area > max_area:
                max_area = area
                max_index = j

        kept.append(max_index)
        a = max_index

    kept.append(length - 1)
    return kept


def lttb_downsample(points: Sequence[Point], threshold: int) -> List[Point]:
    """Downsample (x, y) points to at most ``threshold`` points."""
    if len(points) <= threshold:
        return list(points)
    return [points[i] for i in lttb_indices(points, threshold)]


def downsample_date_data(data: Sequence[Dict[str, Any]], threshold: int) -> List[Dict[str, Any]]:
    """Downsample ``[{"date": ..., "count": n}, ...]`` using index as x and count as y.

    Args:
        data: Rows ordered by date
        threshold: Maximum number of rows to keep

    Returns:
        The kept rows, unchanged and in order
    """
    if len(data) <= threshold:
        return list(data)
    points = [(float(index), float(row["count"])) for index, row in enumerate(data)]
    return [data[i] for i in lttb_indices(points, threshold)]
