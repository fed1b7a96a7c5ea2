import pytest

from fauxdash.analytics.downsampling import downsample_date_data, lttb_downsample, lttb_indices


def test_short_series_is_untouched():
    points = [(0.0, 1.0), (1.0, 2.0)]
    assert lttb_downsample(points, 5) == points
    assert lttb_indices(points, 2) == [0, 1]


def test_tiny_threshold_keeps_endpoints():
    points = [(float(i), float(i % 3)) for i in range(10)]
    assert lttb_indices(points, 2) == [0, 9]


def test_keeps_the_peak():
    ys = [0, 1, 0, 5, 0, 0, 0]
    points = [(float(i), float(y)) for i, y in enumerate(ys)]

    assert lttb_indices(points, 4) == [0, 2, 3, 6]


@pytest.mark.parametrize("threshold", [3, 10, 50])
def test_output_size_and_order(threshold):
    points = [(float(i), float((i * 37) % 11)) for i in range(200)]

    indices = lttb_indices(points, threshold)

    assert len(indices) == threshold
    assert indices == sorted(indices)
    assert indices[0] == 0 and indices[-1] == 199


def test_downsample_date_data_returns_original_rows():
    data = [{"date": f"2026-01-{day:02d}", "count": (day * 7) % 5} for day in range(1, 31)]

    result = downsample_date_data(data, 10)

    assert len(result) == 10
    assert result[0] is data[0]
    assert result[-1] is data[-1]
    assert all(row in data for row in result)
    assert downsample_date_data(data[:5], 10) == data[:5]
