"""
Tests for local window selection.

Covers the window size rule k = floor(span * n), the tie-break between
equidistant samples, rejection of bad spans and centers, and how the
window grows with the span.
"""
import numpy as np
import pytest
from local_smooth import (Series, InvalidParameter, select_window, window_size,
                          simulate_ring_widths)

@pytest.fixture
def years():
    x = np.arange(1400.0, 1790.0)
    return Series(x, np.ones_like(x))

@pytest.mark.parametrize("span,k", [(0.1, 39), (0.25, 97), (0.5, 195), (1.0, 390)])
def test_window_size(years, span, k):
    assert window_size(years.n, span) == k
    for center in [1400.0, 1500.0, 1600.0, 1789.0]:
        window = select_window(years, center, span)
        assert window.size == k

def test_window_size_rounding():
    # 0.29 * 100 is 28.999999999999996 in floating point
    assert window_size(100, 0.29) == 29
    assert window_size(10, 0.35) == 3

@pytest.mark.parametrize("span", [0.0, -0.1, 1.5, np.nan, 0.1])
def test_invalid_span(span):
    with pytest.raises(InvalidParameter):
        window_size(10, span)

def test_center_must_be_in_series(years):
    with pytest.raises(InvalidParameter, match="not an x value"):
        select_window(years, 1500.5, 0.1)
    with pytest.raises(InvalidParameter):
        select_window(years, 1300.0, 0.1)

def test_window_members_and_order(years):
    window = select_window(years, 1500.0, 0.1)
    np.testing.assert_array_equal(window.x, np.arange(1481.0, 1520.0))
    np.testing.assert_array_equal(window.distance, np.abs(window.x - 1500.0))
    assert window.max_dist == 19.0
    assert np.all(np.diff(window.index) > 0)

def test_tie_break_keeps_earlier_sample():
    series = Series(np.arange(10.0), np.zeros(10))
    # k = 2: samples 4 and 6 are both one away from 5
    window = select_window(series, 5.0, 0.2)
    np.testing.assert_array_equal(window.x, [4.0, 5.0])
    # k = 4: 3 and 7 tie at distance two
    window = select_window(series, 5.0, 0.4)
    np.testing.assert_array_equal(window.x, [3.0, 4.0, 5.0, 6.0])

def test_window_at_boundary():
    series = Series(np.arange(10.0), np.zeros(10))
    window = select_window(series, 0.0, 0.3)
    np.testing.assert_array_equal(window.x, [0.0, 1.0, 2.0])
    window = select_window(series, 9.0, 0.3)
    np.testing.assert_array_equal(window.x, [7.0, 8.0, 9.0])

def test_window_on_uneven_spacing():
    series = Series([0.0, 1.0, 1.5, 4.0, 10.0], np.zeros(5))
    window = select_window(series, 4.0, 0.6)
    np.testing.assert_array_equal(window.x, [1.0, 1.5, 4.0])
    np.testing.assert_array_equal(window.distance, [3.0, 2.5, 0.0])

def test_span_sweep_is_monotone():
    series = simulate_ring_widths(n_years=137, seed=1)
    spans = np.linspace(0.02, 1.0, 50)
    sizes = [window_size(series.n, s) for s in spans]
    assert np.all(np.diff(sizes) >= 0)
    for small, large in zip(spans[:-1], spans[1:]):
        w_small = select_window(series, series.x[60], small)
        w_large = select_window(series, series.x[60], large)
        assert w_small.size <= w_large.size
        assert set(w_small.index) <= set(w_large.index)
