"""
Conformance tests against statsmodels' lowess.

With no robustness iterations the library smoother is a degree 1 local
fit with tricube weights over the floor(span * n) nearest neighbours,
so both implementations should agree to rounding error.
"""
import numpy as np
import pytest
from local_smooth import simulate_ring_widths, smooth
from local_smooth.reference import compare_to_reference, reference_smooth

@pytest.fixture
def ring_widths():
    # 390 years, the length of a classic ring-width record
    return simulate_ring_widths(start_year=1400, n_years=390, seed=0)

def test_matches_reference_at_1500(ring_widths):
    table = compare_to_reference(ring_widths, 0.1, atol=1e-3)
    row = table.loc[table.center == 1500.0]
    assert len(row) == 1
    assert row.within_tol.item()
    assert row.abs_diff.item() < 1e-3

@pytest.mark.parametrize("span", [0.1, 0.3, 0.75])
def test_matches_reference_everywhere(ring_widths, span):
    ours = smooth(ring_widths, span, details=False).fitted(span)
    ref = reference_smooth(ring_widths, span)
    np.testing.assert_allclose(ours, ref, atol=1e-6)

def test_comparison_table(ring_widths):
    table = compare_to_reference(ring_widths, 0.25)
    assert list(table.columns) == ["center", "loess", "reference", "abs_diff", "within_tol"]
    assert len(table) == ring_widths.n
    assert table.within_tol.all()
