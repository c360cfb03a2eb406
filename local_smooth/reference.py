"""
Library LOWESS used as the yardstick for the hand-built smoother.

statsmodels' lowess with no robustness iterations and no interpolation
(``it=0, delta=0``) fits a degree 1 local line with tricube weights over
the ``floor(frac * n)`` nearest neighbours, which is the same estimator
as `local_smooth.loess.smooth`.
"""
import logging

import numpy as np
import pandas as pd
from statsmodels.nonparametric.smoothers_lowess import lowess

from .loess import smooth, window_size

logger = logging.getLogger(__name__)


def reference_smooth(series, span):
    """
    Fitted values from statsmodels' lowess, aligned with `series.x`.
    """
    window_size(series.n, span)
    return lowess(series.y, series.x,
                  frac=span,
                  it=0,
                  delta=0.0,
                  is_sorted=True,
                  return_sorted=False)


def compare_to_reference(series, span, atol=1e-3, n_jobs=None):
    """
    Compare the hand-built fit with the reference at every x.

    Parameters
    ----------
    series : Series
        The data.
    span : float
        Span used by both smoothers.
    atol : float, optional
        Tolerance used to flag disagreeing centers. Default is 1e-3.
    n_jobs : int, optional
        Worker threads for the hand-built fit.

    Returns
    -------
    pd.DataFrame
        Columns center, loess, reference, abs_diff and within_tol.
    """
    ours = smooth(series, span, n_jobs=n_jobs, details=False).fitted(span)
    ref = reference_smooth(series, span)
    diff = np.abs(ours - ref)
    table = pd.DataFrame({"center": series.x,
                          "loess": ours,
                          "reference": ref,
                          "abs_diff": diff,
                          "within_tol": diff <= atol})
    logger.info("span=%s: max |loess - reference| = %.3g over %d centers",
                span, np.nanmax(diff), series.n)
    return table
