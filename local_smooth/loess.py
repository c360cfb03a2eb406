from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
import logging

import numpy as np
from scipy.stats import rankdata

from .base import (Series,
                   LocalWindow,
                   FittedModel,
                   Prediction,
                   WindowDetail,
                   FitFailure,
                   SmoothResult)
from .config import settings
from .errors import InvalidParameter, DegenerateWindow, SingularFit

logger = logging.getLogger(__name__)

# guards floor(span * n) against products like 0.29 * 100 = 28.999...
_SPAN_EPS = 1e-10


def window_size(n, span):
    """
    Number of points in every local window.

    Parameters
    ----------
    n : int
        Number of samples in the series.
    span : float
        Fraction of the samples used per window, in (0, 1].

    Returns
    -------
    int
        k = floor(span * n).

    Raises
    ------
    InvalidParameter
        If span is outside (0, 1] or k < 2.
    """
    if not 0 < span <= 1:
        raise InvalidParameter(f"Span must lie in (0, 1], got {span}.")
    k = int(np.floor(span * n + _SPAN_EPS))
    if k < 2:
        raise InvalidParameter(
            f"Span {span} over {n} samples gives a window of {k} points, at least 2 are needed.")
    return k


def select_window(series, center, span):
    """
    Select the k samples closest to `center`.

    Samples are ranked by ascending distance to the center; equidistant
    samples are ranked in series order, so on a tie at the cutoff the
    earlier sample is kept.

    Parameters
    ----------
    series : Series
        The data.
    center : float
        One of the series' x values.
    span : float
        Fraction of the samples used per window.

    Returns
    -------
    LocalWindow
        Members in series order, annotated with their distance to the center.
    """
    k = window_size(series.n, span)
    series.index_of(center)

    distance = np.abs(series.x - center)
    rank = rankdata(distance, method="ordinal")
    index = np.flatnonzero(rank <= k)
    return LocalWindow(center=float(center),
                       span=span,
                       index=index,
                       x=series.x[index],
                       y=series.y[index],
                       distance=distance[index])


def tricube(u):
    """
    Tricube kernel (1 - u^3)^3, clipped to [0, 1].
    """
    u = np.abs(np.asarray(u, dtype=float))
    return np.clip((1 - u**3)**3, 0, 1)


def compute_weights(window):
    """
    Tricube weights of the window members, scaled by the window's radius.

    Returns a copy of `window` with `weight` filled in: 1 at the center,
    0 at the farthest member(s).
    """
    max_dist = window.max_dist
    if max_dist <= 0:
        raise DegenerateWindow(
            f"Window around {window.center} has zero radius ({window.size} members).")
    return replace(window, weight=tricube(window.distance / max_dist))


def weighted_linear_fit(window, rtol=None):
    """
    Weighted least squares line through the window members.

    Minimizes sum(w * (y - a - b * x)**2) through the 2x2 normal equations,
    solved in coordinates centered on the window's center.

    When every member with positive weight shares one x value (for instance
    k = 2, where the far member has weight 0) the normal equations are
    singular. The fit then takes the limit of vanishing zero weights: the
    line is pinned through the weighted point and its slope is the least
    squares slope of the remaining members about it.

    Parameters
    ----------
    window : LocalWindow
        Window to fit. Weights are computed first if missing.
    rtol : float, optional
        Relative threshold below which the normal equations' determinant
        counts as zero. Defaults to `settings.singular_rtol`.

    Returns
    -------
    FittedModel
        Intercept and slope in the original x coordinates.
    """
    if window.weight is None:
        window = compute_weights(window)
    if rtol is None:
        rtol = settings.singular_rtol

    w = window.weight
    dx = window.x - window.center
    y = window.y

    active = w > 0
    if not np.any(active):
        raise SingularFit(f"No member of the window around {window.center} has positive weight.")
    if np.ptp(dx[active]) == 0:
        return _pinned_fit(window, dx, active)

    W = w.sum()
    Sx = np.sum(w * dx)
    Sy = np.sum(w * y)
    Sxx = np.sum(w * dx * dx)
    Sxy = np.sum(w * dx * y)

    det = W * Sxx - Sx**2
    if det <= rtol * W * Sxx:
        raise SingularFit(
            f"Weighted normal equations around {window.center} are singular (det={det:g}).")

    slope = (W * Sxy - Sx * Sy) / det
    level = (Sy - slope * Sx) / W
    return FittedModel(intercept=level - slope * window.center,
                       slope=slope,
                       center=window.center)


def _pinned_fit(window, dx, active):
    x0 = dx[active][0]
    y0 = np.average(window.y[active], weights=window.weight[active])

    off = dx != x0
    if not np.any(off):
        raise SingularFit(f"All members of the window around {window.center} share one x value.")
    d = dx[off] - x0
    slope = np.sum(d * (window.y[off] - y0)) / np.sum(d * d)

    logger.debug("Pinned fit at center %s: one weighted x value in a window of %d",
                 window.center, window.size)
    return FittedModel(intercept=y0 - slope * (x0 + window.center),
                       slope=slope,
                       center=window.center,
                       pinned=True)


def predict_at(model, x):
    """
    Evaluate the local line at `x`.
    """
    return model.intercept + model.slope * x


def _fit_unit(series, span, center, rtol, details):
    window = compute_weights(select_window(series, center, span))
    rows = []
    if details:
        rows = [WindowDetail(span=span,
                             center=window.center,
                             x=float(xi),
                             y=float(yi),
                             distance=float(di),
                             weight=float(wi))
                for xi, yi, di, wi in zip(window.x, window.y, window.distance, window.weight)]
    try:
        model = weighted_linear_fit(window, rtol=rtol)
    except SingularFit as e:
        logger.warning("No fit for span=%s center=%s: %s", span, window.center, e)
        return None, None, rows, FitFailure(span=span, center=window.center, reason=str(e))

    yhat = float(predict_at(model, window.center))
    logger.debug("span=%s center=%s k=%d yhat=%.6g", span, window.center, window.size, yhat)
    return Prediction(span=span, center=window.center, yhat=yhat), model, rows, None


def smooth(series, spans=None, n_jobs=None, details=True, rtol=None):
    """
    LOESS fit of `series` at every one of its x values, for each span.

    Each (span, center) pair is an independent unit: select the window,
    weight it, fit the local line and evaluate it at the center.

    Parameters
    ----------
    series : Series
        The data.
    spans : float or sequence of float, optional
        Spans to fit. Defaults to `settings.spans`.
    n_jobs : int, optional
        Number of worker threads. Defaults to `settings.n_jobs`.
    details : bool, optional
        Whether to collect the per-window point/weight table. Default is True.
    rtol : float, optional
        Singularity threshold passed to `weighted_linear_fit`.

    Returns
    -------
    SmoothResult
        Predictions ordered by (span, center), with singular fits reported
        in `failures` instead of `predictions`.

    Raises
    ------
    InvalidParameter
        If any span is invalid for the series; nothing is computed.
    """
    if not isinstance(series, Series):
        raise InvalidParameter(f"Expected a Series, got {type(series).__name__}.")
    if spans is None:
        spans = settings.spans
    spans = tuple(dict.fromkeys(float(s) for s in np.atleast_1d(spans)))
    if not spans:
        raise InvalidParameter("At least one span is required.")
    for span in spans:
        window_size(series.n, span)
    if n_jobs is None:
        n_jobs = settings.n_jobs

    tasks = [(span, float(c)) for span in spans for c in series.x]
    logger.info("Smoothing %d samples at %d span(s): %d local fits on %d worker(s)",
                series.n, len(spans), len(tasks), max(n_jobs, 1))

    def run(task):
        span, center = task
        return _fit_unit(series, span, center, rtol, details)

    if n_jobs > 1:
        with ThreadPoolExecutor(max_workers=n_jobs) as pool:
            units = list(pool.map(run, tasks))
    else:
        units = [run(task) for task in tasks]

    result = SmoothResult(series=series, spans=spans,
                          models={span: {} for span in spans})
    for (span, center), (pred, model, rows, failure) in zip(tasks, units):
        result.details.extend(rows)
        if failure is not None:
            result.failures.append(failure)
            continue
        result.predictions.append(pred)
        result.models[span][center] = model

    logger.info("Finished %d local fits, %d failed", len(tasks), len(result.failures))
    return result


@dataclass
class LoessSmoother:
    """
    Single-span LOESS smoother with a degree 1 local fit.

    Parameters
    ----------
    x : np.ndarray
        The predictor variable, strictly increasing.
    span : float, optional
        The smoothing parameter (fraction of points per local window). Default is 0.75.
    """

    x: np.ndarray
    span: float = 0.75

    y: np.ndarray = field(init=False, default=None)
    fitted_: np.ndarray = field(init=False, default=None, repr=False)
    models_: dict = field(init=False, default=None, repr=False)
    failures_: list = field(init=False, default=None, repr=False)
    _series: Series = field(init=False, default=None, repr=False)

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=float)
        window_size(len(self.x), self.span)

    def smooth(self, y, n_jobs=None):
        """
        Fit the local lines at every x.

        Parameters
        ----------
        y : np.ndarray
            Response variable.
        n_jobs : int, optional
            Number of worker threads.
        """
        self.y = np.asarray(y, dtype=float)
        self._series = Series(self.x, self.y)
        result = smooth(self._series, self.span, n_jobs=n_jobs, details=False)
        self.fitted_ = result.fitted(self.span)
        self.models_ = result.models[self.span]
        self.failures_ = result.failures
        return self

    def predict(self, x_new):
        """
        Fitted values at points of the original x.

        Parameters
        ----------
        x_new : np.ndarray
            Values drawn from `x`.

        Returns
        -------
        np.ndarray
            The fitted response, NaN where the local fit failed.
        """
        if self.y is None:
            raise ValueError("Model has not been fitted yet. Call smooth(y) first.")
        x_new = np.atleast_1d(x_new).astype(float)
        return np.array([self.fitted_[self._series.index_of(v)] for v in x_new])

    def window(self, center):
        """
        The weighted local window used for the fit at `center`.
        """
        if self._series is None:
            raise ValueError("Model has not been fitted yet. Call smooth(y) first.")
        return compute_weights(select_window(self._series, center, self.span))
