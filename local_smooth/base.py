from dataclasses import asdict, dataclass, field
import numpy as np
import pandas as pd

from .errors import InvalidParameter

@dataclass
class Series:
    """
    An ordered sequence of (x, y) samples with unique x values.

    Parameters
    ----------
    x : np.ndarray
        The predictor, e.g. calendar years. Must be strictly increasing.
    y : np.ndarray
        The response, e.g. ring widths.
    """
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=float)
        self.y = np.asarray(self.y, dtype=float)
        if self.x.ndim != 1 or self.y.ndim != 1:
            raise InvalidParameter("x and y must be one dimensional.")
        if len(self.x) == 0:
            raise InvalidParameter("Series must contain at least one sample.")
        if len(self.x) != len(self.y):
            raise InvalidParameter(
                f"x and y differ in length ({len(self.x)} != {len(self.y)}).")
        if not (np.all(np.isfinite(self.x)) and np.all(np.isfinite(self.y))):
            raise InvalidParameter("Series values must be finite.")
        if np.any(np.diff(self.x) <= 0):
            raise InvalidParameter("x values must be unique and increasing.")

    @classmethod
    def from_pairs(cls, pairs):
        pairs = list(pairs)
        if not pairs:
            raise InvalidParameter("Series must contain at least one sample.")
        x, y = zip(*pairs)
        return cls(np.array(x), np.array(y))

    @property
    def n(self):
        return len(self.x)

    def index_of(self, center):
        """
        Position of `center` among the series' x values.

        Raises
        ------
        InvalidParameter
            If `center` is not one of the x values.
        """
        i = int(np.searchsorted(self.x, center))
        if i >= self.n or self.x[i] != center:
            raise InvalidParameter(f"Center {center} is not an x value of the series.")
        return i

    def to_frame(self, x_column="x", y_column="y"):
        return pd.DataFrame({x_column: self.x, y_column: self.y})


@dataclass
class LocalWindow:
    """
    The k samples nearest to a center, kept in series order.

    `weight` is None until `compute_weights` fills it in.
    """
    center: float
    span: float
    index: np.ndarray
    x: np.ndarray
    y: np.ndarray
    distance: np.ndarray
    weight: np.ndarray = None

    @property
    def size(self):
        return len(self.index)

    @property
    def max_dist(self):
        return float(self.distance.max())


@dataclass(frozen=True)
class FittedModel:
    """
    The local line y = intercept + slope * x.

    `pinned` marks a fit taken in the zero-weight limit, where only one
    x value carried positive weight and the line was pinned through it.
    """
    intercept: float
    slope: float
    center: float
    pinned: bool = False

    def predict(self, x):
        return self.intercept + self.slope * np.asarray(x, dtype=float)


@dataclass(frozen=True)
class Prediction:
    span: float
    center: float
    yhat: float


@dataclass(frozen=True)
class WindowDetail:
    """
    One member of one local window: which sample was used and how much it counted.
    """
    span: float
    center: float
    x: float
    y: float
    distance: float
    weight: float


@dataclass(frozen=True)
class FitFailure:
    span: float
    center: float
    reason: str


@dataclass
class SmoothResult:
    """
    Output of `smooth` for one series and a set of spans.

    Holes are possible: a (span, center) pair whose fit failed has no
    entry in `predictions` and one in `failures` instead.
    """
    series: Series
    spans: tuple
    predictions: list = field(default_factory=list)
    details: list = field(default_factory=list)
    models: dict = field(default_factory=dict)
    failures: list = field(default_factory=list)

    def fitted(self, span):
        """
        Fitted values for one span, aligned with the series.

        Parameters
        ----------
        span : float
            One of the spans the result was computed for.

        Returns
        -------
        np.ndarray
            Predicted values, NaN where the fit failed.
        """
        if span not in self.spans:
            raise KeyError(f"No fit was computed for span {span}.")
        out = np.full(self.series.n, np.nan)
        for pred in self.predictions:
            if pred.span == span:
                out[self.series.index_of(pred.center)] = pred.yhat
        return out

    def predictions_frame(self):
        rows = []
        for pred in self.predictions:
            model = self.models[pred.span][pred.center]
            rows.append({"span": pred.span,
                         "center": pred.center,
                         "yhat": pred.yhat,
                         "intercept": model.intercept,
                         "slope": model.slope})
        return pd.DataFrame(rows, columns=["span", "center", "yhat", "intercept", "slope"])

    def details_frame(self):
        return pd.DataFrame([asdict(d) for d in self.details],
                            columns=["span", "center", "x", "y", "distance", "weight"])
