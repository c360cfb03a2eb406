from pathlib import Path
import logging

import numpy as np
import pandas as pd

from .base import Series
from .config import settings
from .errors import InvalidParameter

logger = logging.getLogger(__name__)


def series_from_frame(df: pd.DataFrame, x_column: str = None, y_column: str = None) -> Series:
    """Build a Series from two columns, keeping only observed samples."""
    x_column = x_column or settings.x_column
    y_column = y_column or settings.y_column
    missing = [c for c in (x_column, y_column) if c not in df.columns]
    if missing:
        raise InvalidParameter(f"Missing column(s): {', '.join(missing)}")

    data = df[[x_column, y_column]].apply(pd.to_numeric, errors="coerce")
    n_before = len(data)
    data = data.dropna().sort_values(x_column).reset_index(drop=True)
    if len(data) < n_before:
        logger.info("Dropped %d unobserved sample(s)", n_before - len(data))

    dup = data[x_column].duplicated()
    if dup.any():
        raise InvalidParameter(
            f"Duplicated {x_column} values: {data.loc[dup, x_column].tolist()[:5]}")
    return Series(data[x_column].to_numpy(), data[y_column].to_numpy())


def load_series(path, x_column: str = None, y_column: str = None) -> Series:
    """Load a Series from a CSV file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    df = pd.read_csv(path)
    series = series_from_frame(df, x_column, y_column)
    logger.info("Loaded %d samples from %s", series.n, path)
    return series


def simulate_ring_widths(start_year: int = 1400,
                         n_years: int = 390,
                         seed: int = 0,
                         phi: float = 0.5,
                         noise: float = 0.25) -> Series:
    """
    Synthetic tree-ring width record in millimetres.

    A negative exponential growth trend (wide juvenile rings narrowing with
    age) multiplied by lognormal AR(1) noise.

    Parameters
    ----------
    start_year : int
        Year of the first ring.
    n_years : int
        Number of rings.
    seed : int
        Seed for `np.random.default_rng`.
    phi : float
        AR(1) coefficient of the log-noise, in (-1, 1).
    noise : float
        Standard deviation of the log-noise innovations.
    """
    if n_years < 1:
        raise InvalidParameter("n_years must be positive.")
    if not -1 < phi < 1:
        raise InvalidParameter("phi must lie in (-1, 1).")
    rng = np.random.default_rng(seed)
    age = np.arange(n_years)
    trend = 0.4 + 1.6 * np.exp(-age / 80.0)

    eps = rng.normal(0, noise, n_years)
    ar = np.empty(n_years)
    ar[0] = eps[0] / np.sqrt(1 - phi**2)
    for t in range(1, n_years):
        ar[t] = phi * ar[t - 1] + eps[t]

    years = start_year + age
    return Series(years, np.round(trend * np.exp(ar), 3))
