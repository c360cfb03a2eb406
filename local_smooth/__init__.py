"""
Hand-built LOESS: degree 1 local regression with tricube weights.
"""

from .base import (Series,
                   LocalWindow,
                   FittedModel,
                   Prediction,
                   WindowDetail,
                   FitFailure,
                   SmoothResult)
from .errors import LoessError, InvalidParameter, DegenerateWindow, SingularFit
from .loess import (window_size,
                    select_window,
                    tricube,
                    compute_weights,
                    weighted_linear_fit,
                    predict_at,
                    smooth,
                    LoessSmoother)
from .data import load_series, series_from_frame, simulate_ring_widths
from .config import settings

__all__ = ["Series", "LocalWindow", "FittedModel", "Prediction", "WindowDetail",
           "FitFailure", "SmoothResult", "LoessError", "InvalidParameter",
           "DegenerateWindow", "SingularFit", "window_size", "select_window",
           "tricube", "compute_weights", "weighted_linear_fit", "predict_at",
           "smooth", "LoessSmoother", "load_series", "series_from_frame",
           "simulate_ring_widths", "settings"]
