import numpy as np


class LoessError(Exception):
    """
    Base class for errors raised by the local regression smoother.
    """


class InvalidParameter(LoessError, ValueError):
    """
    Bad span, too small a window, or a malformed series.
    """


class DegenerateWindow(LoessError, RuntimeError):
    """
    A local window whose members all sit at distance zero from the center.
    """


class SingularFit(LoessError, np.linalg.LinAlgError):
    """
    The weighted normal equations of a local fit cannot be solved.
    """
