"""Bandwidth selection and evaluation grids for kernel density estimates."""

import numpy as np
import scipy.stats as stats

from ..errors import DegenerateDensityError

# ==============================================================================
# Bandwidth rules
# ==============================================================================


def bw_nrd0(values):
    """
    Silverman's rule-of-thumb bandwidth for a Gaussian kernel.

    Computes ``0.9 * min(sd, IQR / 1.34) * n^(-1/5)``. When the spread
    estimate is zero it falls back to the standard deviation, then to the
    magnitude of the first value, then to one, so that a bandwidth is
    always returned for non-empty input.

    Parameters
    ----------
    values : array-like
        Sample values. Non-finite entries are ignored.

    Returns
    -------
    float
        The bandwidth.

    Raises
    ------
    DegenerateDensityError
        If fewer than two finite values are given.
    """
    x = np.asarray(values, dtype=float)
    x = x[np.isfinite(x)]
    if x.size < 2:
        raise DegenerateDensityError(
            f"Need at least 2 data points to select a bandwidth, got {x.size}"
        )

    hi = np.std(x, ddof=1)
    lo = min(hi, stats.iqr(x) / 1.34)
    if not lo > 0:
        lo = hi if hi > 0 else (abs(x[0]) if x[0] != 0 else 1.0)
    return 0.9 * lo * x.size ** (-0.2)


# ------------------------------------------------------------------------------


def density_grid(values, bw, n_points=512, cut=3.0):
    """
    Equally spaced evaluation points around the data.

    Parameters
    ----------
    values : array-like
        Sample values. Non-finite entries are ignored.
    bw : float
        Kernel bandwidth.
    n_points : int, optional
        Number of grid points (default: 512).
    cut : float, optional
        The grid runs from ``min - cut * bw`` to ``max + cut * bw``
        (default: 3).

    Returns
    -------
    np.ndarray
        Grid of shape ``(n_points,)``.
    """
    x = np.asarray(values, dtype=float)
    x = x[np.isfinite(x)]
    if x.size == 0:
        raise DegenerateDensityError("No finite values to build a grid from")
    return np.linspace(x.min() - cut * bw, x.max() + cut * bw, n_points)
