"""Exceptions raised by mixdens."""


class MixDensError(Exception):
    """Base class for errors raised by mixdens."""


class NoVariablesError(MixDensError, ValueError):
    """Raised when no plottable variables remain after filtering."""


class DegenerateDensityError(MixDensError, ValueError):
    """
    Raised when a weighted density cannot be estimated for a group.

    This happens when the group has fewer than two distinct finite values,
    carries negative weights, or its weights sum to zero. The estimator
    catches it per group so a single failure never aborts a plot.
    """
