"""
Weighted kernel density estimates of the long density table.

Every (Title, Variable) panel gets one bandwidth and one evaluation grid,
shared by all classes in the panel, so the class curves can be overlaid and
stacked. Each class curve is a Gaussian kernel estimate weighted by the
posterior probabilities, scaled by the class's total weight: the Total
curve integrates to one and every class curve integrates to the share of
cases it holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import scipy.stats as stats

from ..errors import DegenerateDensityError
from ..models import TOTAL_CLASS
from ..reshape import as_long_table
from .bandwidth import bw_nrd0, density_grid

# Columns of a curves table
CURVE_COLUMNS = ["Title", "Variable", "Class", "x", "y"]

# Number of samples evaluated against the grid at once
_CHUNK_SIZE = 4096


# --------------------------------------------------------------------------
# Result containers
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class SkippedGroup:
    """A (Title, Variable, Class) group whose density could not be estimated."""

    title: str
    variable: str
    class_label: str
    reason: str


@dataclass
class DensityResult:
    """Density curves of a long table, plus the groups that were skipped.

    Parameters
    ----------
    curves : pd.DataFrame
        One row per grid point with the columns ``Title, Variable, Class, x,
        y``. The categorical levels of ``Title``, ``Variable`` and ``Class``
        are those of the input table.
    skipped : list of SkippedGroup
        Groups whose estimate failed, with the reason.
    bandwidths : dict
        Bandwidth used for each ``(title, variable)`` panel.
    stacked : bool
        True when ``y`` holds conditional class shares rather than
        densities.
    """

    curves: pd.DataFrame
    skipped: List[SkippedGroup] = field(default_factory=list)
    bandwidths: Dict[Tuple[str, str], float] = field(default_factory=dict)
    stacked: bool = False

    def get_curve(
        self, variable: str, class_label: str, title: str = ""
    ) -> Optional[pd.DataFrame]:
        """Return the ``x, y`` points of one curve, or None if it is absent."""
        c = self.curves
        mask = (
            (c["Title"].astype(str) == str(title))
            & (c["Variable"].astype(str) == str(variable))
            & (c["Class"].astype(str) == str(class_label))
        )
        if not mask.any():
            return None
        return c.loc[mask, ["x", "y"]].reset_index(drop=True)

    @property
    def n_curves(self) -> int:
        """Number of curves estimated."""
        if self.curves.empty:
            return 0
        return len(
            self.curves.groupby(
                ["Title", "Variable", "Class"], observed=True
            ).size()
        )


# --------------------------------------------------------------------------
# Single curve
# --------------------------------------------------------------------------


def weighted_density(values, weights, bw, grid):
    """
    Weighted Gaussian kernel density estimate on a grid.

    The weights are normalized internally and the resulting density is
    multiplied back by their sum, so the curve integrates to the total
    weight rather than to one. Non-finite values are dropped together with
    their weights.

    Parameters
    ----------
    values : array-like
        Sample values of shape ``(n,)``.
    weights : array-like
        Non-negative sample weights of shape ``(n,)``.
    bw : float
        Kernel standard deviation.
    grid : array-like
        Evaluation points.

    Returns
    -------
    np.ndarray
        Density values at ``grid``, all non-negative.

    Raises
    ------
    DegenerateDensityError
        If fewer than two distinct finite values remain, any weight is
        negative, the weights sum to zero, or the bandwidth is not positive.
    """
    values = np.asarray(values, dtype=float)
    weights = np.asarray(weights, dtype=float)
    grid = np.asarray(grid, dtype=float)
    if values.shape != weights.shape:
        raise ValueError(
            f"values and weights differ in shape: {values.shape} vs "
            f"{weights.shape}"
        )

    keep = np.isfinite(values) & np.isfinite(weights)
    values = values[keep]
    weights = weights[keep]

    if np.unique(values).size < 2:
        raise DegenerateDensityError(
            "Need at least 2 distinct values to estimate a density"
        )
    if (weights < 0).any():
        raise DegenerateDensityError("Weights must be non-negative")
    total = weights.sum()
    if not total > 0:
        raise DegenerateDensityError("Weights sum to zero")
    if not bw > 0:
        raise DegenerateDensityError(f"Bandwidth must be positive, got {bw}")

    # Only samples with positive weight contribute
    active = weights > 0
    values = values[active]
    probs = weights[active] / total

    density = np.zeros_like(grid)
    for start in range(0, values.size, _CHUNK_SIZE):
        stop = start + _CHUNK_SIZE
        kernel = stats.norm.pdf(
            grid[:, None], loc=values[None, start:stop], scale=bw
        )
        density += kernel @ probs[start:stop]

    return density * total


# --------------------------------------------------------------------------
# All curves of a long table
# --------------------------------------------------------------------------


def _reference_values(panel: pd.DataFrame) -> np.ndarray:
    """Case values of a panel: the Total rows, or the first class present."""
    classes = panel["Class"].astype(str)
    if (classes == TOTAL_CLASS).any():
        return panel.loc[classes == TOTAL_CLASS, "Value"].to_numpy(float)
    first = classes.iloc[0]
    return panel.loc[classes == first, "Value"].to_numpy(float)


def _curve_frame(plot_df, title, variable, class_label, x, y):
    """One curve as a table with the categorical levels of ``plot_df``."""
    n = len(x)

    def _cat(column, value):
        return pd.Categorical(
            [value] * n,
            categories=plot_df[column].cat.categories,
            ordered=True,
        )

    return pd.DataFrame(
        {
            "Title": _cat("Title", title),
            "Variable": _cat("Variable", variable),
            "Class": _cat("Class", class_label),
            "x": x,
            "y": y,
        }
    )


def _empty_curves(plot_df: pd.DataFrame) -> pd.DataFrame:
    frame = _curve_frame(plot_df, None, None, None, [], [])
    return frame[CURVE_COLUMNS]


def compute_densities(
    plot_df: pd.DataFrame, n_points: int = 512, cut: float = 3.0
) -> DensityResult:
    """
    Estimate one weighted density per (Title, Variable, Class) group.

    Parameters
    ----------
    plot_df : pd.DataFrame
        Long density table as returned by
        :func:`mixdens.reshape.extract_long_table`, or the
        same records with plain string ``Title``, ``Variable`` and ``Class``
        columns.
    n_points : int, optional
        Number of grid points per curve (default: 512).
    cut : float, optional
        Grid extension beyond the data range, in bandwidths (default: 3).

    Returns
    -------
    DensityResult
        The curves, the skipped groups and the panel bandwidths. A failing
        group is recorded in ``skipped`` and the other groups are still
        estimated.
    """
    plot_df = as_long_table(plot_df)
    curves = []
    skipped = []
    bandwidths = {}

    panels = plot_df.groupby(["Title", "Variable"], observed=True, sort=True)
    for (title, variable), panel in panels:
        class_groups = panel.groupby("Class", observed=True, sort=True)
        try:
            bw = bw_nrd0(_reference_values(panel))
            grid = density_grid(panel["Value"], bw, n_points=n_points, cut=cut)
        except DegenerateDensityError as err:
            for class_label, _ in class_groups:
                skipped.append(
                    SkippedGroup(
                        str(title), str(variable), str(class_label), str(err)
                    )
                )
            continue

        bandwidths[(str(title), str(variable))] = bw
        for class_label, group in class_groups:
            try:
                y = weighted_density(
                    group["Value"], group["Probability"], bw, grid
                )
            except DegenerateDensityError as err:
                skipped.append(
                    SkippedGroup(
                        str(title), str(variable), str(class_label), str(err)
                    )
                )
                continue
            curves.append(
                _curve_frame(plot_df, title, variable, class_label, grid, y)
            )

    if curves:
        curves_df = pd.concat(curves, ignore_index=True)
    else:
        curves_df = _empty_curves(plot_df)

    return DensityResult(
        curves=curves_df, skipped=skipped, bandwidths=bandwidths
    )


# --------------------------------------------------------------------------
# Conditional (fill) densities
# --------------------------------------------------------------------------


def stack_conditional(
    plot_df: pd.DataFrame, n_points: int = 512, cut: float = 3.0
) -> DensityResult:
    """
    Class shares of the weighted density at every grid point.

    The Total class is dropped. Within each panel, the mass-scaled class
    densities are divided by their sum at each grid point, so the class
    values add up to one at every x. Grid points where all classes vanish
    are removed.

    Parameters
    ----------
    plot_df : pd.DataFrame
        Long density table, as accepted by :func:`compute_densities`.
    n_points : int, optional
        Number of grid points (default: 512).
    cut : float, optional
        Grid extension beyond the data range, in bandwidths (default: 3).

    Returns
    -------
    DensityResult
        ``curves`` holds the class shares in its ``y`` column.
    """
    plot_df = as_long_table(plot_df)
    classes = plot_df[plot_df["Class"].astype(str) != TOTAL_CLASS].copy()
    if TOTAL_CLASS in classes["Class"].cat.categories:
        classes["Class"] = classes["Class"].cat.remove_categories(TOTAL_CLASS)

    result = compute_densities(classes, n_points=n_points, cut=cut)
    result.stacked = True
    if result.curves.empty:
        return result

    stacked = []
    panels = result.curves.groupby(["Title", "Variable"], observed=True)
    for _, panel in panels:
        by_class = [g for _, g in panel.groupby("Class", observed=True)]
        ys = np.vstack([g["y"].to_numpy() for g in by_class])
        totals = ys.sum(axis=0)
        keep = totals > 0
        shares = ys[:, keep] / totals[keep]
        for g, share in zip(by_class, shares):
            g = g[keep].copy()
            g["y"] = share
            stacked.append(g)

    result.curves = pd.concat(stacked, ignore_index=True)[CURVE_COLUMNS]
    return result
