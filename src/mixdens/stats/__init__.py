"""Weighted density estimation for mixture density plots."""

# Bandwidth functions
from .bandwidth import bw_nrd0, density_grid

# Density functions
from .density import (
    CURVE_COLUMNS,
    DensityResult,
    SkippedGroup,
    compute_densities,
    stack_conditional,
    weighted_density,
)

__all__ = [
    # Bandwidth
    "bw_nrd0",
    "density_grid",
    # Density
    "CURVE_COLUMNS",
    "DensityResult",
    "SkippedGroup",
    "compute_densities",
    "stack_conditional",
    "weighted_density",
]
