"""
mixdens: density plots of finite mixture models

Draws, for every observed variable, the Total density of the data along with
one density per latent class, weighting each case by its posterior
probability of belonging to the class.
"""

from .errors import DegenerateDensityError, MixDensError, NoVariablesError
from .models import (
    ModelResult,
    NamedModelCollection,
    SingleModelResult,
    as_model_results,
)
from .config import DensityPlotConfig, PlotMode, PlotStyle
from .reshape import as_long_table, extract_long_table, select_variables
from .stats import DensityResult, SkippedGroup, compute_densities, stack_conditional
from .viz import get_palette, render
from .api import plot_density

from . import config
from . import stats
from . import viz

__all__ = [
    # Entry point
    "plot_density",
    # Inputs
    "ModelResult",
    "SingleModelResult",
    "NamedModelCollection",
    "as_model_results",
    # Configuration
    "DensityPlotConfig",
    "PlotMode",
    "PlotStyle",
    # Pipeline
    "extract_long_table",
    "as_long_table",
    "select_variables",
    "compute_densities",
    "stack_conditional",
    "DensityResult",
    "SkippedGroup",
    "render",
    "get_palette",
    # Errors
    "MixDensError",
    "NoVariablesError",
    "DegenerateDensityError",
]
