"""
Configuration for mixture density plots.

Uses Pydantic for validation and enums for the plot mode and style. All
configs are immutable.
"""

from .enums import PlotMode, PlotStyle
from .base import DensityPlotConfig

__all__ = [
    "DensityPlotConfig",
    "PlotMode",
    "PlotStyle",
]
