"""
Enums for density plot configuration.

The plot mode and plot style are closed sets of choices; keeping them as
``str`` enums lets configuration files pass plain strings while the code
compares against symbolic names.
"""

from enum import Enum

# ==============================================================================
# Enums for plot configuration
# ==============================================================================


class PlotMode(str, Enum):
    """How class densities are combined in a panel."""

    CLASSIC = "classic"
    CONDITIONAL = "conditional"


# ------------------------------------------------------------------------------


class PlotStyle(str, Enum):
    """Color or print-friendly rendering."""

    COLOR = "color"
    BLACK_AND_WHITE = "bw"
