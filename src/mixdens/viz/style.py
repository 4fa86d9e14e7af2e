"""Plot styling for density figures."""

from contextlib import contextmanager

import matplotlib.pyplot as plt
import seaborn as sns


def density_rc():
    """
    Returns the matplotlib rc settings used for density figures.

    White panels with a light grid and a full frame, close to a classic
    black-and-white theme.
    """
    return {
        # Axes formatting
        "axes.facecolor": "white",
        "axes.edgecolor": "#333333",
        "axes.labelcolor": "#000000",
        "axes.spines.right": True,
        "axes.spines.top": True,
        "axes.axisbelow": True,
        "axes.grid": True,
        # Font sizes
        "axes.titlesize": 11,
        "axes.labelsize": 11,
        "xtick.labelsize": 9,
        "ytick.labelsize": 9,
        # Grid formatting
        "grid.linestyle": "-",
        "grid.linewidth": 0.6,
        "grid.color": "#EBEBEB",
        # Lines formatting
        "lines.linewidth": 1.2,
        # Legend formatting
        "legend.fontsize": 9,
        "legend.title_fontsize": 10,
        "legend.frameon": False,
        # Higher-order things
        "figure.facecolor": "white",
        "savefig.bbox": "tight",
    }


# ------------------------------------------------------------------------------


@contextmanager
def density_style(rc=None):
    """
    Context in which density figures are created and drawn.

    The settings only apply inside the ``with`` block; global matplotlib
    state is left untouched.

    Parameters
    ----------
    rc : dict, optional
        Extra rc settings overriding :func:`density_rc`.
    """
    settings = {**density_rc(), **(rc or {})}
    with sns.axes_style("whitegrid"), plt.rc_context(settings):
        yield
