"""Class colors, grey levels and line patterns."""

import numpy as np
import seaborn as sns

# Color reserved for the Total class
TOTAL_COLOR = "#000000"

# Base class colors, picked so neighbouring classes contrast
_BASE_COLORS = [
    "#3876C0",  # blue
    "#CB4338",  # red
    "#468C12",  # green
    "#EBC21F",  # gold
    "#934D93",  # purple
    "#81A9DA",  # light_blue
    "#D57A72",  # light_red
    "#6EBC24",  # light_green
    "#B68816",  # dark_gold
    "#BC7FBC",  # light_purple
]

# Dash patterns for black and white plots, one per class
_DASHES = [
    (0, (4, 4)),  # dashed
    (0, (1, 3)),  # dotted
    (0, (1, 3, 4, 3)),  # dot-dash
    (0, (8, 4)),  # long dash
    (0, (2, 2, 6, 2)),  # two-dash
]


def get_palette(n):
    """
    Colors for ``n`` latent classes.

    Deterministic: the same ``n`` always gives the same colors, and the
    first colors do not change when ``n`` grows up to the size of the base
    palette. Beyond that, evenly spaced HUSL hues are used. Black is never
    returned; it is reserved for the Total class.

    Parameters
    ----------
    n : int
        Number of classes.

    Returns
    -------
    list of str
        ``n`` hex color strings.
    """
    if n < 0:
        raise ValueError(f"Number of colors must be non-negative, got {n}")
    if n <= len(_BASE_COLORS):
        return _BASE_COLORS[:n]
    return sns.color_palette("husl", n_colors=n).as_hex()


# ------------------------------------------------------------------------------


def get_greys(n, start=0.2, end=0.8):
    """Grey levels from ``start`` (dark) to ``end`` (light) for ``n`` classes."""
    if n == 1:
        return [str(start)]
    return [f"{level:.3f}" for level in np.linspace(start, end, n)]


# ------------------------------------------------------------------------------


def get_linestyles(n):
    """Distinct dash patterns for ``n`` classes; the Total class is solid."""
    styles = list(_DASHES[:n])
    for i in range(len(styles), n):
        on = 2 + 2 * (i - len(_DASHES) + 1)
        styles.append((0, (on, 2, 1, 2)))
    return styles
