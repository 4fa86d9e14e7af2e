"""Faceted rendering of mixture density curves."""

from typing import Mapping, Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from ..config import PlotMode, PlotStyle
from ..errors import NoVariablesError
from ..models import TOTAL_CLASS
from ..reshape import as_long_table
from ..stats import DensityResult, compute_densities, stack_conditional
from .facets import facet_label_map, facet_layout
from .palette import TOTAL_COLOR, get_greys, get_linestyles, get_palette
from .style import density_style

# Panel size in inches
PANEL_WIDTH = 3.5
PANEL_HEIGHT = 3.0


# ------------------------------------------------------------------------------
# Input normalisation
# ------------------------------------------------------------------------------


def _is_long_table(data) -> bool:
    return isinstance(data, pd.DataFrame) and "Probability" in data.columns


def _resolve_curves(data, mode, n_points, cut) -> DensityResult:
    """Density curves to draw for the requested mode."""
    if _is_long_table(data):
        if mode == PlotMode.CONDITIONAL:
            return stack_conditional(data, n_points=n_points, cut=cut)
        return compute_densities(data, n_points=n_points, cut=cut)

    if isinstance(data, DensityResult):
        if data.stacked != (mode == PlotMode.CONDITIONAL):
            raise ValueError(
                f"Cannot draw a {mode.value} plot from "
                f"{'stacked' if data.stacked else 'unstacked'} curves"
            )
        return data
    if mode == PlotMode.CONDITIONAL:
        raise ValueError(
            "Conditional plots are computed from the long density table; "
            "pass the table from extract_long_table instead of curves"
        )
    if isinstance(data, pd.DataFrame) and {"x", "y"} <= set(data.columns):
        return DensityResult(curves=data)
    raise ValueError(
        "Expected a long density table, a DensityResult or a curves "
        f"DataFrame, got {type(data).__name__}"
    )


def _levels(curves: pd.DataFrame, column: str):
    """Levels of a column, categorical order first."""
    series = curves[column]
    if isinstance(series.dtype, pd.CategoricalDtype):
        return [str(level) for level in series.cat.categories]
    return list(dict.fromkeys(series.astype(str)))


# ------------------------------------------------------------------------------
# Panel drawing
# ------------------------------------------------------------------------------


def _draw_classic(ax, panel, classes, style, alpha, colors, linestyles):
    """Overlay class curves, Total last and on top."""
    for class_label in classes + [TOTAL_CLASS]:
        curve = panel[panel["Class"] == class_label]
        if curve.empty:
            continue
        x = curve["x"].to_numpy()
        y = curve["y"].to_numpy()

        if style == PlotStyle.BLACK_AND_WHITE:
            linestyle = (
                "solid" if class_label == TOTAL_CLASS else linestyles[class_label]
            )
            ax.plot(x, y, color="black", linestyle=linestyle, zorder=3)
        elif class_label == TOTAL_CLASS:
            ax.plot(x, y, color=TOTAL_COLOR, zorder=4)
        else:
            color = colors[class_label]
            ax.fill_between(x, y, color=color, alpha=alpha, linewidth=0)
            ax.plot(x, y, color=color, zorder=3)


def _draw_conditional(ax, panel, classes, fills):
    """Stack class shares so they fill the panel."""
    present = [c for c in classes if (panel["Class"] == c).any()]
    if not present:
        return
    curves = [panel[panel["Class"] == c] for c in present]
    x = curves[0]["x"].to_numpy()
    ax.stackplot(
        x,
        *[c["y"].to_numpy() for c in curves],
        colors=[fills[c] for c in present],
        linewidth=0,
    )


def _legend_handles(mode, style, classes, alpha, colors, linestyles, fills):
    """Figure legend entries, one per class plus Total in classic plots."""
    if mode == PlotMode.CONDITIONAL:
        return [Patch(facecolor=fills[c], label=c) for c in classes]

    if style == PlotStyle.BLACK_AND_WHITE:
        handles = [
            Line2D([], [], color="black", linestyle=linestyles[c], label=c)
            for c in classes
        ]
        handles.append(
            Line2D([], [], color="black", linestyle="solid", label=TOTAL_CLASS)
        )
        return handles

    handles = [
        Patch(
            facecolor=colors[c], edgecolor=colors[c], alpha=max(alpha, 0.2),
            label=c,
        )
        for c in classes
    ]
    handles.append(Line2D([], [], color=TOTAL_COLOR, label=TOTAL_CLASS))
    return handles


# ------------------------------------------------------------------------------
# Figure
# ------------------------------------------------------------------------------


def render(
    data: Union[pd.DataFrame, DensityResult],
    mode: Union[PlotMode, str] = PlotMode.CLASSIC,
    style: Union[PlotStyle, str] = PlotStyle.COLOR,
    alpha: float = 0.2,
    facet_labels: Optional[Mapping[str, str]] = None,
    figsize: Optional[Tuple[float, float]] = None,
    n_points: int = 512,
    cut: float = 3.0,
):
    """
    Draw a faceted mixture density figure.

    Parameters
    ----------
    data : pd.DataFrame or DensityResult
        The long density table, or precomputed curves: a ``DensityResult``
        from :func:`mixdens.stats.compute_densities` (classic) or
        :func:`mixdens.stats.stack_conditional` (conditional), or a curves
        DataFrame (classic only).
    mode : PlotMode or str, optional
        ``"classic"`` overlays the class densities under the Total density;
        ``"conditional"`` stacks the class shares so they fill each panel.
    style : PlotStyle or str, optional
        ``"color"`` or ``"bw"`` (line patterns and greys).
    alpha : float, optional
        Fill transparency of the classes in classic color plots
        (default: 0.2). The Total class is never filled.
    facet_labels : mapping of str to str, optional
        Panel label overrides, matched case-insensitively.
    figsize : tuple of float, optional
        Figure size in inches. Defaults to 3.5 x 3 inches per panel.
    n_points : int, optional
        Grid points per curve when densities are estimated here.
    cut : float, optional
        Grid extension in bandwidths when densities are estimated here.

    Returns
    -------
    matplotlib.figure.Figure
        The figure. It is not shown; callers own it and should close it.

    Raises
    ------
    NoVariablesError
        If there is no variable to plot.
    """
    mode = PlotMode(mode)
    style = PlotStyle(style)

    if _is_long_table(data):
        data = as_long_table(data)
    result = _resolve_curves(data, mode, n_points, cut)
    source = data if _is_long_table(data) else result.curves

    variables = _levels(source, "Variable")
    if not variables:
        raise NoVariablesError("No variables to plot.")
    titles = _levels(source, "Title") or [""]
    classes = [c for c in _levels(source, "Class") if c != TOTAL_CLASS]

    labels = facet_label_map(variables + titles, facet_labels)
    layout = facet_layout(titles, variables, labels)
    n_rows, n_cols = layout.shape
    if figsize is None:
        figsize = (PANEL_WIDTH * n_cols + 1.0, PANEL_HEIGHT * n_rows)

    colors = dict(zip(classes, get_palette(len(classes))))
    linestyles = dict(zip(classes, get_linestyles(len(classes))))
    if style == PlotStyle.BLACK_AND_WHITE:
        fills = dict(zip(classes, get_greys(len(classes))))
    else:
        fills = colors

    curves = result.curves.copy()
    for column in ("Title", "Variable", "Class"):
        curves[column] = curves[column].astype(str)

    with density_style():
        fig, axes = plt.subplots(
            n_rows,
            n_cols,
            figsize=figsize,
            squeeze=False,
            sharex="col" if layout.free_x else True,
            sharey=True,
            layout="constrained",
        )

        for i, row in enumerate(layout.panels):
            for j, (title, variable) in enumerate(row):
                ax = axes[i, j]
                panel = curves[
                    (curves["Title"] == title) & (curves["Variable"] == variable)
                ]
                if panel.empty:
                    ax.text(
                        0.5, 0.5, "No density",
                        ha="center", va="center", transform=ax.transAxes,
                    )
                elif mode == PlotMode.CONDITIONAL:
                    _draw_conditional(ax, panel, classes, fills)
                else:
                    _draw_classic(
                        ax, panel, classes, style, alpha, colors, linestyles
                    )

                if not panel.empty:
                    ax.margins(x=0)
                if i == 0 and layout.col_labels is not None:
                    ax.set_title(layout.col_labels[j])
                if j == n_cols - 1 and layout.row_labels is not None:
                    ax.annotate(
                        layout.row_labels[i],
                        xy=(1.04, 0.5),
                        xycoords="axes fraction",
                        rotation=-90,
                        ha="left",
                        va="center",
                    )
                if i == n_rows - 1:
                    ax.set_xlabel("Value")
                if j == 0:
                    ax.set_ylabel(
                        "proportion" if mode == PlotMode.CONDITIONAL else "density"
                    )

        # Shared y scale, set once every panel holds its data
        for ax in axes.flat:
            if mode == PlotMode.CONDITIONAL:
                ax.set_ylim(0, 1)
            else:
                ax.set_ylim(bottom=0)

        handles = _legend_handles(
            mode, style, classes, alpha, colors, linestyles, fills
        )
        fig.legend(handles=handles, title="Class", loc="outside center right")

    return fig
