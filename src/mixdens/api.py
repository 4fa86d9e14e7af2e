"""
Simplified API for mixture density plots.

This module provides the user-facing entry point with flat keyword
arguments and sensible defaults.

Functions
---------
plot_density
    Density plot of one or more fitted mixture models.

Examples
--------
>>> import mixdens
>>>
>>> # One model: observed data and posterior class probabilities
>>> result = mixdens.ModelResult("three_class", data, posteriors)
>>> fig = mixdens.plot_density(result)
>>>
>>> # Several models, one row of panels each
>>> fig = mixdens.plot_density(
...     {"two_class": res2, "three_class": res3},
...     variables=["x1", "x2"],
...     bw=True,
...     facet_labels={"x1": "Petal length"},
...     show=False,
... )
>>>
>>> # Power users can pass an explicit config object
>>> from mixdens.config import DensityPlotConfig
>>> config = DensityPlotConfig(conditional=True, alpha=0.3)
>>> fig = mixdens.plot_density(result, config=config)
"""

import warnings
from typing import Dict, Iterable, Optional, Tuple

import matplotlib.pyplot as plt
import pandas as pd
from multipledispatch import dispatch

from ._common import console
from .config import DensityPlotConfig, PlotMode
from .reshape import as_long_table, extract_long_table
from .stats import compute_densities, stack_conditional
from .viz import render

# ==============================================================================
# Long table preparation, by input type
# ==============================================================================


@dispatch(pd.DataFrame, object)
def _prepare_long_table(x, variables):
    """An already reshaped long table is validated and filtered."""
    return as_long_table(x, variables=variables)


@dispatch(object, object)
def _prepare_long_table(x, variables):
    """Fitted models are reshaped into the long table."""
    return extract_long_table(x, variables=variables)


# ==============================================================================
# Main API function
# ==============================================================================


def plot_density(
    x,
    variables: Optional[Iterable[str]] = None,
    bw: bool = False,
    conditional: bool = False,
    alpha: float = 0.2,
    facet_labels: Optional[Dict[str, str]] = None,
    *,
    config: Optional[DensityPlotConfig] = None,
    show: bool = True,
    verbose: bool = False,
    n_points: int = 512,
    figsize: Optional[Tuple[float, float]] = None,
):
    """
    Create density plots for mixture models.

    For each variable, a Total density is shown along with one density per
    latent class, in which cases are weighted by their posterior probability
    of belonging to that class.

    Parameters
    ----------
    x : ModelResult, SingleModelResult, NamedModelCollection, mapping,
        sequence or pd.DataFrame
        Fitted models (see :func:`mixdens.models.as_model_results`), or a
        long density table as returned by
        :func:`mixdens.reshape.extract_long_table`.
    variables : iterable of str, optional
        Variables to plot. If None, plots all numeric variables present in
        all models.
    bw : bool, optional
        Black and white plot (for print) instead of a color plot. Defaults
        to False, because these density plots are hard to read in black and
        white.
    conditional : bool, optional
        Conditional density plot (surface area divided among the latent
        classes) instead of a classic density plot (surface area of the
        Total density equal to one and divided among the classes).
    alpha : float, optional
        Transparency of the class fills in classic color plots, so that
        classes with few cases remain visible (default: 0.2).
    facet_labels : dict of str to str, optional
        New names for panels, keyed by the Variable or Title they replace
        (case-insensitive), e.g. ``{"pet_leng": "Petal length"}``.
    config : DensityPlotConfig, optional
        Explicit configuration. When given, it replaces all the options
        above as well as ``show``, ``verbose``, ``n_points`` and
        ``figsize``.
    show : bool, optional
        Display the figure with ``matplotlib.pyplot.show`` (default: True).
        Pass False when using the figure programmatically.
    verbose : bool, optional
        Print progress to the console (default: False).
    n_points : int, optional
        Grid points per density curve (default: 512).
    figsize : tuple of float, optional
        Figure size in inches.

    Returns
    -------
    matplotlib.figure.Figure
        The density figure.

    Raises
    ------
    NoVariablesError
        If no valid variable remains to plot.
    pydantic.ValidationError
        If an option is invalid, e.g. ``alpha`` outside [0, 1].
    """
    if config is None:
        config = DensityPlotConfig(
            variables=variables,
            bw=bw,
            conditional=conditional,
            alpha=alpha,
            facet_labels=facet_labels,
            n_points=n_points,
            figsize=figsize,
            show=show,
            verbose=verbose,
        )

    if config.verbose:
        console.print("[dim]Reshaping posterior probabilities...[/dim]")
    plot_df = _prepare_long_table(x, config.variables)

    if config.verbose:
        n_vars = plot_df["Variable"].nunique()
        n_titles = plot_df["Title"].nunique()
        console.print(
            f"[dim]Plotting {config.mode.value} densities of[/dim] "
            f"[cyan]{n_vars}[/cyan] [dim]variable(s) for[/dim] "
            f"[cyan]{n_titles}[/cyan] [dim]model(s)...[/dim]"
        )

    if config.mode == PlotMode.CONDITIONAL:
        densities = stack_conditional(
            plot_df, n_points=config.n_points, cut=config.cut
        )
    else:
        densities = compute_densities(
            plot_df, n_points=config.n_points, cut=config.cut
        )

    if config.verbose and densities.skipped:
        console.print(
            f"[yellow]Skipped {len(densities.skipped)} degenerate "
            "group(s):[/yellow]"
        )
        for group in densities.skipped:
            console.print(
                f"[dim]   {group.title or '-'} / {group.variable} / "
                f"{group.class_label}: {group.reason}[/dim]"
            )

    fig = render(
        densities,
        mode=config.mode,
        style=config.style,
        alpha=config.alpha,
        facet_labels=config.facet_labels,
        figsize=config.figsize,
    )

    if config.show:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            plt.show()

    if config.verbose:
        console.print("[green]✓[/green] [dim]Density plot ready[/dim]")
    return fig
