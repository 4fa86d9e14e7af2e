"""Density plot configuration using Pydantic."""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from omegaconf import DictConfig, OmegaConf
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from .enums import PlotMode, PlotStyle

# ==============================================================================
# Density plot configuration
# ==============================================================================


class DensityPlotConfig(BaseModel):
    """
    Configuration of a mixture density plot.

    Collects every option accepted by :func:`mixdens.plot_density`. The
    object is immutable and validated on creation; unknown options raise a
    validation error instead of being silently dropped.

    Parameters
    ----------
    variables : list of str, optional
        Variables to plot. ``None`` plots every numeric variable present in
        all models.
    bw : bool
        Black and white plot (line patterns) instead of a color plot.
    conditional : bool
        Conditional (stacked, fill) density plot instead of the classic one.
    alpha : float
        Fill transparency of the non-Total classes in classic color plots.
    facet_labels : dict of str to str, optional
        Replacement panel labels, matched case-insensitively against the
        Variable and Title values.
    n_points : int
        Number of grid points of each density curve.
    cut : float
        Number of bandwidths the grid extends beyond the data range.
    figsize : tuple of float, optional
        Figure size in inches. ``None`` sizes the figure from the number of
        panels.
    show : bool
        Display the figure with ``matplotlib.pyplot.show`` after rendering.
    verbose : bool
        Print progress to the console.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    variables: Optional[List[str]] = Field(
        None, description="Variables to plot (None = all common variables)"
    )
    bw: bool = Field(False, description="Black and white plot")
    conditional: bool = Field(False, description="Conditional density plot")
    alpha: float = Field(
        0.2, ge=0.0, le=1.0, description="Fill transparency of classes"
    )
    facet_labels: Optional[Dict[str, str]] = Field(
        None, description="Panel label overrides"
    )
    n_points: int = Field(512, ge=2, description="Grid points per curve")
    cut: float = Field(3.0, ge=0.0, description="Grid extension in bandwidths")
    figsize: Optional[Tuple[float, float]] = Field(
        None, description="Figure size in inches"
    )
    show: bool = Field(True, description="Display the figure")
    verbose: bool = Field(False, description="Print progress")

    # --------------------------------------------------------------------------
    # Validation Methods
    # --------------------------------------------------------------------------

    @field_validator("variables", mode="before")
    @classmethod
    def validate_variables(cls, v: Any) -> Optional[List[str]]:
        """Accept a single name and drop repeated names."""
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        seen = []
        for name in v:
            name = str(name)
            if name not in seen:
                seen.append(name)
        return seen

    # --------------------------------------------------------------------------
    # Derived options
    # --------------------------------------------------------------------------

    @property
    def mode(self) -> PlotMode:
        """Plot mode derived from ``conditional``."""
        return PlotMode.CONDITIONAL if self.conditional else PlotMode.CLASSIC

    # --------------------------------------------------------------------------

    @property
    def style(self) -> PlotStyle:
        """Plot style derived from ``bw``."""
        return PlotStyle.BLACK_AND_WHITE if self.bw else PlotStyle.COLOR

    # --------------------------------------------------------------------------
    # Construction helpers
    # --------------------------------------------------------------------------

    @classmethod
    def from_cfg(
        cls, cfg: Union[DictConfig, Mapping[str, Any], None]
    ) -> "DensityPlotConfig":
        """
        Build a configuration from a mapping or an OmegaConf config.

        Parameters
        ----------
        cfg : DictConfig or mapping or None
            Plot options, e.g. the ``density_opts`` node of a Hydra
            visualization config. ``None`` gives the defaults.

        Returns
        -------
        DensityPlotConfig
            The validated configuration.
        """
        if cfg is None:
            return cls()
        if isinstance(cfg, DictConfig):
            cfg = OmegaConf.to_container(cfg, resolve=True)
        return cls(**dict(cfg))
