"""Rendering of mixture density figures."""

from .palette import TOTAL_COLOR, get_greys, get_linestyles, get_palette
from .facets import FacetLayout, facet_label_map, facet_layout
from .style import density_rc, density_style
from .render import render

__all__ = [
    "render",
    "get_palette",
    "get_greys",
    "get_linestyles",
    "TOTAL_COLOR",
    "FacetLayout",
    "facet_label_map",
    "facet_layout",
    "density_rc",
    "density_style",
]
