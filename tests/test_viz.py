"""
Tests for palettes, panel layout and figure rendering.
"""

import numpy as np
import pytest
from matplotlib.figure import Figure

from mixdens import (
    NoVariablesError,
    PlotMode,
    PlotStyle,
    compute_densities,
    extract_long_table,
    get_palette,
    render,
)
from mixdens.viz import (
    TOTAL_COLOR,
    facet_label_map,
    facet_layout,
    get_greys,
    get_linestyles,
)

# ------------------------------------------------------------------------------
# Palettes
# ------------------------------------------------------------------------------


class TestPalette:
    """Deterministic class colors."""

    @pytest.mark.parametrize("n", [0, 1, 3, 10, 15])
    def test_size_and_determinism(self, n):
        palette = get_palette(n)
        assert len(palette) == n
        assert palette == get_palette(n)

    @pytest.mark.parametrize("n", [3, 10, 15])
    def test_total_color_is_reserved(self, n):
        palette = [c.lower() for c in get_palette(n)]
        assert TOTAL_COLOR not in palette
        assert len(set(palette)) == n

    def test_prefix_is_stable(self):
        assert get_palette(5)[:3] == get_palette(3)

    def test_negative(self):
        with pytest.raises(ValueError):
            get_palette(-1)

    def test_greys_and_linestyles(self):
        assert get_greys(1) == ["0.2"]
        greys = get_greys(4)
        assert greys[0] == "0.200" and greys[-1] == "0.800"
        styles = get_linestyles(8)
        assert len(styles) == 8
        assert len(set(map(str, styles))) == 8


# ------------------------------------------------------------------------------
# Facets
# ------------------------------------------------------------------------------


class TestFacets:
    """Panel labels and layout."""

    def test_labels_are_overridden_case_insensitively(self):
        labels = facet_label_map(
            ["pet_leng", "Model A"],
            {"PET_LENG": "Petal length", "nothing": "ignored"},
        )
        assert labels == {"pet_leng": "Petal length", "Model A": "Model A"}

    def test_titles_by_variables(self):
        layout = facet_layout(["a", "b"], ["x1", "x2", "x3"])
        assert layout.shape == (2, 3)
        assert layout.panels[1][2] == ("b", "x3")
        assert layout.row_labels == ["a", "b"]
        assert layout.col_labels == ["x1", "x2", "x3"]
        assert layout.free_x

    def test_titles_with_one_variable(self):
        layout = facet_layout(["a", "b"], ["x1"])
        assert layout.shape == (1, 2)
        assert layout.col_labels == ["a", "b"]
        assert layout.row_labels is None
        assert not layout.free_x

    def test_single_panel(self):
        layout = facet_layout([""], ["x1"])
        assert layout.shape == (1, 1)
        assert layout.col_labels is None
        assert layout.row_labels is None


# ------------------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------------------


def _legend_labels(fig):
    return [t.get_text() for t in fig.legends[0].get_texts()]


class TestRender:
    """Figures drawn from the long table or from curves."""

    def test_classic_color(self, three_case_result):
        fig = render(extract_long_table(three_case_result), alpha=0.3)
        assert isinstance(fig, Figure)
        assert len(fig.axes) == 1
        ax = fig.axes[0]
        # One filled area per class; Total is an outline only
        assert len(ax.collections) == 2
        assert ax.collections[0].get_alpha() == pytest.approx(0.3)
        # Total is drawn last, in black
        assert ax.lines[-1].get_color() == TOTAL_COLOR
        assert _legend_labels(fig) == ["A", "B", "Total"]
        assert ax.get_ylim()[0] == 0

    def test_classic_black_and_white(self, three_case_result):
        fig = render(
            extract_long_table(three_case_result),
            style=PlotStyle.BLACK_AND_WHITE,
        )
        ax = fig.axes[0]
        assert len(ax.collections) == 0
        assert len(ax.lines) == 3
        assert ax.lines[-1].get_linestyle() == "-"
        assert all(line.get_linestyle() != "-" for line in ax.lines[:-1])

    def test_from_precomputed_curves(self, two_class_result):
        densities = compute_densities(extract_long_table(two_class_result))
        fig = render(densities)
        assert len(fig.axes) == 2
        assert [ax.get_title() for ax in fig.axes] == ["x1", "x2"]

    def test_conditional_stacks_classes(self, two_class_result):
        fig = render(
            extract_long_table(two_class_result, variables=["x1"]),
            mode="conditional",
        )
        ax = fig.axes[0]
        assert len(ax.collections) == 2
        assert ax.get_ylim() == pytest.approx((0.0, 1.0))
        assert _legend_labels(fig) == ["1", "2"]

    def test_plain_string_long_table(self, two_class_result):
        plain = extract_long_table(two_class_result).astype(
            {"Title": str, "Variable": str, "Class": str}
        )
        fig = render(plain)
        assert [ax.get_title() for ax in fig.axes] == ["x1", "x2"]
        assert _legend_labels(fig) == ["1", "2", "Total"]

        fig = render(plain, mode=PlotMode.CONDITIONAL)
        assert fig.axes[0].get_ylim() == pytest.approx((0.0, 1.0))
        assert _legend_labels(fig) == ["1", "2"]

    def test_conditional_needs_long_table(self, two_class_result):
        densities = compute_densities(extract_long_table(two_class_result))
        with pytest.raises(ValueError, match="unstacked"):
            render(densities, mode=PlotMode.CONDITIONAL)
        with pytest.raises(ValueError, match="long density table"):
            render(densities.curves, mode=PlotMode.CONDITIONAL)

    def test_models_by_variables_grid(self, overlapping_models):
        fig = render(
            extract_long_table(overlapping_models),
            facet_labels={"X2": "Second", "model B": "Model B"},
        )
        assert len(fig.axes) == 4
        top = [ax.get_title() for ax in fig.axes[:2]]
        assert top == ["Second", "x3"]
        row_labels = [t.get_text() for t in fig.axes[3].texts]
        assert "Model B" in row_labels

    def test_models_with_one_variable(self, overlapping_models):
        fig = render(extract_long_table(overlapping_models, variables=["x2"]))
        assert len(fig.axes) == 2
        assert [ax.get_title() for ax in fig.axes] == ["model a", "model b"]

    def test_figsize(self, three_case_result):
        fig = render(extract_long_table(three_case_result), figsize=(4, 2))
        np.testing.assert_allclose(fig.get_size_inches(), (4, 2))

    def test_degenerate_panel_is_drawn_empty(self, three_case_result):
        long = extract_long_table(three_case_result)
        long["Value"] = 1.0
        fig = render(long)
        texts = [t.get_text() for t in fig.axes[0].texts]
        assert "No density" in texts

    def test_no_variables(self, three_case_result):
        curves = compute_densities(extract_long_table(three_case_result)).curves
        empty = curves.iloc[0:0].copy()
        empty["Variable"] = empty["Variable"].cat.set_categories([])
        with pytest.raises(NoVariablesError):
            render(empty)
