"""
Tests for bandwidth selection and weighted density estimation.
"""

import numpy as np
import pandas as pd
import pytest
from scipy.integrate import trapezoid
from scipy.stats import norm

from mixdens import (
    DegenerateDensityError,
    ModelResult,
    compute_densities,
    extract_long_table,
    stack_conditional,
)
from mixdens.stats import bw_nrd0, density_grid, weighted_density

# ------------------------------------------------------------------------------
# Bandwidth
# ------------------------------------------------------------------------------


class TestBandwidth:
    """Rule-of-thumb bandwidth and grids."""

    def test_rule_of_thumb(self):
        x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        # IQR = 2, sd = 1.58
        expected = 0.9 * min(np.std(x, ddof=1), 2.0 / 1.34) * 5 ** (-0.2)
        assert bw_nrd0(x) == pytest.approx(expected)

    def test_zero_iqr_falls_back_to_sd(self):
        x = np.array([3.0, 3.0, 3.0, 3.0, 3.0, 8.0])
        expected = 0.9 * np.std(x, ddof=1) * 6 ** (-0.2)
        assert bw_nrd0(x) == pytest.approx(expected)

    def test_constant_values_still_give_a_bandwidth(self):
        assert bw_nrd0([2.0, 2.0, 2.0]) > 0
        assert bw_nrd0([0.0, 0.0]) > 0

    def test_missing_values_ignored(self):
        assert bw_nrd0([1.0, np.nan, 2.0, 3.0]) == pytest.approx(
            bw_nrd0([1.0, 2.0, 3.0])
        )

    def test_needs_two_points(self):
        with pytest.raises(DegenerateDensityError):
            bw_nrd0([1.0])

    def test_grid_covers_data(self):
        grid = density_grid([1.0, 4.0], bw=0.5, n_points=100, cut=3)
        assert len(grid) == 100
        assert grid[0] == pytest.approx(-0.5)
        assert grid[-1] == pytest.approx(5.5)


# ------------------------------------------------------------------------------
# Single density
# ------------------------------------------------------------------------------


class TestWeightedDensity:
    """One weighted kernel estimate."""

    def test_integrates_to_total_weight(self):
        rng = np.random.default_rng(1)
        values = rng.normal(size=200)
        weights = np.full(200, 0.3 / 200)
        bw = bw_nrd0(values)
        grid = density_grid(values, bw, n_points=1024, cut=4)
        y = weighted_density(values, weights, bw, grid)
        assert np.all(y >= 0)
        assert trapezoid(y, grid) == pytest.approx(0.3, abs=1e-3)

    def test_matches_weighted_kernel_sum(self):
        values = np.array([0.0, 1.0, 4.0])
        weights = np.array([1.0, 3.0, 0.0])
        grid = np.linspace(-2, 6, 9)
        y = weighted_density(values, weights, 0.7, grid)
        expected = (
            1.0 * norm.pdf(grid, 0.0, 0.7) + 3.0 * norm.pdf(grid, 1.0, 0.7)
        )
        np.testing.assert_allclose(y, expected)

    def test_missing_values_dropped(self):
        grid = np.linspace(-3, 4, 20)
        with_nan = weighted_density(
            [0.0, np.nan, 1.0], [0.5, 0.2, 0.5], 1.0, grid
        )
        without = weighted_density([0.0, 1.0], [0.5, 0.5], 1.0, grid)
        np.testing.assert_allclose(with_nan, without)

    @pytest.mark.parametrize(
        "values, weights",
        [
            ([1.0, 1.0, 1.0], [0.2, 0.3, 0.5]),
            ([1.0, 2.0], [0.0, 0.0]),
            ([1.0, 2.0], [0.5, -0.1]),
            ([np.nan, np.nan], [0.5, 0.5]),
        ],
    )
    def test_degenerate_groups(self, values, weights):
        with pytest.raises(DegenerateDensityError):
            weighted_density(values, weights, 1.0, np.linspace(0, 3, 10))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="shape"):
            weighted_density([1.0, 2.0], [1.0], 1.0, np.linspace(0, 3, 10))


# ------------------------------------------------------------------------------
# All densities of a long table
# ------------------------------------------------------------------------------


class TestComputeDensities:
    """One curve per (Title, Variable, Class) group."""

    def test_three_case_scenario(self, three_case_result):
        densities = compute_densities(extract_long_table(three_case_result))
        assert densities.n_curves == 3
        assert densities.skipped == []

        total = densities.get_curve("x", "Total")
        bw = bw_nrd0([1.0, 2.0, 3.0])
        expected = sum(
            norm.pdf(total["x"], v, bw) / 3.0 for v in [1.0, 2.0, 3.0]
        )
        np.testing.assert_allclose(total["y"], expected)

        # Classes split the Total curve
        a = densities.get_curve("x", "A")
        b = densities.get_curve("x", "B")
        np.testing.assert_allclose(a["y"] + b["y"], total["y"])

    def test_curves_cover_the_data(self, two_class_result):
        long = extract_long_table(two_class_result)
        densities = compute_densities(long, n_points=128)
        for (variable, class_label), rows in long.groupby(
            ["Variable", "Class"], observed=True
        ):
            curve = densities.get_curve(variable, class_label)
            assert len(curve) == 128
            assert (curve["y"] >= 0).all()
            assert curve["x"].min() <= rows["Value"].min()
            assert curve["x"].max() >= rows["Value"].max()

    def test_classes_share_panel_grid(self, two_class_result):
        densities = compute_densities(extract_long_table(two_class_result))
        grids = [
            densities.get_curve("x1", c)["x"].to_numpy()
            for c in ["Total", "1", "2"]
        ]
        np.testing.assert_array_equal(grids[0], grids[1])
        np.testing.assert_array_equal(grids[0], grids[2])
        assert set(densities.bandwidths) == {("", "x1"), ("", "x2")}

    def test_curves_keep_categorical_levels(self, overlapping_models):
        long = extract_long_table(overlapping_models)
        curves = compute_densities(long).curves
        assert list(curves["Class"].cat.categories) == ["Total", "1", "2", "3"]
        assert list(curves["Title"].cat.categories) == ["model a", "model b"]
        assert list(curves["Variable"].cat.categories) == ["x2", "x3"]

    def test_empty_class_is_skipped(self):
        result = ModelResult(
            "m",
            pd.DataFrame({"x": [0.0, 1.0, 2.5]}),
            pd.DataFrame({"1": [1.0, 1.0, 1.0], "2": [0.0, 0.0, 0.0]}),
        )
        densities = compute_densities(extract_long_table(result))
        assert densities.get_curve("x", "Total") is not None
        assert densities.get_curve("x", "1") is not None
        assert densities.get_curve("x", "2") is None
        assert len(densities.skipped) == 1
        skipped = densities.skipped[0]
        assert (skipped.variable, skipped.class_label) == ("x", "2")
        assert "zero" in skipped.reason

    def test_plain_string_columns(self, three_case_result):
        long = extract_long_table(three_case_result)
        plain = long.astype({"Title": str, "Variable": str, "Class": str})
        densities = compute_densities(plain)
        assert densities.n_curves == 3
        assert list(densities.curves["Class"].cat.categories) == [
            "Total", "A", "B",
        ]
        expected = compute_densities(long).get_curve("x", "A")
        np.testing.assert_allclose(
            densities.get_curve("x", "A")["y"], expected["y"]
        )

    def test_constant_variable_skips_every_class(self):
        result = ModelResult(
            "m",
            pd.DataFrame({"x": [1.0, 2.0, 3.0], "c": [5.0, 5.0, 5.0]}),
            np.full((3, 2), 0.5),
        )
        densities = compute_densities(extract_long_table(result))
        assert densities.n_curves == 3
        skipped = {(s.variable, s.class_label) for s in densities.skipped}
        assert skipped == {("c", "Total"), ("c", "1"), ("c", "2")}


# ------------------------------------------------------------------------------
# Conditional shares
# ------------------------------------------------------------------------------


class TestStackConditional:
    """Class shares fill each panel."""

    def test_shares_sum_to_one(self, two_class_result):
        stacked = stack_conditional(extract_long_table(two_class_result))
        assert stacked.stacked
        curves = stacked.curves
        assert "Total" not in set(curves["Class"].astype(str))
        assert list(curves["Class"].cat.categories) == ["1", "2"]

        for variable in ["x1", "x2"]:
            first = stacked.get_curve(variable, "1")
            second = stacked.get_curve(variable, "2")
            np.testing.assert_array_equal(first["x"], second["x"])
            sums = first["y"].to_numpy() + second["y"].to_numpy()
            for i in np.linspace(0, len(sums) - 1, 7).astype(int):
                assert sums[i] == pytest.approx(1.0)

    def test_plain_string_columns(self, two_class_result):
        plain = extract_long_table(two_class_result).astype(
            {"Title": str, "Variable": str, "Class": str}
        )
        stacked = stack_conditional(plain)
        assert stacked.stacked
        assert list(stacked.curves["Class"].cat.categories) == ["1", "2"]

    def test_known_assignment(self, three_case_result):
        stacked = stack_conditional(extract_long_table(three_case_result))
        a = stacked.get_curve("x", "A")
        b = stacked.get_curve("x", "B")
        # Case 2 (class B) sits at x = 2, where B holds its largest share
        at_two = np.argmin(np.abs(b["x"].to_numpy() - 2.0))
        at_one = np.argmin(np.abs(a["x"].to_numpy() - 1.0))
        assert b["y"][at_two] > b["y"][at_one]
        assert a["y"][at_one] > 0.5
