"""
Shared test fixtures and configuration for mixdens tests.
"""

import matplotlib
import numpy as np
import pandas as pd
import pytest


def pytest_configure(config):
    """Render figures off-screen before any pyplot import happens."""
    matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def close_figures():
    """Close every figure a test leaves open."""
    yield
    import matplotlib.pyplot as plt

    plt.close("all")


@pytest.fixture
def three_case_result():
    """Three cases of one variable: cases 1 and 3 in class A, case 2 in B."""
    from mixdens import ModelResult

    observed = pd.DataFrame({"x": [1.0, 2.0, 3.0]})
    posterior = pd.DataFrame(
        {"A": [1.0, 0.0, 1.0], "B": [0.0, 1.0, 0.0]}
    )
    return ModelResult("three_cases", observed, posterior)


@pytest.fixture
def two_class_result():
    """Fifty cases of two variables with soft two-class posteriors."""
    from mixdens import ModelResult

    rng = np.random.default_rng(42)
    n_cases = 50
    x1 = np.concatenate([rng.normal(-2, 1, 25), rng.normal(2, 1, 25)])
    x2 = rng.normal(0, 1, n_cases)
    p_first = 1.0 / (1.0 + np.exp(2.0 * x1))
    observed = pd.DataFrame({"x1": x1, "x2": x2})
    posterior = pd.DataFrame({"1": p_first, "2": 1.0 - p_first})
    return ModelResult("two_class", observed, posterior)


@pytest.fixture
def overlapping_models():
    """Two models sharing only x2 and x3."""
    from mixdens import ModelResult

    rng = np.random.default_rng(0)

    def _make(name, variables, n_cases):
        observed = pd.DataFrame(
            rng.normal(size=(n_cases, len(variables))), columns=variables
        )
        probs = rng.dirichlet([1.0, 1.0, 1.0], size=n_cases)
        posterior = pd.DataFrame(probs, columns=["1", "2", "3"])
        return ModelResult(name, observed, posterior)

    return {
        "model_a": _make("model_a", ["x1", "x2", "x3"], 10),
        "model_b": _make("model_b", ["x2", "x3", "x4"], 40),
    }
