"""
Fitted mixture model inputs.

This module defines the input side of the density pipeline:

- ``ModelResult``: one fitted mixture model (or group), holding the raw
  observed data and the per-case posterior class probabilities.
- ``SingleModelResult`` and ``NamedModelCollection``: adapters exposing a
  uniform ``to_model_results()``.
- ``as_model_results()``: dispatches on the runtime type of the input and
  always returns a list of ``ModelResult``, which is the only shape the
  reshaping code consumes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from multipledispatch import dispatch

# Tolerance on the row sums of posterior probability tables
ROW_SUM_ATOL = 1e-4

# Reserved class label for the overall density
TOTAL_CLASS = "Total"


# --------------------------------------------------------------------------
# Table coercion helpers
# --------------------------------------------------------------------------


def _as_frame(table, prefix: str) -> pd.DataFrame:
    """Coerce an array or DataFrame to a DataFrame with string columns."""
    if isinstance(table, pd.DataFrame):
        frame = table.reset_index(drop=True)
    elif isinstance(table, pd.Series):
        frame = table.reset_index(drop=True).to_frame()
    else:
        arr = np.asarray(table)
        if arr.ndim == 1:
            arr = arr[:, None]
        if arr.ndim != 2:
            raise ValueError(
                f"Expected a 1-D or 2-D table, got an array with "
                f"{arr.ndim} dimensions"
            )
        frame = pd.DataFrame(
            arr, columns=[f"{prefix}{j + 1}" for j in range(arr.shape[1])]
        )
    frame.columns = [str(c) for c in frame.columns]
    return frame


# --------------------------------------------------------------------------
# Model result
# --------------------------------------------------------------------------


@dataclass
class ModelResult:
    """One fitted mixture model, seen through its data and posteriors.

    Parameters
    ----------
    name : str
        Label of the model or group. Used as the panel title when several
        models are plotted together.
    observed_data : pd.DataFrame or array-like
        Raw observed values, one row per case and one column per variable.
        Arrays get the column names ``x1, x2, ...``.
    posterior_probabilities : pd.DataFrame or array-like
        Posterior class-membership probabilities, one row per case and one
        column per latent class. Arrays get the class labels ``1, 2, ...``.

    Raises
    ------
    ValueError
        If the tables disagree on the number of cases, are empty, use the
        reserved class label ``"Total"``, or the probabilities are outside
        ``[0, 1]`` or do not sum to one per case.
    """

    name: str
    observed_data: pd.DataFrame
    posterior_probabilities: pd.DataFrame

    def __post_init__(self):
        self.name = str(self.name)
        self.observed_data = _as_frame(self.observed_data, prefix="x")
        self.posterior_probabilities = _as_frame(
            self.posterior_probabilities, prefix=""
        ).astype(float)
        self._validate()

    # ----------------------------------------------------------------------

    def _validate(self):
        n_obs = len(self.observed_data)
        n_post = len(self.posterior_probabilities)
        if n_obs != n_post:
            raise ValueError(
                f"Model '{self.name}': observed data has {n_obs} cases but "
                f"posterior probabilities have {n_post}"
            )
        if n_obs == 0:
            raise ValueError(f"Model '{self.name}' has no cases")
        if self.posterior_probabilities.shape[1] == 0:
            raise ValueError(f"Model '{self.name}' has no latent classes")
        if TOTAL_CLASS in self.posterior_probabilities.columns:
            raise ValueError(
                f"Model '{self.name}': the class label '{TOTAL_CLASS}' is "
                "reserved for the overall density"
            )
        if self.posterior_probabilities.columns.duplicated().any():
            raise ValueError(
                f"Model '{self.name}' has duplicated class labels"
            )

        probs = self.posterior_probabilities.to_numpy()
        if np.isnan(probs).any():
            raise ValueError(
                f"Model '{self.name}' has missing posterior probabilities"
            )
        if (probs < 0).any() or (probs > 1).any():
            raise ValueError(
                f"Model '{self.name}': posterior probabilities must lie "
                "in [0, 1]"
            )
        row_sums = probs.sum(axis=1)
        if not np.allclose(row_sums, 1.0, atol=ROW_SUM_ATOL):
            worst = int(np.argmax(np.abs(row_sums - 1.0)))
            raise ValueError(
                f"Model '{self.name}': posterior probabilities must sum to "
                f"1 for every case (case {worst} sums to "
                f"{row_sums[worst]:.6f})"
            )

    # ----------------------------------------------------------------------

    @property
    def n_cases(self) -> int:
        """Number of cases (rows)."""
        return len(self.observed_data)

    @property
    def class_labels(self) -> List[str]:
        """Latent class labels in column order."""
        return list(self.posterior_probabilities.columns)

    @property
    def numeric_variables(self) -> List[str]:
        """Names of the numeric observed variables, in column order."""
        return [
            col
            for col in self.observed_data.columns
            if pd.api.types.is_numeric_dtype(self.observed_data[col])
            and not pd.api.types.is_bool_dtype(self.observed_data[col])
        ]

    # ----------------------------------------------------------------------

    @classmethod
    def from_estimator(
        cls,
        estimator: Any,
        data: Union[pd.DataFrame, np.ndarray],
        name: str = "model",
        class_labels: Optional[Sequence] = None,
    ) -> "ModelResult":
        """
        Build a result from a fitted estimator with ``predict_proba``.

        Works with any fitted mixture estimator following the scikit-learn
        convention, e.g. ``sklearn.mixture.GaussianMixture``.

        Parameters
        ----------
        estimator : object
            Fitted estimator exposing ``predict_proba(data)``.
        data : pd.DataFrame or np.ndarray
            Observed data the posterior probabilities are computed for.
        name : str, optional
            Model label (default: "model").
        class_labels : sequence, optional
            Class labels. Defaults to the estimator's ``classes_`` if it has
            them, else ``1, 2, ...``.

        Returns
        -------
        ModelResult
            The observed data paired with the estimator's posteriors.
        """
        if not hasattr(estimator, "predict_proba"):
            raise ValueError(
                f"{type(estimator).__name__} has no predict_proba method"
            )
        probs = np.asarray(estimator.predict_proba(data), dtype=float)
        if class_labels is None:
            class_labels = getattr(estimator, "classes_", None)
        if class_labels is None:
            class_labels = range(1, probs.shape[1] + 1)
        posterior = pd.DataFrame(
            probs, columns=[str(label) for label in class_labels]
        )
        return cls(name=name, observed_data=data, posterior_probabilities=posterior)


# --------------------------------------------------------------------------
# Adapters
# --------------------------------------------------------------------------


@dataclass
class SingleModelResult:
    """Adapter around a single fitted model."""

    result: ModelResult

    def to_model_results(self) -> List[ModelResult]:
        return [self.result]


# --------------------------------------------------------------------------


@dataclass
class NamedModelCollection:
    """Adapter around named fitted models, e.g. one per class count.

    Parameters
    ----------
    models : Mapping
        Model name to either a ``ModelResult`` or an
        ``(observed_data, posterior_probabilities)`` pair. The mapping key
        always becomes the model name.
    """

    models: Mapping

    def to_model_results(self) -> List[ModelResult]:
        if len(self.models) == 0:
            raise ValueError("The model collection is empty")
        results = []
        for name, model in self.models.items():
            if isinstance(model, ModelResult):
                results.append(replace(model, name=str(name)))
            elif isinstance(model, (tuple, list)) and len(model) == 2:
                results.append(ModelResult(str(name), model[0], model[1]))
            else:
                raise ValueError(
                    f"Model '{name}' must be a ModelResult or an "
                    "(observed_data, posterior_probabilities) pair, got "
                    f"{type(model).__name__}"
                )
        return results


# --------------------------------------------------------------------------
# Type dispatch
# --------------------------------------------------------------------------


def _check_unique_names(results: List[ModelResult]) -> List[ModelResult]:
    names = [r.name for r in results]
    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        raise ValueError(f"Duplicated model names: {duplicated}")
    return results


@dispatch(ModelResult)
def as_model_results(x):
    """Wrap a single model result."""
    return SingleModelResult(x).to_model_results()


@dispatch(SingleModelResult)
def as_model_results(x):
    """Unwrap a single model adapter."""
    return x.to_model_results()


@dispatch(NamedModelCollection)
def as_model_results(x):
    """Unwrap a named collection, checking names are unique."""
    return _check_unique_names(x.to_model_results())


@dispatch(Mapping)
def as_model_results(x):
    """Treat a plain mapping as a named collection."""
    return _check_unique_names(NamedModelCollection(x).to_model_results())


@dispatch((list, tuple))
def as_model_results(x):
    """Accept a sequence of model results."""
    if len(x) == 0:
        raise ValueError("No models supplied")
    results = []
    for item in x:
        if not isinstance(item, ModelResult):
            raise ValueError(
                "Sequences must contain ModelResult objects, got "
                f"{type(item).__name__}"
            )
        results.append(item)
    return _check_unique_names(results)
