"""
Reshaping fitted mixture models into a long density table.

Each model contributes one row per (case, class, variable) with the raw
value of the variable and the case's posterior probability of belonging to
the class, divided by the number of cases in the model. A synthetic
``"Total"`` class with probability one per case is added before the
division, so every case weighs ``1/N`` in the Total density and its class
weights add up to ``1/N`` as well.
"""

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .errors import NoVariablesError
from .models import TOTAL_CLASS, ModelResult, as_model_results

# Columns of the long density table, in order
LONG_COLUMNS = ["Title", "Variable", "Value", "Class", "Probability"]

# Leading columns of the wide table, before one column per variable
WIDE_COLUMNS = ["Title", "ID", "Class", "Probability"]


def _variable_keys(variables: List[str]) -> List[str]:
    """Positional column keys standing in for variable names while pivoting."""
    return [f"v{j}" for j in range(len(variables))]


# ==============================================================================
# Variable selection
# ==============================================================================


def select_variables(
    models: List[ModelResult], variables: Optional[Iterable[str]] = None
) -> List[str]:
    """
    Resolve the variables to plot across several models.

    Parameters
    ----------
    models : list of ModelResult
        Models whose observed data must all contain the variables.
    variables : iterable of str, optional
        Requested variables. If None, every numeric variable present in all
        models is used, in the column order of the first model.

    Returns
    -------
    list of str
        The variables to plot.

    Raises
    ------
    NoVariablesError
        If no variable is common to all models, or none of the requested
        variables is available in every model.
    """
    if variables is None:
        common = [
            name
            for name in models[0].numeric_variables
            if all(name in m.numeric_variables for m in models[1:])
        ]
        if not common:
            raise NoVariablesError(
                "The models share no numeric observed variables."
            )
        return common

    if isinstance(variables, str):
        variables = [variables]
    requested = list(dict.fromkeys(str(v) for v in variables))
    selected = [
        name
        for name in requested
        if all(name in m.observed_data.columns for m in models)
    ]
    if not selected:
        raise NoVariablesError(
            f"No valid variables provided. Requested {requested}, available: "
            f"{list(models[0].observed_data.columns)}"
        )
    return selected


# ==============================================================================
# Per-model pivot
# ==============================================================================


def _class_long_frame(
    model: ModelResult, variables: List[str], title: str
) -> pd.DataFrame:
    """
    Unpivot one model's class probabilities, keeping variables wide.

    Class labels and variables are pivoted under positional keys, so user
    names never meet the helper columns. Variable columns come out under
    the keys of :func:`_variable_keys`.
    """
    n_cases = model.n_cases
    class_labels = model.class_labels + [TOTAL_CLASS]

    # Total column, then every column divided by the number of cases
    probs = model.posterior_probabilities.to_numpy(dtype=float)
    probs = np.column_stack([probs, np.ones(n_cases)]) / n_cases
    weights = pd.DataFrame(probs)

    class_long = weights.melt(var_name="Class", value_name="Probability")
    class_long.insert(0, "ID", np.tile(np.arange(n_cases), len(class_labels)))
    class_long["Class"] = np.asarray(class_labels, dtype=object)[
        class_long["Class"].to_numpy(dtype=int)
    ]

    observed = model.observed_data[variables].apply(
        pd.to_numeric, errors="coerce"
    ).astype(float)
    observed.columns = _variable_keys(variables)

    class_long = class_long.merge(
        observed, left_on="ID", right_index=True, how="left"
    )
    class_long.insert(0, "Title", title)
    return class_long.reset_index(drop=True)


def _class_levels(models: List[ModelResult]) -> List[str]:
    """Class labels across models, Total first, in order of appearance."""
    levels = [TOTAL_CLASS]
    for model in models:
        for label in model.class_labels:
            if label not in levels:
                levels.append(label)
    return levels


# ==============================================================================
# Long density table
# ==============================================================================


def extract_long_table(
    models, variables: Optional[Iterable[str]] = None, longform: bool = True
) -> pd.DataFrame:
    """
    Build the long density table from one or more fitted models.

    Parameters
    ----------
    models : ModelResult, SingleModelResult, NamedModelCollection, mapping or
        sequence
        Fitted models; anything accepted by
        :func:`mixdens.models.as_model_results`.
    variables : iterable of str, optional
        Variables to keep. If None, all numeric variables common to every
        model.
    longform : bool, optional
        If True (default), unpivot the variables too and return the columns
        ``Title, Variable, Value, Class, Probability``. If False, keep one
        column per variable: ``Title, ID, Class, Probability, <variables>``.

    Returns
    -------
    pd.DataFrame
        The reshaped table. ``Class`` is an ordered categorical with
        ``"Total"`` as its first level followed by the classes in their
        original column order; ``Variable`` is an ordered categorical in
        variable order; ``Title`` is the model name with underscores
        replaced by spaces when several models are given, else ``""``.

    Raises
    ------
    NoVariablesError
        If no variable is left to plot.
    ValueError
        If two models get the same panel title, or, with
        ``longform=False``, a variable is named like a wide table column.
    """
    results = as_model_results(models)
    variables = select_variables(results, variables)

    multiple = len(results) > 1
    titles = [r.name.replace("_", " ") if multiple else "" for r in results]
    duplicated = sorted({t for t in titles if titles.count(t) > 1})
    if duplicated:
        raise ValueError(
            f"Model names give duplicated panel titles: {duplicated}. "
            "Names differing only by underscores and spaces cannot be "
            "told apart."
        )

    if not longform:
        clashes = [v for v in variables if v in WIDE_COLUMNS]
        if clashes:
            raise ValueError(
                f"Variables {clashes} clash with the columns of the wide "
                "table; use longform=True"
            )

    plot_df = pd.concat(
        [
            _class_long_frame(model, variables, title)
            for model, title in zip(results, titles)
        ],
        ignore_index=True,
    )

    keys = _variable_keys(variables)
    if longform:
        plot_df = plot_df.melt(
            id_vars=WIDE_COLUMNS,
            value_vars=keys,
            var_name="Variable",
            value_name="Value",
        )
        plot_df["Variable"] = pd.Categorical(
            plot_df["Variable"].map(dict(zip(keys, variables))),
            categories=variables,
            ordered=True,
        )
        plot_df = plot_df[LONG_COLUMNS].reset_index(drop=True)
    else:
        plot_df = plot_df.rename(columns=dict(zip(keys, variables)))

    plot_df["Title"] = pd.Categorical(
        plot_df["Title"].astype(str),
        categories=list(dict.fromkeys(titles)),
        ordered=True,
    )
    plot_df["Class"] = pd.Categorical(
        plot_df["Class"].astype(str),
        categories=_class_levels(results),
        ordered=True,
    )
    return plot_df


# ==============================================================================
# Long table validation
# ==============================================================================


def as_long_table(
    plot_df: pd.DataFrame, variables: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """
    Validate an already reshaped long table and restore its categoricals.

    Parameters
    ----------
    plot_df : pd.DataFrame
        Table with the columns ``Variable, Value, Class, Probability`` and
        optionally ``Title`` (defaults to ``""``).
    variables : iterable of str, optional
        Variables to keep.

    Returns
    -------
    pd.DataFrame
        A copy with the columns of :data:`LONG_COLUMNS`, ordered categorical
        ``Title``, ``Variable`` and ``Class`` (``"Total"`` first when
        present).

    Raises
    ------
    ValueError
        If a required column is missing.
    NoVariablesError
        If no variable is left after filtering.
    """
    missing = [c for c in LONG_COLUMNS[1:] if c not in plot_df.columns]
    if missing:
        raise ValueError(f"Long density table is missing columns {missing}")

    plot_df = plot_df.copy()
    if "Title" not in plot_df.columns:
        plot_df["Title"] = ""

    for column in ("Title", "Variable", "Class"):
        if not isinstance(plot_df[column].dtype, pd.CategoricalDtype):
            plot_df[column] = pd.Categorical(
                plot_df[column].astype(str),
                categories=list(dict.fromkeys(plot_df[column].astype(str))),
                ordered=True,
            )

    levels = list(plot_df["Class"].cat.categories)
    if TOTAL_CLASS in levels and levels[0] != TOTAL_CLASS:
        levels.remove(TOTAL_CLASS)
        plot_df["Class"] = plot_df["Class"].cat.reorder_categories(
            [TOTAL_CLASS] + levels, ordered=True
        )

    if variables is not None:
        if isinstance(variables, str):
            variables = [variables]
        keep = [
            v
            for v in dict.fromkeys(str(v) for v in variables)
            if v in plot_df["Variable"].cat.categories
        ]
        plot_df = plot_df[plot_df["Variable"].isin(keep)].copy()
        plot_df["Variable"] = plot_df["Variable"].cat.set_categories(keep)

    plot_df["Variable"] = plot_df["Variable"].cat.remove_unused_categories()
    if len(plot_df["Variable"].cat.categories) == 0:
        raise NoVariablesError("No valid variables provided.")

    plot_df["Value"] = pd.to_numeric(plot_df["Value"], errors="coerce")
    plot_df["Probability"] = plot_df["Probability"].astype(float)
    return plot_df[LONG_COLUMNS].reset_index(drop=True)
