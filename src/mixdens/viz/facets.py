"""Panel layout and panel labels of density figures."""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


def facet_label_map(
    levels: Sequence[str], overrides: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Panel label for every Variable or Title level.

    Labels default to the level itself. A key of ``overrides`` replaces the
    label of the level it matches, ignoring case; keys matching no level
    are ignored.

    Parameters
    ----------
    levels : sequence of str
        Variable and Title values shown on panels.
    overrides : mapping of str to str, optional
        Replacement labels.

    Returns
    -------
    dict
        Level to label.
    """
    labels = {str(level): str(level) for level in levels}
    if not overrides:
        return labels
    lowered = {str(key).lower(): str(value) for key, value in overrides.items()}
    for level in labels:
        if level.lower() in lowered:
            labels[level] = lowered[level.lower()]
    return labels


# ------------------------------------------------------------------------------


@dataclass
class FacetLayout:
    """Grid of panels, each identified by its (title, variable) pair.

    Attributes
    ----------
    panels : list of list of tuple
        ``panels[row][col]`` is the ``(title, variable)`` drawn there.
    row_labels : list of str or None
        Label on the right of each row, or None without row strips.
    col_labels : list of str or None
        Label above each column, or None without column strips.
    free_x : bool
        Whether each column gets its own x scale (columns are variables).
    """

    panels: List[List[Tuple[str, str]]]
    row_labels: Optional[List[str]]
    col_labels: Optional[List[str]]
    free_x: bool

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.panels), len(self.panels[0])


def facet_layout(
    titles: Sequence[str],
    variables: Sequence[str],
    labels: Optional[Mapping[str, str]] = None,
) -> FacetLayout:
    """
    Arrange (title, variable) panels.

    Several titles and several variables give one row per title and one
    column per variable. Several titles and one variable give one column
    per title. A single title gives one column per variable. Columns of
    variables have free x scales.

    Parameters
    ----------
    titles : sequence of str
        Title levels.
    variables : sequence of str
        Variable levels.
    labels : mapping, optional
        Panel labels from :func:`facet_label_map`.

    Returns
    -------
    FacetLayout
    """
    labels = labels or {}
    titles = [str(t) for t in titles]
    variables = [str(v) for v in variables]

    def _label(level):
        return labels.get(level, level)

    if len(titles) > 1 and len(variables) > 1:
        return FacetLayout(
            panels=[[(t, v) for v in variables] for t in titles],
            row_labels=[_label(t) for t in titles],
            col_labels=[_label(v) for v in variables],
            free_x=True,
        )
    if len(titles) > 1:
        return FacetLayout(
            panels=[[(t, variables[0]) for t in titles]],
            row_labels=None,
            col_labels=[_label(t) for t in titles],
            free_x=False,
        )
    return FacetLayout(
        panels=[[(titles[0], v) for v in variables]],
        row_labels=None,
        col_labels=[_label(v) for v in variables] if len(variables) > 1 else None,
        free_x=True,
    )
