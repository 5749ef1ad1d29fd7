from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

LOGGER = logging.getLogger(__name__)


class GroupAssignmentError(Exception):
    """Raised when samples cannot be split into the two comparison groups."""


@dataclass
class GroupedMatrix:
    group_a: str
    group_b: str
    a: pd.DataFrame  # genes x samples of group A
    b: pd.DataFrame  # genes x samples of group B
    unassigned: List[str] = field(default_factory=list)

    @property
    def combined(self) -> pd.DataFrame:
        return pd.concat([self.a, self.b], axis=1)

    @property
    def labels(self) -> pd.Series:
        return pd.Series(
            [self.group_a] * self.a.shape[1] + [self.group_b] * self.b.shape[1],
            index=list(self.a.columns) + list(self.b.columns),
            name="group",
        )


def log2_transform(matrix: pd.DataFrame, pseudocount: float = 1.0) -> pd.DataFrame:
    """log2(x + pseudocount), keeping labels."""
    if pseudocount <= 0:
        raise ValueError(f"pseudocount must be positive, got {pseudocount}")
    return np.log2(matrix.astype(float) + pseudocount)


def resolve_groups(
    groups: pd.Series,
    group_a: Optional[str] = None,
    group_b: Optional[str] = None,
) -> Tuple[str, str]:
    labels = list(dict.fromkeys(groups.astype(str)))  # order of first appearance

    if group_a is not None and group_b is not None:
        if group_a == group_b:
            raise GroupAssignmentError("Both comparison groups are the same label.")
        missing = [g for g in (group_a, group_b) if g not in labels]
        if missing:
            raise GroupAssignmentError(f"Groups not present in the label file: {missing}. Available: {labels}")
        return group_a, group_b

    chosen = [g for g in (group_a, group_b) if g is not None]
    if chosen and chosen[0] not in labels:
        raise GroupAssignmentError(f"Group '{chosen[0]}' not present in the label file. Available: {labels}")
    if len(labels) != 2:
        raise GroupAssignmentError(
            f"Expected exactly two groups in the label file, found {len(labels)}: {labels}. "
            "Choose the two groups to compare explicitly."
        )
    if group_a is not None:
        return group_a, next(g for g in labels if g != group_a)
    if group_b is not None:
        return next(g for g in labels if g != group_b), group_b
    return labels[0], labels[1]


def split_by_groups(
    matrix: pd.DataFrame,
    groups: pd.Series,
    group_a: Optional[str] = None,
    group_b: Optional[str] = None,
    min_samples: int = 2,
) -> GroupedMatrix:
    """Split the matrix columns into the two groups named in `groups`."""
    label_a, label_b = resolve_groups(groups, group_a, group_b)

    labels = groups.astype(str)
    labelled = [c for c in matrix.columns if c in labels.index]
    unassigned = [c for c in matrix.columns if c not in labels.index]
    if unassigned:
        LOGGER.warning("Samples without a group label are ignored: %s", unassigned)

    cols_a = [c for c in labelled if labels[c] == label_a]
    cols_b = [c for c in labelled if labels[c] == label_b]

    for label, cols in ((label_a, cols_a), (label_b, cols_b)):
        if len(cols) < min_samples:
            raise GroupAssignmentError(
                f"Group '{label}' has {len(cols)} sample(s) in the count matrix; at least {min_samples} required."
            )

    not_in_matrix = [s for s in labels.index if s not in matrix.columns]
    if not_in_matrix:
        LOGGER.warning("Labelled samples missing from the count matrix: %s", not_in_matrix)

    LOGGER.info("Groups: %s (%d samples) vs %s (%d samples)", label_a, len(cols_a), label_b, len(cols_b))
    return GroupedMatrix(
        group_a=label_a,
        group_b=label_b,
        a=matrix[cols_a],
        b=matrix[cols_b],
        unassigned=unassigned,
    )
