from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np
import pandas as pd

from .io import InputDataError

LOGGER = logging.getLogger(__name__)


@dataclass
class CleaningReport:
    matrix: pd.DataFrame
    n_genes_input: int
    dropped_missing: List[str] = field(default_factory=list)
    collapsed_duplicates: List[str] = field(default_factory=list)
    dropped_low_counts: List[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "genes_input": self.n_genes_input,
            "genes_dropped_missing": len(self.dropped_missing),
            "genes_collapsed": len(self.collapsed_duplicates),
            "genes_dropped_low_counts": len(self.dropped_low_counts),
            "genes_kept": int(self.matrix.shape[0]),
        }


def apply_missing_policy(matrix: pd.DataFrame, policy: str = "drop") -> pd.DataFrame:
    """
    Resolve missing counts.

    - drop: remove genes with any missing value.
    - zero: missing counts become 0.
    - mean: missing counts become the mean of the gene over the other samples;
      genes without any observed value are removed.
    """
    values = matrix.astype(float)
    if (values < 0).to_numpy().any():
        raise InputDataError("Counts must be non-negative.")

    if policy == "drop":
        return values.dropna(axis=0, how="any")
    if policy == "zero":
        return values.fillna(0.0)
    if policy == "mean":
        out = values.dropna(axis=0, how="all")
        row_means = out.mean(axis=1)
        return out.apply(lambda col: col.fillna(row_means))
    raise ValueError(f"Unknown missing policy: {policy}")


def collapse_duplicate_genes(matrix: pd.DataFrame, how: str = "sum") -> pd.DataFrame:
    if not matrix.index.has_duplicates:
        return matrix
    if how not in {"sum", "mean"}:
        raise ValueError(f"Unknown aggregation: {how}")
    grouped = matrix.groupby(level=0, sort=False)
    out = grouped.sum() if how == "sum" else grouped.mean()
    out.index.name = matrix.index.name
    return out


def filter_low_counts(matrix: pd.DataFrame, min_total: float = 0.0) -> pd.DataFrame:
    if min_total <= 0:
        return matrix
    totals = matrix.sum(axis=1)
    return matrix.loc[totals >= min_total]


def clean_count_matrix(
    matrix: pd.DataFrame,
    policy: str = "drop",
    min_total: float = 0.0,
    how: str = "sum",
) -> CleaningReport:
    n_input = int(matrix.shape[0])

    resolved = apply_missing_policy(matrix, policy)
    missing = matrix.isna()
    if policy == "drop":
        lost = missing.any(axis=1)
    elif policy == "mean":
        lost = missing.all(axis=1)
    else:
        lost = pd.Series(False, index=matrix.index)
    dropped_missing = list(dict.fromkeys(matrix.index[lost.to_numpy()]))

    duplicated = resolved.index[resolved.index.duplicated()].unique().tolist()
    collapsed = collapse_duplicate_genes(resolved, how=how)

    filtered = filter_low_counts(collapsed, min_total)
    kept = set(filtered.index)
    dropped_low = [g for g in collapsed.index if g not in kept]

    if filtered.empty:
        raise InputDataError("No genes left after cleaning the count matrix.")

    report = CleaningReport(
        matrix=filtered,
        n_genes_input=n_input,
        dropped_missing=dropped_missing,
        collapsed_duplicates=duplicated,
        dropped_low_counts=dropped_low,
    )
    LOGGER.info("Cleaning summary: %s", report.summary())
    return report


def has_missing(matrix: pd.DataFrame) -> bool:
    return bool(np.isnan(matrix.to_numpy(dtype=float)).any())
