from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import pandas as pd
from scipy.stats import norm

from .preprocessing import GroupedMatrix

LOGGER = logging.getLogger(__name__)

DIRECTIONS = ("up", "down", "abs")


class ZRatioError(Exception):
    """Raised when Z-scores or Z-ratios are undefined for the given data."""


@dataclass(frozen=True)
class ZRatioResult:
    """Per-gene Z-ratio statistics for group B relative to group A."""

    group_a: str
    group_b: str
    zscores: pd.DataFrame  # genes x samples, both groups
    table: pd.DataFrame  # indexed by gene, sorted as the input matrix
    diff_std: float
    ddof: int = 0

    @property
    def mean_z_a(self) -> pd.Series:
        return self.table[f"mean_z_{self.group_a}"]

    @property
    def mean_z_b(self) -> pd.Series:
        return self.table[f"mean_z_{self.group_b}"]


def sample_zscores(log_matrix: pd.DataFrame, ddof: int = 0) -> pd.DataFrame:
    """Standardize every sample column over its genes: (x - mean) / std."""
    if log_matrix.empty:
        raise ZRatioError("Cannot compute Z-scores of an empty matrix.")
    arr = log_matrix.to_numpy(dtype=float)
    means = arr.mean(axis=0)
    stds = arr.std(axis=0, ddof=ddof)
    bad = ~np.isfinite(stds) | (stds == 0)
    if bad.any():
        cols = [str(c) for c in log_matrix.columns[bad]]
        raise ZRatioError(f"Standard deviation is zero or undefined for sample(s): {cols}")
    z = (arr - means) / stds
    return pd.DataFrame(z, index=log_matrix.index, columns=log_matrix.columns)


def z_ratio(mean_z_a: pd.Series, mean_z_b: pd.Series, ddof: int = 0) -> pd.Series:
    """(mean_z_b - mean_z_a) / std of that difference over all genes."""
    diff = mean_z_b - mean_z_a
    sd = float(np.std(diff.to_numpy(dtype=float), ddof=ddof))
    if not np.isfinite(sd) or sd == 0:
        raise ZRatioError("The Z-score difference has no spread across genes; Z-ratio is undefined.")
    return (diff / sd).rename("z_ratio")


def compute_z_ratio(grouped: GroupedMatrix, ddof: int = 0) -> ZRatioResult:
    z_a = sample_zscores(grouped.a, ddof=ddof)
    z_b = sample_zscores(grouped.b, ddof=ddof)

    mean_a = z_a.mean(axis=1)
    mean_b = z_b.mean(axis=1)
    diff = mean_b - mean_a
    ratio = z_ratio(mean_a, mean_b, ddof=ddof)

    table = pd.DataFrame(
        {
            f"mean_z_{grouped.group_a}": mean_a,
            f"mean_z_{grouped.group_b}": mean_b,
            "z_diff": diff,
            "z_ratio": ratio,
        }
    )
    table["p_value"] = 2.0 * norm.sf(np.abs(table["z_ratio"].to_numpy()))
    order = np.argsort(-table["z_ratio"].to_numpy(), kind="stable")
    ranks = np.empty(len(order), dtype=int)
    ranks[order] = np.arange(1, len(order) + 1)
    table["rank"] = ranks
    table.index.name = "gene"

    sd = float(np.std(diff.to_numpy(dtype=float), ddof=ddof))
    LOGGER.info(
        "Z-ratio computed for %d genes (%s vs %s), sd(diff)=%.4f",
        len(table), grouped.group_b, grouped.group_a, sd,
    )
    return ZRatioResult(
        group_a=grouped.group_a,
        group_b=grouped.group_b,
        zscores=pd.concat([z_a, z_b], axis=1),
        table=table,
        diff_std=sd,
        ddof=ddof,
    )


def rank_genes(
    result: Union[ZRatioResult, pd.DataFrame],
    n: Optional[int] = None,
    direction: str = "up",
) -> pd.DataFrame:
    """
    Order genes by Z-ratio.

    - up: largest Z-ratio first (higher in group B)
    - down: smallest Z-ratio first (lower in group B)
    - abs: largest absolute Z-ratio first
    Ties keep the input order.
    """
    table = result.table if isinstance(result, ZRatioResult) else result
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {'|'.join(DIRECTIONS)}, got {direction!r}")

    values = table["z_ratio"].to_numpy(dtype=float)
    if direction == "up":
        order = np.argsort(-values, kind="stable")
    elif direction == "down":
        order = np.argsort(values, kind="stable")
    else:
        order = np.argsort(-np.abs(values), kind="stable")

    if n is not None:
        order = order[: max(0, int(n))]
    return table.iloc[order]


def significant_genes(table: pd.DataFrame, threshold: float = 1.96) -> pd.DataFrame:
    mask = table["z_ratio"].abs() >= threshold
    return table.loc[mask]


def threshold_for_alpha(alpha: float) -> float:
    """Two-sided normal cutoff for the Z-ratio at significance `alpha`."""
    return float(norm.isf(alpha / 2.0))
