"""Loading, cleaning and Z-ratio statistics on count matrices."""

from __future__ import annotations

from .io import InputDataError, LoadResult, load_count_matrix, load_sample_groups
from .preprocessing import GroupAssignmentError, GroupedMatrix, log2_transform, split_by_groups
from .zscore import ZRatioError, ZRatioResult, compute_z_ratio, rank_genes

__all__ = [
    "InputDataError",
    "LoadResult",
    "load_count_matrix",
    "load_sample_groups",
    "GroupAssignmentError",
    "GroupedMatrix",
    "log2_transform",
    "split_by_groups",
    "ZRatioError",
    "ZRatioResult",
    "compute_z_ratio",
    "rank_genes",
]
