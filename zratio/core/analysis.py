from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd


@dataclass
class AnalysisResult:
    summary: pd.DataFrame  # one row per sample
    correlation: pd.DataFrame  # samples x samples, on log2 values


def library_summary(counts: pd.DataFrame) -> pd.DataFrame:
    """
    Per-sample statistics of the raw counts.

    Columns: library_size (total counts), detected_genes (count > 0),
    zero_count, na_count, plus the `describe()` quantiles of each sample.
    """
    desc = counts.describe(include=[np.number]).T
    desc.insert(0, "library_size", counts.sum(axis=0))
    desc.insert(1, "detected_genes", (counts > 0).sum(axis=0))
    desc["zero_count"] = (counts == 0).sum(axis=0)
    desc["na_count"] = counts.isna().sum(axis=0)
    desc.index.name = "sample"
    return desc


def sample_correlation(log_matrix: pd.DataFrame, method: str = "pearson") -> pd.DataFrame:
    corr = log_matrix.corr(method=method)
    corr.index.name = "sample"
    return corr


def run_basic_analysis(counts: pd.DataFrame, log_matrix: pd.DataFrame, method: str = "pearson") -> AnalysisResult:
    return AnalysisResult(summary=library_summary(counts), correlation=sample_correlation(log_matrix, method=method))
