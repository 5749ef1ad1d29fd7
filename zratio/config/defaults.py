from __future__ import annotations

from typing import Any, Dict

DEFAULT_PROJECT_NAME = "zratio - differential expression ranking"
DEFAULT_LOG_LEVEL = "INFO"

MISSING_POLICIES = ("drop", "zero", "mean")

DEFAULT_INPUT_SETTINGS: Dict[str, Any] = {
    "gene_column": None,
    "sample_column": None,
    "group_column": None,
    "csv_sep": ",",
}

DEFAULT_ANALYSIS_SETTINGS: Dict[str, Any] = {
    "pseudocount": 1.0,
    "ddof": 0,
    "min_total_count": 0.0,
    "missing_policy": "drop",
    "min_samples": 2,
    "top_n": 10,
    "alpha": 0.05,
}
