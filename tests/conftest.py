import sys
from pathlib import Path
from typing import Iterator

import pandas as pd
import pytest


@pytest.fixture(scope="session", autouse=True)
def _ensure_root_on_path() -> Iterator[Path]:
    """Guarantee that the `zratio` package and `main.py` are importable during the test session."""
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    yield root


@pytest.fixture()
def counts_df() -> pd.DataFrame:
    """Raw counts: MYC goes up and TP53 goes down in the tumor samples."""
    return pd.DataFrame(
        {
            "gene": ["GAPDH", "ACTB", "MYC", "TP53", "EGFR", "KRAS"],
            "ctrl_1": [1000, 800, 50, 200, 100, 300],
            "ctrl_2": [1100, 760, 55, 210, 95, 310],
            "tum_1": [1050, 820, 400, 25, 105, 290],
            "tum_2": [980, 790, 420, 30, 98, 305],
        }
    )


@pytest.fixture()
def groups_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "sample": ["ctrl_1", "ctrl_2", "tum_1", "tum_2"],
            "group": ["control", "control", "tumor", "tumor"],
        }
    )


@pytest.fixture()
def counts_csv(tmp_path, counts_df) -> Path:
    path = tmp_path / "counts.csv"
    counts_df.to_csv(path, index=False)
    return path


@pytest.fixture()
def groups_csv(tmp_path, groups_df) -> Path:
    path = tmp_path / "groups.csv"
    groups_df.to_csv(path, index=False)
    return path


@pytest.fixture()
def annotation_csv(tmp_path) -> Path:
    path = tmp_path / "annotation.csv"
    pd.DataFrame(
        {
            "gene": ["MYC", "TP53", "GAPDH"],
            "description": ["MYC proto-oncogene", "tumor protein p53", "glyceraldehyde-3-phosphate dehydrogenase"],
        }
    ).to_csv(path, index=False)
    return path


@pytest.fixture()
def count_matrix(counts_csv):
    from zratio.core.io import load_count_matrix

    return load_count_matrix(counts_csv).df


@pytest.fixture()
def sample_groups(groups_csv):
    from zratio.core.io import load_sample_groups

    return load_sample_groups(groups_csv)


@pytest.fixture()
def grouped_log(count_matrix, sample_groups):
    from zratio.core.preprocessing import log2_transform, split_by_groups

    return split_by_groups(log2_transform(count_matrix), sample_groups)
