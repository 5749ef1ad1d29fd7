import numpy as np
import pandas as pd
import pytest

from zratio.core.zscore import (
    ZRatioError,
    compute_z_ratio,
    rank_genes,
    sample_zscores,
    significant_genes,
    threshold_for_alpha,
    z_ratio,
)


def test_sample_zscores_standardize_each_sample(grouped_log):
    z = sample_zscores(grouped_log.combined)

    assert np.allclose(z.mean(axis=0), 0.0)
    assert np.allclose(z.std(axis=0, ddof=0), 1.0)
    assert np.allclose(sample_zscores(grouped_log.combined, ddof=1).std(axis=0, ddof=1), 1.0)


def test_sample_zscores_constant_sample_is_undefined():
    df = pd.DataFrame({"s1": [1.0, 2.0, 3.0], "flat": [5.0, 5.0, 5.0]})

    with pytest.raises(ZRatioError, match="flat"):
        sample_zscores(df)


def test_sample_zscores_empty_matrix():
    with pytest.raises(ZRatioError, match="empty"):
        sample_zscores(pd.DataFrame())


def test_z_ratio_divides_by_spread_of_difference():
    a = pd.Series([0.0, 0.0, 0.0, 0.0], index=list("ABCD"))
    b = pd.Series([1.0, -1.0, 1.0, -1.0], index=list("ABCD"))

    assert z_ratio(a, b).tolist() == [1.0, -1.0, 1.0, -1.0]
    with pytest.raises(ZRatioError, match="no spread"):
        z_ratio(a, a)


def test_compute_z_ratio_ranks_regulated_genes(grouped_log):
    result = compute_z_ratio(grouped_log)
    table = result.table

    assert list(table.columns) == ["mean_z_control", "mean_z_tumor", "z_diff", "z_ratio", "p_value", "rank"]
    assert list(table.index) == list(grouped_log.a.index)
    assert np.isclose(table["z_ratio"].mean(), 0.0)
    assert np.isclose(table["z_ratio"].std(ddof=0), 1.0)
    assert table.loc["MYC", "rank"] == 1
    assert table.loc["TP53", "rank"] == len(table)
    assert sorted(table["rank"]) == list(range(1, len(table) + 1))
    assert table["p_value"].between(0, 1).all()
    assert np.allclose(result.mean_z_b - result.mean_z_a, table["z_diff"])
    assert result.zscores.shape == grouped_log.combined.shape


def test_rank_genes_directions(grouped_log):
    result = compute_z_ratio(grouped_log)

    assert rank_genes(result, n=1).index.tolist() == ["MYC"]
    assert rank_genes(result, n=1, direction="down").index.tolist() == ["TP53"]
    by_abs = rank_genes(result, n=2, direction="abs").index.tolist()
    assert set(by_abs) == {"MYC", "TP53"}
    assert sorted(rank_genes(result).index) == sorted(result.table.index)


def test_rank_genes_keeps_input_order_on_ties():
    table = pd.DataFrame({"z_ratio": [1.0, 2.0, 1.0, 2.0]}, index=["w", "x", "y", "z"])

    assert rank_genes(table).index.tolist() == ["x", "z", "w", "y"]
    assert rank_genes(table, direction="down").index.tolist() == ["w", "y", "x", "z"]


def test_rank_genes_rejects_unknown_direction(grouped_log):
    with pytest.raises(ValueError, match="direction"):
        rank_genes(compute_z_ratio(grouped_log), direction="sideways")


def test_significant_genes_and_alpha_threshold():
    table = pd.DataFrame({"z_ratio": [2.5, -2.0, 0.3]}, index=["A", "B", "C"])

    assert np.isclose(threshold_for_alpha(0.05), 1.959964, atol=1e-5)
    assert significant_genes(table).index.tolist() == ["A", "B"]
    assert significant_genes(table, threshold=2.2).index.tolist() == ["A"]
