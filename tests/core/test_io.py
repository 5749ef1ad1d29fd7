import pandas as pd
import pytest

from zratio.core.io import (
    InputDataError,
    export_table,
    is_csv,
    is_excel,
    list_excel_sheets,
    load_count_matrix,
    load_sample_groups,
    load_table,
)


def test_load_count_matrix_indexes_genes_and_keeps_numeric_samples(counts_csv):
    result = load_count_matrix(counts_csv)

    matrix = result.df
    assert matrix.index.name == "gene"
    assert list(matrix.columns) == ["ctrl_1", "ctrl_2", "tum_1", "tum_2"]
    assert matrix.loc["MYC", "tum_1"] == 400
    assert all(dtype.kind in {"f", "i"} for dtype in matrix.dtypes)
    assert result.meta == {"n_genes": 6, "n_samples": 4, "dropped_columns": []}


def test_load_count_matrix_drops_text_columns(tmp_path, counts_df):
    path = tmp_path / "with_text.csv"
    counts_df.assign(biotype="protein_coding").to_csv(path, index=False)

    result = load_count_matrix(path)

    assert "biotype" not in result.df.columns
    assert result.meta["dropped_columns"] == ["biotype"]


def test_load_count_matrix_reads_tsv_and_named_gene_column(tmp_path, counts_df):
    path = tmp_path / "counts.tsv"
    counts_df[["ctrl_1", "gene", "tum_1"]].to_csv(path, sep="\t", index=False)

    matrix = load_count_matrix(path, gene_column="gene").df

    assert list(matrix.columns) == ["ctrl_1", "tum_1"]
    assert matrix.loc["TP53", "ctrl_1"] == 200


def test_load_count_matrix_reads_excel(tmp_path, counts_df):
    path = tmp_path / "counts.xlsx"
    counts_df.to_excel(path, index=False, engine="openpyxl")

    matrix = load_count_matrix(path).df

    assert matrix.shape == (6, 4)
    assert matrix.loc["EGFR", "ctrl_2"] == 95


def test_load_count_matrix_without_samples_fails(tmp_path):
    path = tmp_path / "genes_only.csv"
    pd.DataFrame({"gene": ["A", "B"], "note": ["x", "y"]}).to_csv(path, index=False)

    with pytest.raises(InputDataError, match="no numeric sample columns"):
        load_count_matrix(path)


def test_missing_file_raises_input_error(tmp_path):
    with pytest.raises(InputDataError, match="not found"):
        load_table(tmp_path / "absent.csv")


def test_load_sample_groups_keeps_first_duplicate(tmp_path):
    path = tmp_path / "groups.csv"
    pd.DataFrame(
        {"id": [" s1", "s2", "s1"], "condition": ["ctrl ", "case", "case"]}
    ).to_csv(path, index=False)

    groups = load_sample_groups(path)

    assert groups.to_dict() == {"s1": "ctrl", "s2": "case"}
    assert groups.index.name == "sample"


def test_load_sample_groups_unknown_column(groups_csv):
    with pytest.raises(InputDataError, match="column 'batch' not found"):
        load_sample_groups(groups_csv, group_column="batch")


def test_export_table_creates_directories(tmp_path):
    df = pd.DataFrame({"z_ratio": [1.5, -0.5]}, index=pd.Index(["A", "B"], name="gene"))

    out = export_table(df, tmp_path / "nested" / "ranking.tsv")

    assert out.exists()
    back = pd.read_csv(out, sep="\t", index_col=0)
    assert back.loc["A", "z_ratio"] == 1.5


def test_extension_helpers():
    assert is_excel("counts.XLSX")
    assert is_csv("counts.tsv")
    assert not is_csv("counts.parquet")


def test_list_excel_sheets(tmp_path, counts_df):
    path = tmp_path / "book.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        counts_df.to_excel(writer, sheet_name="counts", index=False)
        counts_df.to_excel(writer, sheet_name="raw", index=False)

    assert list_excel_sheets(path) == ["counts", "raw"]
    assert load_count_matrix(path, sheet_name="raw").df.shape == (6, 4)


def test_sample_ids_with_leading_zeros_match_matrix_headers(tmp_path):
    counts_path = tmp_path / "counts.csv"
    groups_path = tmp_path / "groups.csv"
    pd.DataFrame({"gene": ["A", "B"], "001": [1, 2], "002": [3, 4]}).to_csv(counts_path, index=False)
    groups_path.write_text("sample,group\n001,ctrl\n002,1\n003,\n", encoding="utf-8")

    matrix = load_count_matrix(counts_path).df
    groups = load_sample_groups(groups_path)

    assert list(matrix.columns) == ["001", "002"]
    assert groups.to_dict() == {"001": "ctrl", "002": "1"}
