from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Union

import pandas as pd

LOGGER = logging.getLogger(__name__)

FileLike = Union[str, Path, IO]


class InputDataError(Exception):
    """Raised when an input table cannot be turned into analysis data."""


@dataclass
class LoadResult:
    df: pd.DataFrame
    source_name: str
    sheet_name: Optional[str] = None
    meta: Optional[dict] = None


def is_excel(filename: str) -> bool:
    return filename.lower().endswith((".xlsx", ".xlsm", ".xls"))


def is_csv(filename: str) -> bool:
    return filename.lower().endswith((".csv", ".tsv", ".txt"))


def _is_tab_separated(filename: str) -> bool:
    return filename.lower().endswith((".tsv", ".txt"))


def list_excel_sheets(file: FileLike) -> List[str]:
    """Return sheet names if file is an Excel workbook; else empty list."""
    try:
        xls = pd.ExcelFile(file)
    except (ValueError, OSError):
        return []
    return list(xls.sheet_names)


def _source_name(file: FileLike, file_name: Optional[str]) -> str:
    if file_name:
        return file_name
    if isinstance(file, (str, Path)):
        return str(file)
    return str(getattr(file, "name", "uploaded"))


def load_table(
    file: FileLike,
    file_name: Optional[str] = None,
    sheet_name: Optional[Union[str, int]] = None,
    csv_sep: str = ",",
    csv_decimal: str = ".",
    dtype=None,
) -> LoadResult:
    """
    Load CSV/TSV or Excel into a DataFrame, with optional sheet selection.
    - file: path or file-like object
    - file_name: used to infer type when file-like
    - dtype: forwarded to the pandas reader (e.g. `str` to keep ids like "001")
    """
    source_name = _source_name(file, file_name)

    try:
        if is_excel(source_name):
            df = pd.read_excel(file, sheet_name=0 if sheet_name is None else sheet_name, dtype=dtype)
            return LoadResult(df=df, source_name=source_name, sheet_name=sheet_name)

        if is_csv(source_name):
            sep = "\t" if _is_tab_separated(source_name) else csv_sep
            df = pd.read_csv(file, sep=sep, decimal=csv_decimal, dtype=dtype)
            return LoadResult(df=df, source_name=source_name, sheet_name=None)
    except FileNotFoundError as exc:
        raise InputDataError(f"File not found: {source_name}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
        raise InputDataError(f"Could not read {source_name}: {exc}") from exc

    # Unknown extension: attempt CSV then Excel
    try:
        df = pd.read_csv(file, sep=csv_sep, decimal=csv_decimal, dtype=dtype)
        return LoadResult(df=df, source_name=source_name, sheet_name=None)
    except FileNotFoundError as exc:
        raise InputDataError(f"File not found: {source_name}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError):
        if hasattr(file, "seek"):
            file.seek(0)
        try:
            df = pd.read_excel(file, sheet_name=0 if sheet_name is None else sheet_name, dtype=dtype)
        except (ValueError, OSError) as exc:
            raise InputDataError(f"Unsupported table format: {source_name}") from exc
        return LoadResult(df=df, source_name=source_name, sheet_name=sheet_name)


def load_count_matrix(
    file: FileLike,
    gene_column: Optional[str] = None,
    file_name: Optional[str] = None,
    sheet_name: Optional[Union[str, int]] = None,
    csv_sep: str = ",",
) -> LoadResult:
    """
    Load a gene-by-sample count matrix.

    The gene identifiers are taken from `gene_column` (first column by default)
    and become the index, named ``gene``. Every other column is a sample and is
    coerced to numeric; columns without a single numeric value are dropped and
    reported in ``meta["dropped_columns"]``.
    """
    loaded = load_table(file, file_name=file_name, sheet_name=sheet_name, csv_sep=csv_sep)
    raw = loaded.df
    if raw.shape[1] < 2:
        raise InputDataError(
            f"{loaded.source_name}: a count matrix needs a gene column and at least one sample column."
        )

    gene_col = gene_column or raw.columns[0]
    if gene_col not in raw.columns:
        raise InputDataError(f"{loaded.source_name}: gene column '{gene_col}' not found.")

    genes = raw[gene_col].astype(str).str.strip()
    values = raw.drop(columns=[gene_col]).apply(pd.to_numeric, errors="coerce")
    values.columns = [str(c).strip() for c in values.columns]

    empty_cols = [c for c in values.columns if values[c].isna().all()]
    if empty_cols:
        LOGGER.warning("Dropping non-numeric columns from %s: %s", loaded.source_name, empty_cols)
        values = values.drop(columns=empty_cols)
    if values.shape[1] == 0:
        raise InputDataError(f"{loaded.source_name}: no numeric sample columns found.")

    values.index = pd.Index(genes, name="gene")
    values.columns.name = "sample"

    meta = {
        "n_genes": int(values.shape[0]),
        "n_samples": int(values.shape[1]),
        "dropped_columns": empty_cols,
    }
    LOGGER.info("Loaded count matrix %s: %d genes x %d samples", loaded.source_name, meta["n_genes"], meta["n_samples"])
    return LoadResult(df=values, source_name=loaded.source_name, sheet_name=loaded.sheet_name, meta=meta)


def load_sample_groups(
    file: FileLike,
    sample_column: Optional[str] = None,
    group_column: Optional[str] = None,
    file_name: Optional[str] = None,
    csv_sep: str = ",",
) -> pd.Series:
    """Load the sample -> group label file as a Series indexed by sample id."""
    # ids and labels stay text so "001" still matches the count matrix header
    loaded = load_table(file, file_name=file_name, csv_sep=csv_sep, dtype=str)
    raw = loaded.df
    if raw.shape[1] < 2:
        raise InputDataError(f"{loaded.source_name}: expected a sample column and a group column.")

    sample_col = sample_column or raw.columns[0]
    group_col = group_column or raw.columns[1]
    for col in (sample_col, group_col):
        if col not in raw.columns:
            raise InputDataError(f"{loaded.source_name}: column '{col}' not found.")

    labels = raw[[sample_col, group_col]].dropna()
    samples = labels[sample_col].astype(str).str.strip()
    groups = labels[group_col].astype(str).str.strip()

    duplicated = samples[samples.duplicated()].unique().tolist()
    if duplicated:
        LOGGER.warning("Duplicated sample ids in %s, keeping first label: %s", loaded.source_name, duplicated)

    series = pd.Series(groups.values, index=pd.Index(samples.values, name="sample"), name="group")
    series = series[~series.index.duplicated(keep="first")]
    if series.empty:
        raise InputDataError(f"{loaded.source_name}: no sample labels found.")
    return series


def export_table(df: pd.DataFrame, path: Union[str, Path], index: bool = True) -> Path:
    """Write `df` as CSV (or TSV for .tsv/.txt) creating parent directories."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    sep = "\t" if _is_tab_separated(out.name) else ","
    df.to_csv(out, sep=sep, index=index)
    return out
