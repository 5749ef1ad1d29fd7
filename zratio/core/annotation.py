from __future__ import annotations

from typing import Optional

import pandas as pd

from .io import FileLike, InputDataError, load_table


def load_annotation(
    file: FileLike,
    gene_column: Optional[str] = None,
    file_name: Optional[str] = None,
    csv_sep: str = ",",
) -> pd.DataFrame:
    """Load a gene annotation table indexed by gene id (first column by default)."""
    loaded = load_table(file, file_name=file_name, csv_sep=csv_sep)
    df = loaded.df
    gene_col = gene_column or df.columns[0]
    if gene_col not in df.columns:
        raise InputDataError(f"{loaded.source_name}: gene column '{gene_col}' not found.")
    out = df.copy()
    out[gene_col] = out[gene_col].astype(str).str.strip()
    out = out.drop_duplicates(subset=gene_col, keep="first").set_index(gene_col)
    out.index.name = "gene"
    return out


def merge_annotation(table: pd.DataFrame, annotation: pd.DataFrame, how: str = "left") -> pd.DataFrame:
    """Join annotation columns onto a gene-indexed result table, keeping its order."""
    overlap = [c for c in annotation.columns if c in table.columns]
    annot = annotation.drop(columns=overlap) if overlap else annotation
    merged = pd.merge(table, annot, left_index=True, right_index=True, how=how, sort=False)
    merged.index.name = table.index.name
    return merged
