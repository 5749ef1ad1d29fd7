from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

SETTINGS = {
    "colors": {"up": "#d7191c", "down": "#2c7bb6", "other": "#bdbdbd"},
    "heatmap_colorscale": [[0.0, "#2c7bb6"], [0.5, "#ffffb2"], [1.0, "#d7191c"]],
}


def _zscore_rows(mat: pd.DataFrame) -> pd.DataFrame:
    arr = mat.values.astype(float)
    means = np.nanmean(arr, axis=1, keepdims=True)
    stds = np.nanstd(arr, axis=1, keepdims=True)
    stds[stds == 0] = 1.0
    z = (arr - means) / stds
    return pd.DataFrame(z, index=mat.index, columns=mat.columns)


def _classify(z: pd.Series, threshold: float) -> np.ndarray:
    return np.select([z >= threshold, z <= -threshold], ["up", "down"], "other")


def z_ratio_scatter(
    table: pd.DataFrame,
    group_a: str,
    group_b: str,
    threshold: float = 1.96,
) -> go.Figure:
    """Mean Z-score of group A vs group B, genes beyond the Z-ratio cutoff highlighted."""
    col_a, col_b = f"mean_z_{group_a}", f"mean_z_{group_b}"
    classes = _classify(table["z_ratio"], threshold)

    fig = go.Figure()
    for cls in ("other", "down", "up"):
        mask = classes == cls
        if not mask.any():
            continue
        sub = table.loc[mask]
        fig.add_trace(go.Scatter(
            x=sub[col_a],
            y=sub[col_b],
            mode="markers",
            name=cls,
            marker=dict(color=SETTINGS["colors"][cls], size=6 if cls == "other" else 8),
            text=sub.index.astype(str),
            customdata=sub["z_ratio"].round(3),
            hovertemplate="%{text}<br>Z-ratio=%{customdata}<extra></extra>",
        ))

    lo = float(np.nanmin(table[[col_a, col_b]].values)) if len(table) else -1.0
    hi = float(np.nanmax(table[[col_a, col_b]].values)) if len(table) else 1.0
    fig.add_shape(type="line", x0=lo, y0=lo, x1=hi, y1=hi, line=dict(color="#606060", dash="dash"))
    fig.update_layout(
        title=f"Mean Z-score: {group_b} vs {group_a} (|Z-ratio| >= {threshold:.2f})",
        xaxis_title=f"Mean Z-score ({group_a})",
        yaxis_title=f"Mean Z-score ({group_b})",
        template="plotly_white",
    )
    return fig


def top_genes_heatmap(
    log_matrix: pd.DataFrame,
    genes: Sequence[str],
    labels: pd.Series,
    title: str = "",
) -> go.Figure:
    """Heatmap of row-standardized log2 values for `genes`, columns ordered by group."""
    genes = [g for g in genes if g in log_matrix.index]
    if not genes:
        return go.Figure()

    # samples of the same group are kept next to each other, groups in order of appearance
    group_order = {g: i for i, g in enumerate(dict.fromkeys(labels))}
    ranked = sorted(labels.index, key=lambda s: group_order[labels[s]])
    ordered_cols = [c for c in ranked if c in log_matrix.columns]
    mat = _zscore_rows(log_matrix.loc[genes, ordered_cols])
    x_labels = [f"{c} ({labels[c]})" for c in ordered_cols]

    fig = go.Figure(
        data=[go.Heatmap(
            z=mat.values,
            x=x_labels,
            y=mat.index.astype(str).tolist(),
            colorscale=SETTINGS["heatmap_colorscale"],
            zmid=0,
            colorbar=dict(title="row Z"),
        )],
    )
    fig.update_layout(title=title, yaxis=dict(autorange="reversed"))
    return fig
