from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from .zscore import rank_genes

UP_COLOR = "#FFCCE1"
DOWN_COLOR = "#9fccff"


def ranking_table(table: pd.DataFrame, group_a: str, group_b: str, n: int = 20) -> go.Figure:
    """
    Table of the genes with the largest absolute Z-ratio.
    Expects columns ['mean_z_<a>', 'mean_z_<b>', 'z_ratio', 'p_value'] indexed by gene.
    """
    top = rank_genes(table, n=n, direction="abs")
    col_a, col_b = f"mean_z_{group_a}", f"mean_z_{group_b}"

    header_values = ["Gene", f"Mean Z ({group_a})", f"Mean Z ({group_b})", "Z-ratio", "p-value"]
    cell_values = [
        top.index.astype(str).tolist(),
        top[col_a].round(3).tolist(),
        top[col_b].round(3).tolist(),
        top["z_ratio"].round(3).tolist(),
        [f"{p:.2e}" for p in top["p_value"]],
    ]
    row_colors = [UP_COLOR if z > 0 else DOWN_COLOR for z in top["z_ratio"]]

    fig = go.Figure(data=[go.Table(
        header=dict(
            values=header_values,
            fill_color="#2C3E50",
            font_color="white",
            align="center",
            height=36,
        ),
        cells=dict(
            values=cell_values,
            fill_color=[row_colors] * len(header_values),
            align=["left", "center", "center", "center", "center"],
            height=30,
        )
    )])

    fig.update_layout(
        title=f"Top {len(top)} genes by |Z-ratio| ({group_b} vs {group_a})",
        margin=dict(l=10, r=10, t=40, b=10)
    )
    return fig
