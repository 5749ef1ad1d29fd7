from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from zratio.config import AppConfig
from zratio.core.analysis import AnalysisResult, run_basic_analysis
from zratio.core.annotation import load_annotation, merge_annotation
from zratio.core.cleaning import CleaningReport, clean_count_matrix, has_missing
from zratio.core.io import FileLike, export_table, load_count_matrix, load_sample_groups
from zratio.core.preprocessing import GroupedMatrix, log2_transform, split_by_groups
from zratio.core.tables import ranking_table
from zratio.core.zscore import ZRatioResult, compute_z_ratio, rank_genes, significant_genes, threshold_for_alpha
from zratio.visualization import top_genes_heatmap, z_ratio_scatter

LOGGER = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    cleaning: CleaningReport
    grouped: GroupedMatrix
    log_matrix: pd.DataFrame
    z_result: ZRatioResult
    ranking: pd.DataFrame
    top_up: pd.DataFrame
    top_down: pd.DataFrame
    significant: pd.DataFrame
    threshold: float
    summary: AnalysisResult


def run_z_ratio_pipeline(
    counts_file: FileLike,
    groups_file: FileLike,
    *,
    config: AppConfig,
    group_a: Optional[str] = None,
    group_b: Optional[str] = None,
    annotation_file: Optional[FileLike] = None,
    top_n: Optional[int] = None,
) -> PipelineResult:
    """Counts + labels -> log2 -> Z-scores -> Z-ratio -> ranked genes."""
    cfg_in = config.input
    cfg = config.analysis
    if top_n is None:
        n = cfg.top_n
    else:
        n = max(1, int(top_n))
        if n != top_n:
            LOGGER.warning("top_n=%s is below 1, using %d", top_n, n)

    counts = load_count_matrix(counts_file, gene_column=cfg_in.gene_column, csv_sep=cfg_in.csv_sep)
    groups = load_sample_groups(
        groups_file,
        sample_column=cfg_in.sample_column,
        group_column=cfg_in.group_column,
        csv_sep=cfg_in.csv_sep,
    )

    # unlabelled samples are set aside before cleaning so they cannot drop genes
    grouped_counts = split_by_groups(counts.df, groups, group_a, group_b, min_samples=cfg.min_samples)
    analysed = grouped_counts.combined

    if has_missing(analysed):
        LOGGER.info("Count matrix has missing values, applying policy '%s'", cfg.missing_policy)
    cleaning = clean_count_matrix(analysed, policy=cfg.missing_policy, min_total=cfg.min_total_count)

    log_matrix = log2_transform(cleaning.matrix, pseudocount=cfg.pseudocount)
    summary = run_basic_analysis(cleaning.matrix, log_matrix)
    grouped = GroupedMatrix(
        group_a=grouped_counts.group_a,
        group_b=grouped_counts.group_b,
        a=log_matrix[grouped_counts.a.columns],
        b=log_matrix[grouped_counts.b.columns],
        unassigned=grouped_counts.unassigned,
    )

    z_result = compute_z_ratio(grouped, ddof=cfg.ddof)
    ranking = rank_genes(z_result, direction="up")
    if annotation_file is not None:
        annotation = load_annotation(annotation_file, csv_sep=cfg_in.csv_sep)
        ranking = merge_annotation(ranking, annotation)
        LOGGER.info("Merged %d annotation column(s)", annotation.shape[1])

    threshold = threshold_for_alpha(cfg.alpha)
    significant = significant_genes(ranking, threshold=threshold)
    LOGGER.info("%d gene(s) with |Z-ratio| >= %.2f (alpha=%.3f)", len(significant), threshold, cfg.alpha)

    return PipelineResult(
        cleaning=cleaning,
        grouped=grouped,
        log_matrix=log_matrix,
        z_result=z_result,
        ranking=ranking,
        top_up=rank_genes(ranking, n=n, direction="up"),
        top_down=rank_genes(ranking, n=n, direction="down"),
        significant=significant,
        threshold=threshold,
        summary=summary,
    )


def write_outputs(result: PipelineResult, output_dir: Union[str, Path], *, html: bool = True) -> Dict[str, Path]:
    out_dir = Path(output_dir)
    written = {
        "ranking": export_table(result.ranking, out_dir / "z_ratio_ranking.csv"),
        "top_up": export_table(result.top_up, out_dir / "top_up.csv"),
        "top_down": export_table(result.top_down, out_dir / "top_down.csv"),
        "sample_summary": export_table(result.summary.summary, out_dir / "sample_summary.csv"),
        "sample_correlation": export_table(result.summary.correlation, out_dir / "sample_correlation.csv"),
    }

    if html:
        z = result.z_result
        n = len(result.top_up)
        figures = {
            "ranking_table": ranking_table(result.ranking, z.group_a, z.group_b, n=2 * n),
            "z_ratio_scatter": z_ratio_scatter(result.ranking, z.group_a, z.group_b, threshold=result.threshold),
            "top_genes_heatmap": top_genes_heatmap(
                result.log_matrix,
                list(dict.fromkeys(list(result.top_up.index) + list(result.top_down.index))),
                result.grouped.labels,
                title=f"Top genes ({z.group_b} vs {z.group_a})",
            ),
        }
        for name, fig in figures.items():
            path = out_dir / f"{name}.html"
            fig.write_html(path)
            written[name] = path

    LOGGER.info("Wrote %d output file(s) to %s", len(written), out_dir)
    return written
