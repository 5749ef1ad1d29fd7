import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from zratio.config import ConfigError, load_app_config
from zratio.core.io import InputDataError
from zratio.core.preprocessing import GroupAssignmentError
from zratio.core.zscore import ZRatioError
from zratio.processing import run_z_ratio_pipeline, write_outputs

LOGGER = logging.getLogger("zratio.cli")

DOMAIN_ERRORS = (ConfigError, InputDataError, GroupAssignmentError, ZRatioError)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _format_top(df: pd.DataFrame, title: str) -> str:
    cols = [c for c in df.columns if c.startswith("mean_z_")] + ["z_ratio", "p_value"]
    return f"{title}\n{df[cols].round(4).to_string()}"


def run_pipeline(args: argparse.Namespace) -> int:
    try:
        config = load_app_config(Path(args.config) if args.config else None)
    except ConfigError as exc:
        _configure_logging(args.log_level or "INFO")
        LOGGER.error("%s", exc)
        return 2

    _configure_logging(args.log_level or config.log_level)
    LOGGER.debug("Configuration: %s", config)

    try:
        result = run_z_ratio_pipeline(
            args.counts,
            args.groups,
            config=config,
            group_a=args.group_a,
            group_b=args.group_b,
            annotation_file=args.annotation,
            top_n=args.top,
        )
    except DOMAIN_ERRORS as exc:
        LOGGER.error("%s", exc)
        return 2

    z = result.z_result
    print(_format_top(result.top_up, f"Top genes higher in {z.group_b} than {z.group_a}"))
    print()
    print(_format_top(result.top_down, f"Top genes lower in {z.group_b} than {z.group_a}"))

    if args.output_dir:
        write_outputs(result, args.output_dir, html=not args.no_html)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank genes by Z-ratio between two sample groups")
    parser.add_argument("counts", help="Count matrix (CSV/TSV/Excel), genes as rows and samples as columns")
    parser.add_argument("groups", help="Sample label file with sample id and group columns")
    parser.add_argument("--group-a", help="Reference group label")
    parser.add_argument("--group-b", help="Compared group label")
    parser.add_argument("--annotation", help="Gene annotation table merged into the ranking")
    parser.add_argument("--top", type=int, help="Number of top genes per direction")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--output-dir", help="Directory for CSV and HTML outputs")
    parser.add_argument("--no-html", action="store_true", help="Skip the Plotly HTML figures")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING...)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run_pipeline(args)


if __name__ == "__main__":
    sys.exit(main())
