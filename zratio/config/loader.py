from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from .defaults import (
    DEFAULT_ANALYSIS_SETTINGS,
    DEFAULT_INPUT_SETTINGS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PROJECT_NAME,
)
from .models import (
    AnalysisConfig,
    AppConfig,
    ConfigValidationError,
    InputConfig,
)

LOGGER = logging.getLogger(__name__)

# env var -> (section, key, parser)
_ENV_OVERRIDES = {
    "ZR_PSEUDOCOUNT": ("analysis", "pseudocount", float),
    "ZR_DDOF": ("analysis", "ddof", int),
    "ZR_MIN_TOTAL_COUNT": ("analysis", "min_total_count", float),
    "ZR_MISSING_POLICY": ("analysis", "missing_policy", str),
    "ZR_MIN_SAMPLES": ("analysis", "min_samples", int),
    "ZR_TOP_N": ("analysis", "top_n", int),
    "ZR_ALPHA": ("analysis", "alpha", float),
    "ZR_GENE_COLUMN": ("input", "gene_column", str),
    "ZR_CSV_SEP": ("input", "csv_sep", str),
}


class ConfigError(Exception):
    """Generic error while loading the application configuration."""


def load_app_config(
    config_path: Optional[Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    warn: Optional[Callable[[str], None]] = None,
) -> AppConfig:
    """Build the configuration from code defaults, a JSON file and the environment."""

    env_map = env if env is not None else os.environ
    warn_fn = warn or (lambda msg: LOGGER.warning(msg))

    file_data = _load_file_data(config_path=config_path, env=env_map, warn=warn_fn)

    input_data: Dict[str, Any] = dict(DEFAULT_INPUT_SETTINGS)
    analysis_data: Dict[str, Any] = dict(DEFAULT_ANALYSIS_SETTINGS)
    if isinstance(file_data.get("input"), Mapping):
        input_data.update(file_data["input"])
    if isinstance(file_data.get("analysis"), Mapping):
        analysis_data.update(file_data["analysis"])

    sections = {"input": input_data, "analysis": analysis_data}
    for env_key, (section, key, parser) in _ENV_OVERRIDES.items():
        raw = env_map.get(env_key)
        if raw is None or raw == "":
            continue
        try:
            sections[section][key] = parser(raw)
        except (TypeError, ValueError):
            warn_fn(f"Invalid value for {env_key}: '{raw}', keeping {sections[section][key]!r}.")

    project_name = env_map.get("ZR_PROJECT_NAME") or file_data.get("project_name") or DEFAULT_PROJECT_NAME
    log_level = env_map.get("ZR_LOGLEVEL") or file_data.get("log_level") or DEFAULT_LOG_LEVEL

    try:
        app_config = AppConfig(
            project_name=str(project_name),
            log_level=str(log_level),
            input=InputConfig.from_dict(input_data),
            analysis=AnalysisConfig.from_dict(analysis_data),
        )
        return app_config.sanitized()
    except (ConfigValidationError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _load_file_data(
    *,
    config_path: Optional[Path],
    env: Mapping[str, str],
    warn: Callable[[str], None],
) -> Mapping[str, Any]:
    # Priority: explicit argument > ZR_CONFIG_PATH > nothing
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        return _read_json(path)

    env_path = env.get("ZR_CONFIG_PATH")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return _read_json(path)
        warn(f"File set in ZR_CONFIG_PATH was not found: {path}")
    return {}


def _read_json(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handler:
            data = json.load(handler)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path} must contain a JSON object.")
    return data


__all__ = [
    "load_app_config",
    "ConfigError",
]
