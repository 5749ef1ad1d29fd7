"""Configuration models and loaders."""

from __future__ import annotations

from .models import (
    AnalysisConfig,
    AppConfig,
    ConfigValidationError,
    InputConfig,
)
from .loader import load_app_config, ConfigError

__all__ = [
    "AnalysisConfig",
    "AppConfig",
    "ConfigValidationError",
    "InputConfig",
    "load_app_config",
    "ConfigError",
]
