from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .defaults import DEFAULT_ANALYSIS_SETTINGS, DEFAULT_INPUT_SETTINGS, MISSING_POLICIES


class ConfigValidationError(Exception):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class InputConfig:
    gene_column: Optional[str] = None
    sample_column: Optional[str] = None
    group_column: Optional[str] = None
    csv_sep: str = ","

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InputConfig":
        merged = {**DEFAULT_INPUT_SETTINGS, **{k: v for k, v in data.items() if k in DEFAULT_INPUT_SETTINGS}}
        return cls(**merged)

    def sanitized(self) -> "InputConfig":
        return InputConfig(
            gene_column=self.gene_column or None,
            sample_column=self.sample_column or None,
            group_column=self.group_column or None,
            csv_sep=self.csv_sep or ",",
        )


@dataclass(frozen=True)
class AnalysisConfig:
    pseudocount: float = 1.0
    ddof: int = 0
    min_total_count: float = 0.0
    missing_policy: str = "drop"
    min_samples: int = 2
    top_n: int = 10
    alpha: float = 0.05

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisConfig":
        merged = {**DEFAULT_ANALYSIS_SETTINGS, **{k: v for k, v in data.items() if k in DEFAULT_ANALYSIS_SETTINGS}}
        return cls(**merged)

    def sanitized(self) -> "AnalysisConfig":
        pseudocount = float(self.pseudocount)
        if pseudocount <= 0:
            raise ConfigValidationError(f"pseudocount must be positive, got {self.pseudocount!r}.")
        policy = str(self.missing_policy).strip().lower()
        if policy not in MISSING_POLICIES:
            raise ConfigValidationError(
                f"missing_policy must be one of {'|'.join(MISSING_POLICIES)}, got {self.missing_policy!r}."
            )
        alpha = float(self.alpha)
        if not 0.0 < alpha < 1.0:
            raise ConfigValidationError(f"alpha must be in (0, 1), got {self.alpha!r}.")
        return AnalysisConfig(
            pseudocount=pseudocount,
            ddof=min(1, max(0, int(self.ddof))),
            min_total_count=max(0.0, float(self.min_total_count)),
            missing_policy=policy,
            min_samples=max(2, int(self.min_samples)),
            top_n=max(1, int(self.top_n)),
            alpha=alpha,
        )


@dataclass(frozen=True)
class AppConfig:
    project_name: str
    log_level: str
    input: InputConfig = field(default_factory=InputConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    def sanitized(self) -> "AppConfig":
        return AppConfig(
            project_name=self.project_name,
            log_level=self.log_level.upper(),
            input=self.input.sanitized(),
            analysis=self.analysis.sanitized(),
        )
