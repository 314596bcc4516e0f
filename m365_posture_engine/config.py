"""
Configuration module for the M365 Security Posture Engine.
Defines scoring weights, risk thresholds, output settings and the loader
for externally supplied JSON configuration.
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ConfigurationError(Exception):
    """Raised when weights or thresholds are malformed. Always fatal."""
    pass


# ─── Scoring Weights ────────────────────────────────────────────────────────

DEFAULT_CATEGORY_WEIGHTS = {
    "license": 0.3,
    "secureScore": 0.4,
    "identity": 0.3,
}

WEIGHT_TOLERANCE = 1e-9


# ─── Risk Thresholds ────────────────────────────────────────────────────────

SCORE_THRESHOLDS = {
    "good": 90,
    "warning": 70,
    "critical": 50,
}

ALERT_THRESHOLDS = {
    "elevated": 3,   # alerts >= elevated → at least Medium
    "severe": 5,     # alerts > severe → High / Critical band
}

# Category score movement (points) that is worth reporting between two runs
SCORE_CHANGE_THRESHOLD = 10


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _section(data: Any, name: str) -> dict:
    """A nested configuration object, or ConfigurationError if it is not one."""
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration section '{name}' must be an object, got {type(data).__name__}"
        )
    return data


def validate_weights(weights: Mapping[str, float], context: str = "configured") -> None:
    """Raise ConfigurationError unless every weight is non-negative and they sum to 1."""
    if not isinstance(weights, Mapping):
        raise ConfigurationError(
            f"{context.capitalize()} category weights must be a mapping of category to weight, "
            f"got {type(weights).__name__}"
        )
    if not weights:
        raise ConfigurationError(f"No {context} category weights supplied")
    for category, weight in weights.items():
        if not _is_number(weight):
            raise ConfigurationError(
                f"Weight for category '{category}' must be a finite number, got {weight!r}"
            )
        if weight < 0:
            raise ConfigurationError(
                f"Weight for category '{category}' is negative ({weight})"
            )
    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        listing = ", ".join(f"{c}={w}" for c, w in weights.items())
        raise ConfigurationError(
            f"{context.capitalize()} category weights sum to {total!r}, expected 1.0 ({listing})"
        )


@dataclass(frozen=True)
class RiskThresholds:
    """Score and alert-volume thresholds used by the risk classifier."""
    good: float = SCORE_THRESHOLDS["good"]
    warning: float = SCORE_THRESHOLDS["warning"]
    critical: float = SCORE_THRESHOLDS["critical"]
    alert_elevated: int = ALERT_THRESHOLDS["elevated"]
    alert_severe: int = ALERT_THRESHOLDS["severe"]

    def __post_init__(self):
        for name in ("good", "warning", "critical"):
            value = getattr(self, name)
            if not _is_number(value):
                raise ConfigurationError(
                    f"Score threshold '{name}' must be a finite number, got {value!r}"
                )
        for name in ("alert_elevated", "alert_severe"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(
                    f"Alert threshold '{name}' must be an integer, got {value!r}"
                )
        if not (self.good > self.warning > self.critical):
            raise ConfigurationError(
                "Score thresholds must satisfy good > warning > critical "
                f"(good={self.good}, warning={self.warning}, critical={self.critical})"
            )
        if self.critical < 0 or self.good > 100:
            raise ConfigurationError(
                f"Score thresholds must lie within 0-100 (good={self.good}, critical={self.critical})"
            )
        if not (0 <= self.alert_elevated <= self.alert_severe):
            raise ConfigurationError(
                "Alert thresholds must satisfy 0 <= alert_elevated <= alert_severe "
                f"(alert_elevated={self.alert_elevated}, alert_severe={self.alert_severe})"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "RiskThresholds":
        data = _section(data, "thresholds")
        defaults = cls()
        return cls(
            good=data.get("good", defaults.good),
            warning=data.get("warning", defaults.warning),
            critical=data.get("critical", defaults.critical),
            alert_elevated=data.get("alertElevated", data.get("alert_elevated", defaults.alert_elevated)),
            alert_severe=data.get("alertSevere", data.get("alert_severe", defaults.alert_severe)),
        )

    def to_dict(self) -> dict:
        return {
            "good": self.good,
            "warning": self.warning,
            "critical": self.critical,
            "alert_elevated": self.alert_elevated,
            "alert_severe": self.alert_severe,
        }


@dataclass(frozen=True)
class ScoringConfig:
    """
    Immutable per-run scoring configuration.

    Threaded explicitly into every pipeline stage so that concurrent
    evaluations for different tenants never share mutable state.
    """
    weights: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS)
    )
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    score_change_threshold: float = SCORE_CHANGE_THRESHOLD

    def __post_init__(self):
        validate_weights(self.weights)
        if not _is_number(self.score_change_threshold) or self.score_change_threshold < 0:
            raise ConfigurationError(
                "Score change threshold must be a non-negative number, "
                f"got {self.score_change_threshold!r}"
            )
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self.weights)

    @classmethod
    def from_dict(cls, data: dict) -> "ScoringConfig":
        data = _section(data, "scoring")
        return cls(
            weights=data.get("weights", dict(DEFAULT_CATEGORY_WEIGHTS)),
            thresholds=RiskThresholds.from_dict(data.get("thresholds", {})),
            score_change_threshold=data.get("scoreChangeThreshold", SCORE_CHANGE_THRESHOLD),
        )

    def to_dict(self) -> dict:
        return {
            "weights": dict(self.weights),
            "thresholds": self.thresholds.to_dict(),
            "score_change_threshold": self.score_change_threshold,
        }


# ─── Output Configuration ───────────────────────────────────────────────────

@dataclass
class OutputConfig:
    """Output directory and format settings."""
    base_dir: str = ""
    timestamp: str = ""
    formats: list[str] = field(default_factory=lambda: [
        "json", "csv", "markdown"
    ])

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        if not self.base_dir:
            self.base_dir = os.path.join(
                os.getcwd(),
                f"m365_posture_{self.timestamp}"
            )

    @property
    def report_dir(self) -> Path:
        return Path(self.base_dir)


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class EngineConfig:
    """Top-level configuration: scoring, best-practice targets, storage, output."""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    targets: Optional[tuple] = None         # None → DEFAULT_TARGETS
    output: OutputConfig = field(default_factory=OutputConfig)
    db_path: str = "./m365_posture.db"
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str | Path) -> "EngineConfig":
        """Load configuration from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        from .analysis.models import BestPracticeTarget

        data = _section(data, "root")
        config = cls()
        if "scoring" in data:
            config.scoring = ScoringConfig.from_dict(data["scoring"])
        if "targets" in data:
            if not isinstance(data["targets"], list):
                raise ConfigurationError("Configuration section 'targets' must be a list")
            config.targets = tuple(
                BestPracticeTarget.from_dict(t) for t in data["targets"]
            )
        if "output" in data:
            for k, v in _section(data["output"], "output").items():
                if hasattr(config.output, k):
                    setattr(config.output, k, v)
        config.db_path = data.get("db_path", config.db_path)
        config.verbose = data.get("verbose", False)
        return config
