"""
Scoring data models — immutable metric snapshots produced by the normalizer
and aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


def freeze(value: Any) -> Any:
    """Read-only copy: dicts become MappingProxyType, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Plain JSON-ready copy of a frozen structure."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class CategoryMetrics:
    """Normalized result for a single telemetry category."""
    category: str
    score: int = 0                                       # 0-100
    values: Mapping[str, float] = field(default_factory=dict)  # sub-metric → percent
    data_collected: bool = True
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", freeze(self.values))
        object.__setattr__(self, "details", freeze(self.details))

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "score": self.score,
            "values": dict(self.values),
            "dataCollected": self.data_collected,
            "details": thaw(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CategoryMetrics":
        return cls(
            category=data["category"],
            score=data.get("score", 0),
            values=dict(data.get("values", {})),
            data_collected=data.get("dataCollected", True),
            details=dict(data.get("details", {})),
        )


@dataclass(frozen=True)
class ScoreBlock:
    """Per-category scores plus the weighted overall score."""
    overall: int = 0
    categories: Mapping[str, int] = field(default_factory=dict)
    weights: Mapping[str, float] = field(default_factory=dict)   # effective, after redistribution

    def __post_init__(self):
        object.__setattr__(self, "categories", freeze(self.categories))
        object.__setattr__(self, "weights", freeze(self.weights))

    def to_dict(self) -> dict:
        return {"overall": self.overall, **self.categories}


@dataclass(frozen=True)
class Metrics:
    """Immutable snapshot of one assessment run's normalized telemetry."""
    categories: Mapping[str, CategoryMetrics] = field(default_factory=dict)
    score: ScoreBlock = field(default_factory=ScoreBlock)
    open_alerts: int = 0

    def __post_init__(self):
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    def value(self, category: str, metric: str) -> Optional[float]:
        """Current value at (category, metric), or None when not measured."""
        record = self.categories.get(category)
        if record is None:
            return None
        return record.values.get(metric)

    def category_scores(self) -> dict[str, int]:
        return {name: record.score for name, record in self.categories.items()}

    @property
    def incomplete_categories(self) -> list[str]:
        return sorted(n for n, r in self.categories.items() if not r.data_collected)

    def to_dict(self) -> dict:
        return {
            "categories": {k: v.to_dict() for k, v in self.categories.items()},
            "score": self.score.to_dict(),
            "effectiveWeights": dict(self.score.weights),
            "openAlerts": self.open_alerts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Metrics":
        categories = {
            k: CategoryMetrics.from_dict(v)
            for k, v in data.get("categories", {}).items()
        }
        raw_score = dict(data.get("score", {}))
        overall = raw_score.pop("overall", 0)
        return cls(
            categories=categories,
            score=ScoreBlock(
                overall=overall,
                categories=raw_score,
                weights=dict(data.get("effectiveWeights", {})),
            ),
            open_alerts=data.get("openAlerts", 0),
        )
