"""
Analysis data models — best-practice targets, gaps, score changes and
recommendations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import ConfigurationError

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Lower rank sorts first
IMPACT_ORDER = {
    HIGH: 0,
    MEDIUM: 1,
    LOW: 2,
}


def impact_rank(impact: str) -> int:
    return IMPACT_ORDER.get(impact, len(IMPACT_ORDER))


@dataclass(frozen=True)
class BestPracticeTarget:
    """Target threshold for one (category, metric) pair. Shared reference data."""
    category: str
    metric: str
    target: float
    impact: str = MEDIUM

    def __post_init__(self):
        if self.impact not in IMPACT_ORDER:
            raise ConfigurationError(
                f"Target {self.category}.{self.metric} has invalid impact "
                f"'{self.impact}' (expected one of {', '.join(IMPACT_ORDER)})"
            )
        if isinstance(self.target, bool) or not isinstance(self.target, (int, float)):
            raise ConfigurationError(
                f"Target {self.category}.{self.metric} must be numeric, got {self.target!r}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "BestPracticeTarget":
        if not isinstance(data, dict):
            raise ConfigurationError(f"Best-practice target must be an object, got {data!r}")
        try:
            return cls(
                category=data["category"],
                metric=data["metric"],
                target=data["target"],
                impact=str(data.get("impact", MEDIUM)).lower(),
            )
        except KeyError as e:
            raise ConfigurationError(f"Best-practice target missing field {e}: {data}") from e

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "metric": self.metric,
            "target": self.target,
            "impact": self.impact,
        }


@dataclass(frozen=True)
class GapEntry:
    """A measured shortfall: current < target."""
    category: str
    metric: str
    current: float
    target: float
    impact: str

    @property
    def gap(self) -> float:
        return self.target - self.current

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "metric": self.metric,
            "current": self.current,
            "target": self.target,
            "impact": self.impact,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GapEntry":
        return cls(
            category=data["category"],
            metric=data["metric"],
            current=data["current"],
            target=data["target"],
            impact=data["impact"],
        )


@dataclass(frozen=True)
class ScoreChange:
    """Category score movement between two assessments."""
    category: str
    current: int
    previous: int
    impact: str

    @property
    def difference(self) -> int:
        return self.current - self.previous

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "current": self.current,
            "previous": self.previous,
            "difference": self.difference,
            "impact": self.impact,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreChange":
        return cls(
            category=data["category"],
            current=data["current"],
            previous=data["previous"],
            impact=data["impact"],
        )


@dataclass(frozen=True)
class PreviousAssessmentRef:
    id: str
    date: str
    overall_score: int

    def to_dict(self) -> dict:
        return {"id": self.id, "date": self.date, "overallScore": self.overall_score}


@dataclass(frozen=True)
class ComparisonResults:
    """Delta vs the previous assessment plus best-practice gaps."""
    gaps: tuple[GapEntry, ...] = ()
    previous_assessment: Optional[PreviousAssessmentRef] = None
    score_changes: tuple[ScoreChange, ...] = ()

    def to_dict(self) -> dict:
        return {
            "previousAssessment": (
                self.previous_assessment.to_dict() if self.previous_assessment else None
            ),
            "scoreChanges": [c.to_dict() for c in self.score_changes],
            "bestPractices": {"gaps": [g.to_dict() for g in self.gaps]},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComparisonResults":
        prev = data.get("previousAssessment")
        return cls(
            gaps=tuple(
                GapEntry.from_dict(g)
                for g in data.get("bestPractices", {}).get("gaps", [])
            ),
            previous_assessment=(
                PreviousAssessmentRef(
                    id=prev["id"], date=prev["date"], overall_score=prev["overallScore"]
                )
                if prev else None
            ),
            score_changes=tuple(
                ScoreChange.from_dict(c) for c in data.get("scoreChanges", [])
            ),
        )


@dataclass(frozen=True)
class Reference:
    title: str
    url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url}


@dataclass
class Recommendation:
    """A single ranked remediation entry for one (category, metric) pair."""
    id: str
    category: str
    metric: str
    severity: str
    title: str
    description: str = ""
    impact: str = ""
    remediation: str = ""
    references: list[Reference] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.category, self.metric)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "metric": self.metric,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "remediation": self.remediation,
            "references": [r.to_dict() for r in self.references],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Recommendation":
        return cls(
            id=data["id"],
            category=data["category"],
            metric=data.get("metric", ""),
            severity=data["severity"],
            title=data["title"],
            description=data.get("description", ""),
            impact=data.get("impact", ""),
            remediation=data.get("remediation", ""),
            references=[
                Reference(title=r["title"], url=r["url"])
                for r in data.get("references", [])
            ],
        )
