"""
Assessment record and its lifecycle.

    draft ──(metrics + recommendations attached)──▶ completed
    completed ──(superseded by a newer assessment)──▶ archived

No other transitions exist. Metrics are frozen once an assessment leaves
``draft``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..analysis.models import ComparisonResults, Recommendation
from ..scoring.models import Metrics

DRAFT = "draft"
COMPLETED = "completed"
ARCHIVED = "archived"

STATUSES = (DRAFT, COMPLETED, ARCHIVED)

ALLOWED_TRANSITIONS = {
    (DRAFT, COMPLETED),
    (COMPLETED, ARCHIVED),
}


class AssessmentStateError(Exception):
    """Base class for lifecycle violations."""
    pass


class ImmutableStateError(AssessmentStateError):
    """Raised when metrics of a completed or archived assessment are changed."""
    pass


class InvalidTransitionError(AssessmentStateError):
    """Raised on a status change outside draft → completed → archived."""
    pass


def check_transition(current: str, new: str) -> None:
    if current == new:
        return
    if (current, new) not in ALLOWED_TRANSITIONS:
        raise InvalidTransitionError(f"Cannot move assessment from '{current}' to '{new}'")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class Assessor:
    id: str = ""
    name: str = ""
    email: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class Assessment:
    """One posture assessment of one tenant."""
    tenant_id: str
    assessor: Assessor = field(default_factory=Assessor)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    assessment_date: datetime = field(default_factory=_utcnow)
    metrics: Optional[Metrics] = None
    comparison_results: Optional[ComparisonResults] = None
    recommendations: list[Recommendation] = field(default_factory=list)
    risk_level: Optional[str] = None
    score_label: Optional[str] = None
    status: str = DRAFT
    last_modified: datetime = field(default_factory=_utcnow)

    def __setattr__(self, name: str, value: Any) -> None:
        # status is assigned after metrics in __init__, so construction always passes
        if name == "metrics" and getattr(self, "status", DRAFT) in (COMPLETED, ARCHIVED):
            raise ImmutableStateError(
                f"Assessment {self.id} is {self.status}; metrics can no longer change"
            )
        super().__setattr__(name, value)

    @property
    def is_frozen(self) -> bool:
        return self.status in (COMPLETED, ARCHIVED)

    @property
    def overall_score(self) -> Optional[int]:
        return self.metrics.score.overall if self.metrics else None

    def _touch(self):
        self.last_modified = _utcnow()

    def set_metrics(self, metrics: Metrics) -> None:
        """Attach metrics to a draft assessment."""
        if self.is_frozen:
            raise ImmutableStateError(
                f"Assessment {self.id} is {self.status}; metrics can no longer change"
            )
        self.metrics = metrics
        self._touch()

    def complete(
        self,
        recommendations: list[Recommendation],
        comparison_results: Optional[ComparisonResults] = None,
        risk_level: Optional[str] = None,
        score_label: Optional[str] = None,
    ) -> None:
        """Attach recommendations and move draft → completed."""
        check_transition(self.status, COMPLETED)
        if self.status == COMPLETED:
            raise InvalidTransitionError(f"Assessment {self.id} is already completed")
        if self.metrics is None:
            raise InvalidTransitionError(
                f"Assessment {self.id} cannot be completed without metrics"
            )
        self.recommendations = list(recommendations)
        self.comparison_results = comparison_results
        self.risk_level = risk_level
        self.score_label = score_label
        self.status = COMPLETED
        self._touch()

    def archive(self) -> None:
        """Move completed → archived once a newer assessment supersedes this one."""
        if self.status != COMPLETED:
            raise InvalidTransitionError(
                f"Only completed assessments can be archived (assessment {self.id} is {self.status})"
            )
        self.status = ARCHIVED
        self._touch()

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "assessmentDate": self.assessment_date.isoformat(),
            "assessor": self.assessor.to_dict(),
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "comparisonResults": (
                self.comparison_results.to_dict() if self.comparison_results else None
            ),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "riskLevel": self.risk_level,
            "scoreLabel": self.score_label,
            "status": self.status,
            "lastModified": self.last_modified.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Assessment":
        assessor = data.get("assessor") or {}
        status = data.get("status", DRAFT)
        if status not in STATUSES:
            raise AssessmentStateError(f"Unknown assessment status '{status}'")
        return cls(
            id=data["id"],
            tenant_id=data["tenantId"],
            assessment_date=_parse_dt(data["assessmentDate"]),
            assessor=Assessor(
                id=assessor.get("id", ""),
                name=assessor.get("name", ""),
                email=assessor.get("email", ""),
            ),
            metrics=Metrics.from_dict(data["metrics"]) if data.get("metrics") else None,
            comparison_results=(
                ComparisonResults.from_dict(data["comparisonResults"])
                if data.get("comparisonResults") else None
            ),
            recommendations=[
                Recommendation.from_dict(r) for r in data.get("recommendations", [])
            ],
            risk_level=data.get("riskLevel"),
            score_label=data.get("scoreLabel"),
            status=status,
            last_modified=_parse_dt(data.get("lastModified", data["assessmentDate"])),
        )
