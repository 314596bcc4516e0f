"""
Assessment pipeline — wires the five stages together and manages the
assessment lifecycle around them.

    raw facts → normalize → aggregate → overall score
    metrics + targets → compare → gaps → recommendations
    overall score + alerts → risk level
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..analysis.comparator import compare_assessments, compare_with_best_practices
from ..analysis.knowledge_base import DEFAULT_KNOWLEDGE_BASE, DEFAULT_TARGETS, KnowledgeBase
from ..analysis.models import (
    BestPracticeTarget,
    ComparisonResults,
    GapEntry,
    PreviousAssessmentRef,
    Recommendation,
    ScoreChange,
)
from ..analysis.recommendations import generate_recommendations
from ..config import ScoringConfig
from ..scoring.aggregator import aggregate
from ..scoring.models import Metrics, ScoreBlock
from ..scoring.normalizer import DataIncompleteWarning, normalize
from ..scoring.risk import classify_risk, score_label
from ..telemetry.facts import FactBundle
from .models import Assessment, Assessor
from .store import AssessmentStore

logger = logging.getLogger("m365_posture_engine.assessment")


@dataclass(frozen=True)
class PostureEvaluation:
    """Everything the pure pipeline derives from one facts bundle."""
    metrics: Metrics
    gaps: tuple[GapEntry, ...]
    recommendations: tuple[Recommendation, ...]
    risk_level: str
    score_label: str
    score_changes: tuple[ScoreChange, ...] = ()
    warnings: tuple[DataIncompleteWarning, ...] = field(default_factory=tuple)


def evaluate_posture(
    facts: FactBundle,
    config: ScoringConfig,
    targets: Optional[Iterable[BestPracticeTarget]] = None,
    knowledge_base: Optional[KnowledgeBase] = None,
    previous_metrics: Optional[Metrics] = None,
) -> PostureEvaluation:
    """
    Run the full pipeline over one facts bundle. Pure: no I/O, no shared state.

    Raises:
        ConfigurationError: weights are invalid for the categories present.
    """
    normalized = normalize(facts)
    aggregated = aggregate(normalized.scores, config.weights)

    metrics = Metrics(
        categories=dict(normalized.categories),
        score=ScoreBlock(
            overall=aggregated.overall,
            categories=normalized.scores,
            weights=aggregated.weights,
        ),
        open_alerts=facts.alert_count,
    )

    gaps = compare_with_best_practices(
        metrics, DEFAULT_TARGETS if targets is None else targets
    )
    recommendations = generate_recommendations(
        gaps, DEFAULT_KNOWLEDGE_BASE if knowledge_base is None else knowledge_base
    )
    changes = compare_assessments(metrics, previous_metrics, config.score_change_threshold)

    return PostureEvaluation(
        metrics=metrics,
        gaps=tuple(gaps),
        recommendations=tuple(recommendations),
        risk_level=classify_risk(metrics.score.overall, metrics.open_alerts, config.thresholds),
        score_label=score_label(metrics.score.overall, config.thresholds),
        score_changes=tuple(changes),
        warnings=tuple(normalized.warnings),
    )


class AssessmentService:
    """
    Runs assessments for tenants and persists them.

    Callers must not run the same assessment id concurrently; different
    tenants and ids need no coordination.
    """

    def __init__(
        self,
        config: ScoringConfig,
        store: Optional[AssessmentStore] = None,
        targets: Optional[Iterable[BestPracticeTarget]] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
    ):
        self.config = config
        self.store = store
        self.targets = tuple(DEFAULT_TARGETS if targets is None else targets)
        self.knowledge_base = DEFAULT_KNOWLEDGE_BASE if knowledge_base is None else knowledge_base

    def assess(
        self,
        facts: FactBundle,
        tenant_id: str,
        assessor: Optional[Assessor] = None,
        previous: Optional[Assessment] = None,
    ) -> Assessment:
        """
        Evaluate a tenant and return a completed (unsaved) assessment.

        The pipeline runs before the Assessment object exists, so a
        ConfigurationError never leaves a partial record behind.
        """
        evaluation = evaluate_posture(
            facts,
            self.config,
            targets=self.targets,
            knowledge_base=self.knowledge_base,
            previous_metrics=previous.metrics if previous else None,
        )

        assessment = Assessment(tenant_id=tenant_id, assessor=assessor or Assessor())
        assessment.set_metrics(evaluation.metrics)
        assessment.complete(
            recommendations=list(evaluation.recommendations),
            comparison_results=ComparisonResults(
                gaps=evaluation.gaps,
                previous_assessment=(
                    PreviousAssessmentRef(
                        id=previous.id,
                        date=previous.assessment_date.isoformat(),
                        overall_score=previous.overall_score or 0,
                    )
                    if previous else None
                ),
                score_changes=evaluation.score_changes,
            ),
            risk_level=evaluation.risk_level,
            score_label=evaluation.score_label,
        )

        logger.info(
            f"Assessment {assessment.id} for tenant {tenant_id}: "
            f"overall={evaluation.metrics.score.overall} risk={evaluation.risk_level} "
            f"gaps={len(evaluation.gaps)} recommendations={len(evaluation.recommendations)}"
        )
        for w in evaluation.warnings:
            logger.warning(f"Data incomplete — {w}")
        return assessment

    def run(
        self,
        facts: FactBundle,
        tenant_id: str,
        assessor: Optional[Assessor] = None,
    ) -> Assessment:
        """Assess, persist, and archive the tenant's superseded assessments."""
        if self.store is None:
            raise RuntimeError("AssessmentService.run requires a store")

        previous = self.store.latest_for_tenant(tenant_id)
        assessment = self.assess(facts, tenant_id, assessor=assessor, previous=previous)
        self.store.save(assessment)
        self.store.archive_superseded(tenant_id, assessment)
        return assessment
