"""
Best-Practice Comparator — Diffs current metrics against target thresholds,
and diffs two assessments' category scores.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..scoring.models import Metrics
from .models import HIGH, LOW, MEDIUM, BestPracticeTarget, GapEntry, ScoreChange, impact_rank

logger = logging.getLogger("m365_posture_engine.analysis.comparator")

# Score movement (points) → impact of the change
SCORE_CHANGE_IMPACT = [
    (20, HIGH),
    (15, MEDIUM),
    (0, LOW),
]


def _gap_sort_key(gap: GapEntry):
    return (impact_rank(gap.impact), -gap.gap, gap.category, gap.metric)


def current_value(metrics: Metrics, category: str, metric: str) -> float:
    """Current value for a target. Unmeasured metrics count as 0."""
    value = metrics.value(category, metric)
    return 0.0 if value is None else value


def compare_with_best_practices(
    metrics: Metrics,
    targets: Iterable[BestPracticeTarget],
) -> list[GapEntry]:
    """
    Emit one GapEntry per target the tenant falls short of.

    Targets for categories absent from this run are skipped; a metric
    that was not measured within an assessed category counts as 0.
    Ordered by impact (high → low), then by shortfall size (largest first),
    then by category and metric name.
    """
    gaps = []
    for target in targets:
        if target.category not in metrics.categories:
            logger.debug(f"Category {target.category} not assessed — target {target.metric} skipped")
            continue
        current = current_value(metrics, target.category, target.metric)
        if current < target.target:
            gaps.append(GapEntry(
                category=target.category,
                metric=target.metric,
                current=current,
                target=target.target,
                impact=target.impact,
            ))

    gaps.sort(key=_gap_sort_key)
    logger.info(f"Best-practice comparison: {len(gaps)} gaps")
    return gaps


def change_impact(difference: float) -> str:
    magnitude = abs(difference)
    for threshold, impact in SCORE_CHANGE_IMPACT:
        if magnitude >= threshold:
            return impact
    return LOW


def compare_assessments(
    current: Metrics,
    previous: Optional[Metrics],
    threshold: float = 10,
) -> list[ScoreChange]:
    """
    Report categories whose score moved by at least ``threshold`` points
    since the previous assessment. Categories scored in only one of the
    two runs are not compared.
    """
    if previous is None:
        return []

    changes = []
    previous_scores = previous.category_scores()
    for category, score in sorted(current.category_scores().items()):
        if category not in previous_scores:
            continue
        before = previous_scores[category]
        if abs(score - before) >= threshold:
            changes.append(ScoreChange(
                category=category,
                current=score,
                previous=before,
                impact=change_impact(score - before),
            ))
    return changes
