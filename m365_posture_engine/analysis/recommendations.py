"""
Recommendation Generator — Turns ordered gaps into ranked, de-duplicated
remediation entries.

  - One recommendation per (category, metric); a repeated gap for the same
    pair only refreshes the remediation text.
  - Severity starts at the gap's impact and is raised where needed so that,
    within a category, a larger gap never carries a lower severity.
  - Output order: severity (high → low), then the order gaps arrived in.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from itertools import groupby
from typing import Iterable, Optional

from .knowledge_base import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase, KnowledgeBaseEntry
from .models import IMPACT_ORDER, GapEntry, Recommendation, impact_rank

logger = logging.getLogger("m365_posture_engine.analysis.recommendations")

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "m365-posture-engine/recommendations")

_SEVERITY_BY_RANK = {rank: severity for severity, rank in IMPACT_ORDER.items()}

GENERIC_REMEDIATION = "Review current configuration and implement security best practices."


def recommendation_id(category: str, metric: str) -> str:
    """Stable id so identical inputs always produce identical recommendations."""
    return str(uuid.uuid5(_ID_NAMESPACE, f"{category}:{metric}"))


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


@dataclass
class _Entry:
    recommendation: Recommendation
    gap: float
    order: int


def _describe(gap: GapEntry) -> str:
    return (
        f"Current {gap.metric} is at {_fmt(gap.current)}%, which is "
        f"{_fmt(gap.gap)}% below the {_fmt(gap.target)}% target."
    )


def _remediation_for(gap: GapEntry, entry: Optional[KnowledgeBaseEntry]) -> str:
    if entry is not None:
        return entry.remediation
    return (
        f"{GENERIC_REMEDIATION} Bring {gap.metric} from {_fmt(gap.current)}% "
        f"to at least {_fmt(gap.target)}%."
    )


def _build(gap: GapEntry, entry: Optional[KnowledgeBaseEntry]) -> Recommendation:
    if entry is None:
        logger.debug(f"No knowledge base entry for {gap.category}.{gap.metric} — using generic template")
        title = f"Review {gap.metric} in {gap.category}"
        references = []
    else:
        title = entry.title
        references = list(entry.references)

    return Recommendation(
        id=recommendation_id(gap.category, gap.metric),
        category=gap.category,
        metric=gap.metric,
        severity=gap.impact,
        title=title,
        description=_describe(gap),
        remediation=_remediation_for(gap, entry),
        references=references,
    )


def _enforce_monotonic_severity(entries: list[_Entry]) -> None:
    """Within each category, raise severities so they never drop as the gap grows."""
    by_category: dict[str, list[_Entry]] = {}
    for e in entries:
        by_category.setdefault(e.recommendation.category, []).append(e)

    for category_entries in by_category.values():
        ordered = sorted(category_entries, key=lambda e: e.gap)
        floor_rank: Optional[int] = None     # most severe rank among smaller gaps
        for _, same_gap in groupby(ordered, key=lambda e: e.gap):
            group = list(same_gap)
            for e in group:
                rank = impact_rank(e.recommendation.severity)
                if floor_rank is not None and floor_rank < rank:
                    logger.debug(
                        f"Raising severity of {e.recommendation.category}."
                        f"{e.recommendation.metric} to keep it monotonic with gap size"
                    )
                    e.recommendation.severity = _SEVERITY_BY_RANK[floor_rank]
            group_best = min(impact_rank(e.recommendation.severity) for e in group)
            floor_rank = group_best if floor_rank is None else min(floor_rank, group_best)


def generate_recommendations(
    gaps: Iterable[GapEntry],
    knowledge_base: Optional[KnowledgeBase] = None,
) -> list[Recommendation]:
    """
    Build the ranked recommendation list for a set of comparator gaps.

    Never raises for unknown categories or metrics; those fall back to the
    generic "Review <metric> in <category>" template.
    """
    kb = DEFAULT_KNOWLEDGE_BASE if knowledge_base is None else knowledge_base
    entries: dict[tuple[str, str], _Entry] = {}

    for order, gap in enumerate(gaps):
        key = (gap.category, gap.metric)
        kb_entry = kb.get(key)
        existing = entries.get(key)
        if existing is not None:
            existing.recommendation.remediation = _remediation_for(gap, kb_entry)
            continue
        entries[key] = _Entry(recommendation=_build(gap, kb_entry), gap=gap.gap, order=order)

    ranked = list(entries.values())
    _enforce_monotonic_severity(ranked)
    ranked.sort(key=lambda e: (impact_rank(e.recommendation.severity), e.order))

    recommendations = []
    for e in ranked:
        rec = e.recommendation
        rec.impact = f"{rec.severity.capitalize()} impact on overall security posture"
        recommendations.append(rec)

    logger.info(f"Generated {len(recommendations)} recommendations")
    return recommendations
