"""
Weighted Aggregator — Combines category scores into the overall 0-100 score.

Scoring model:
  - overall = round_half_up(Σ score_i × weight_i)
  - A configured category absent from the score map has its weight
    redistributed proportionally across the categories that are present.
  - Scored categories with no configured weight do not contribute.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from ..config import ConfigurationError, validate_weights
from .utils import clamp_score, round_half_up, to_decimal

logger = logging.getLogger("m365_posture_engine.scoring.aggregator")


@dataclass(frozen=True)
class AggregateResult:
    overall: int
    weights: dict[str, float] = field(default_factory=dict)   # effective weights
    missing_categories: tuple[str, ...] = ()
    unweighted_categories: tuple[str, ...] = ()


def redistribute_weights(
    weights: Mapping[str, float],
    present: set[str] | frozenset[str],
) -> dict[str, float]:
    """
    Spread the weight of absent categories over the present ones in
    proportion to their own weight. The total is preserved.
    """
    kept = {c: to_decimal(w) for c, w in weights.items() if c in present}
    if not kept:
        raise ConfigurationError(
            "None of the weighted categories "
            f"({', '.join(weights)}) are present in the score map"
        )
    kept_total = sum(kept.values())
    if kept_total <= 0:
        raise ConfigurationError(
            "Weights of the present categories "
            f"({', '.join(kept)}) sum to zero; cannot redistribute"
        )
    configured_total = sum(to_decimal(w) for w in weights.values())
    factor = configured_total / kept_total
    return {c: float(w * factor) for c, w in kept.items()}


def aggregate(scores: Mapping[str, int], weights: Mapping[str, float]) -> AggregateResult:
    """
    Compute the overall score from category scores.

    Raises:
        ConfigurationError: if the (redistributed) weights do not sum to
            1.0 within 1e-9, a weight is negative, or no weighted category
            is present.
    """
    validate_weights(weights)
    present = frozenset(c for c in weights if c in scores)
    missing = tuple(c for c in weights if c not in scores)
    unweighted = tuple(sorted(c for c in scores if c not in weights))

    effective = redistribute_weights(weights, present)
    validate_weights(effective, context="redistributed")

    if missing:
        logger.info(
            f"Redistributed weight of absent categories {list(missing)} "
            f"across {sorted(present)}"
        )
    if unweighted:
        logger.debug(f"Categories without a configured weight ignored: {list(unweighted)}")

    total = sum(
        (clamp_score(scores[c]) * to_decimal(w) for c, w in effective.items()),
        Decimal(0),
    )
    overall = round_half_up(clamp_score(total))

    return AggregateResult(
        overall=overall,
        weights=effective,
        missing_categories=missing,
        unweighted_categories=unweighted,
    )
