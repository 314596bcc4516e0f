"""Scoring package — normalization, weighted aggregation and risk classification."""

from .aggregator import AggregateResult, aggregate, redistribute_weights
from .models import CategoryMetrics, Metrics, ScoreBlock
from .normalizer import (
    CATEGORY_SCORERS,
    DataIncompleteWarning,
    NormalizationResult,
    normalize,
)
from .risk import CRITICAL, HIGH, LOW, MEDIUM, RISK_LEVELS, classify_risk, score_label
from .utils import round_half_up

__all__ = [
    "AggregateResult",
    "aggregate",
    "redistribute_weights",
    "CategoryMetrics",
    "Metrics",
    "ScoreBlock",
    "CATEGORY_SCORERS",
    "DataIncompleteWarning",
    "NormalizationResult",
    "normalize",
    "CRITICAL",
    "HIGH",
    "LOW",
    "MEDIUM",
    "RISK_LEVELS",
    "classify_risk",
    "score_label",
    "round_half_up",
]
