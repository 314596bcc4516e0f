"""Analysis package — best-practice comparison and remediation recommendations."""

from .comparator import compare_assessments, compare_with_best_practices
from .knowledge_base import DEFAULT_KNOWLEDGE_BASE, DEFAULT_TARGETS, KnowledgeBaseEntry
from .models import (
    BestPracticeTarget,
    ComparisonResults,
    GapEntry,
    PreviousAssessmentRef,
    Recommendation,
    Reference,
    ScoreChange,
)
from .recommendations import generate_recommendations

__all__ = [
    "compare_assessments",
    "compare_with_best_practices",
    "DEFAULT_KNOWLEDGE_BASE",
    "DEFAULT_TARGETS",
    "KnowledgeBaseEntry",
    "BestPracticeTarget",
    "ComparisonResults",
    "GapEntry",
    "PreviousAssessmentRef",
    "Recommendation",
    "Reference",
    "ScoreChange",
    "generate_recommendations",
]
