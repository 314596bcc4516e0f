"""Assessment package — lifecycle model, persistence and pipeline orchestration."""

from .models import (
    ARCHIVED,
    COMPLETED,
    DRAFT,
    Assessment,
    AssessmentStateError,
    Assessor,
    ImmutableStateError,
    InvalidTransitionError,
)
from .service import AssessmentService, PostureEvaluation, evaluate_posture
from .store import AssessmentStore

__all__ = [
    "ARCHIVED",
    "COMPLETED",
    "DRAFT",
    "Assessment",
    "AssessmentStateError",
    "Assessor",
    "ImmutableStateError",
    "InvalidTransitionError",
    "AssessmentService",
    "PostureEvaluation",
    "evaluate_posture",
    "AssessmentStore",
]
