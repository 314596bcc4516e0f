"""Tests for best-practice comparison and assessment deltas."""

import pytest

from m365_posture_engine.analysis import BestPracticeTarget, compare_assessments, compare_with_best_practices
from m365_posture_engine.analysis.models import HIGH, LOW, MEDIUM
from m365_posture_engine.config import ConfigurationError
from m365_posture_engine.scoring import CategoryMetrics, Metrics


def _metrics(values: dict, scores: dict | None = None) -> Metrics:
    scores = scores or {}
    return Metrics(categories={
        category: CategoryMetrics(category=category, score=scores.get(category, 0), values=dict(v))
        for category, v in values.items()
    })


class TestBestPracticeGaps:
    def test_mfa_shortfall(self):
        metrics = _metrics({"identity": {"mfaAdoption": 60.0}})
        gaps = compare_with_best_practices(
            metrics, [BestPracticeTarget("identity", "mfaAdoption", 90, HIGH)]
        )
        assert len(gaps) == 1
        assert gaps[0].current == 60.0
        assert gaps[0].target == 90
        assert gaps[0].gap == 30
        assert gaps[0].impact == HIGH

    def test_met_target_produces_no_gap(self):
        metrics = _metrics({"identity": {"mfaAdoption": 95.0}})
        assert compare_with_best_practices(
            metrics, [BestPracticeTarget("identity", "mfaAdoption", 95, HIGH)]
        ) == []

    def test_ordering_impact_then_gap_size(self):
        metrics = _metrics({
            "identity": {"mfaAdoption": 80.0, "conditionalAccessCoverage": 10.0},
            "endpoint": {"deviceCompliance": 50.0, "defenderStatus": 90.0},
        })
        targets = [
            BestPracticeTarget("identity", "conditionalAccessCoverage", 80, MEDIUM),
            BestPracticeTarget("endpoint", "defenderStatus", 100, HIGH),
            BestPracticeTarget("identity", "mfaAdoption", 95, HIGH),
            BestPracticeTarget("endpoint", "deviceCompliance", 90, MEDIUM),
        ]
        gaps = compare_with_best_practices(metrics, targets)
        assert [(g.metric, g.gap) for g in gaps] == [
            ("mfaAdoption", 15.0),
            ("defenderStatus", 10.0),
            ("conditionalAccessCoverage", 70.0),
            ("deviceCompliance", 40.0),
        ]

    def test_unmeasured_metric_counts_as_zero(self):
        metrics = _metrics({"identity": {"mfaAdoption": 99.0}})
        gaps = compare_with_best_practices(
            metrics, [BestPracticeTarget("identity", "protectedAdminAccounts", 100, HIGH)]
        )
        assert gaps[0].current == 0.0

    def test_absent_category_skipped(self):
        metrics = _metrics({"identity": {"mfaAdoption": 99.0}})
        gaps = compare_with_best_practices(
            metrics, [BestPracticeTarget("endpoint", "deviceCompliance", 90, MEDIUM)]
        )
        assert gaps == []


class TestTargetValidation:
    def test_invalid_impact(self):
        with pytest.raises(ConfigurationError):
            BestPracticeTarget("identity", "mfaAdoption", 95, "severe")

    def test_non_numeric_target(self):
        with pytest.raises(ConfigurationError):
            BestPracticeTarget("identity", "mfaAdoption", "95", HIGH)

    def test_from_dict_lowercases_impact(self):
        target = BestPracticeTarget.from_dict(
            {"category": "identity", "metric": "mfaAdoption", "target": 95, "impact": "HIGH"}
        )
        assert target.impact == HIGH

    def test_from_dict_missing_field(self):
        with pytest.raises(ConfigurationError):
            BestPracticeTarget.from_dict({"category": "identity", "target": 95})


class TestCompareAssessments:
    def test_no_previous(self):
        assert compare_assessments(_metrics({"identity": {}}), None) == []

    def test_reports_moves_of_ten_points_or_more(self):
        previous = _metrics(
            {"identity": {}, "license": {}, "secureScore": {}, "endpoint": {}},
            {"identity": 50, "license": 80, "secureScore": 70, "endpoint": 60},
        )
        current = _metrics(
            {"identity": {}, "license": {}, "secureScore": {}, "cloudApps": {}},
            {"identity": 75, "license": 64, "secureScore": 79, "cloudApps": 10},
        )
        changes = compare_assessments(current, previous)
        assert [(c.category, c.difference, c.impact) for c in changes] == [
            ("identity", 25, HIGH),
            ("license", -16, MEDIUM),
        ]

    def test_low_impact_change(self):
        previous = _metrics({"identity": {}}, {"identity": 40})
        current = _metrics({"identity": {}}, {"identity": 52})
        changes = compare_assessments(current, previous)
        assert changes[0].impact == LOW
