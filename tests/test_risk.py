"""Tests for risk classification and score labels."""

import pytest

from m365_posture_engine.config import ConfigurationError, RiskThresholds
from m365_posture_engine.scoring import CRITICAL, HIGH, LOW, MEDIUM, classify_risk, score_label


class TestClassifyRisk:
    @pytest.mark.parametrize("score,alerts,expected", [
        (90, 0, LOW),
        (72, 2, LOW),
        (70, 0, LOW),
        (65, 1, MEDIUM),
        (55, 4, MEDIUM),
        (85, 3, MEDIUM),
        (85, 5, MEDIUM),
        (60, 6, HIGH),
        (45, 0, HIGH),
        (49, 4, HIGH),
        (40, 6, CRITICAL),
        (0, 100, CRITICAL),
    ])
    def test_default_thresholds(self, score, alerts, expected):
        assert classify_risk(score, alerts) == expected

    def test_strong_score_with_many_alerts_is_medium(self):
        assert classify_risk(95, 9) == MEDIUM

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(good=95, warning=80, critical=60)
        assert classify_risk(75, 0, thresholds) == MEDIUM
        assert classify_risk(59, 0, thresholds) == HIGH
        assert classify_risk(80, 0, thresholds) == LOW

    def test_negative_alert_count_treated_as_zero(self):
        assert classify_risk(90, -3) == LOW


class TestScoreLabel:
    @pytest.mark.parametrize("score,expected", [
        (100, "Good"),
        (90, "Good"),
        (89, "Needs Attention"),
        (70, "Needs Attention"),
        (69, "Critical"),
        (0, "Critical"),
    ])
    def test_labels(self, score, expected):
        assert score_label(score) == expected


class TestThresholdValidation:
    @pytest.mark.parametrize("kwargs", [
        {"good": 70, "warning": 70, "critical": 50},
        {"good": 90, "warning": 40, "critical": 50},
        {"good": 110, "warning": 70, "critical": 50},
        {"good": 90, "warning": 70, "critical": -1},
        {"alert_elevated": 6, "alert_severe": 5},
    ])
    def test_malformed_thresholds_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            RiskThresholds(**kwargs)

    def test_from_dict_accepts_camel_case(self):
        thresholds = RiskThresholds.from_dict({"warning": 75, "alertElevated": 2, "alertSevere": 4})
        assert thresholds.warning == 75
        assert thresholds.alert_elevated == 2
        assert thresholds.alert_severe == 4
        assert thresholds.good == 90
