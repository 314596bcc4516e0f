"""Tests for weighted aggregation and weight redistribution."""

import pytest

from m365_posture_engine.config import ConfigurationError
from m365_posture_engine.scoring import aggregate, redistribute_weights


class TestAggregate:
    def test_default_weights_example(self):
        result = aggregate({"license": 85, "secureScore": 70, "identity": 60},
                           {"license": 0.3, "secureScore": 0.4, "identity": 0.3})
        # 25.5 + 28 + 18 = 71.5 rounds half-up
        assert result.overall == 72
        assert result.missing_categories == ()

    def test_full_scheme(self):
        scores = {
            "identity": 80, "dataProtection": 60, "endpoint": 95,
            "cloudApps": 90, "informationProtection": 50, "threatProtection": 80,
        }
        weights = {
            "identity": 0.25, "dataProtection": 0.15, "endpoint": 0.15,
            "cloudApps": 0.15, "informationProtection": 0.1, "threatProtection": 0.2,
        }
        assert aggregate(scores, weights).overall == 78

    @pytest.mark.parametrize("value", [0, 37, 100])
    def test_uniform_scores_give_same_overall(self, value):
        weights = {"license": 0.3, "secureScore": 0.4, "identity": 0.3}
        scores = {c: value for c in weights}
        assert aggregate(scores, weights).overall == value

    def test_unweighted_category_ignored(self):
        result = aggregate({"license": 80, "secureScore": 80, "identity": 80, "endpoint": 0},
                           {"license": 0.3, "secureScore": 0.4, "identity": 0.3})
        assert result.overall == 80
        assert result.unweighted_categories == ("endpoint",)


class TestRedistribution:
    def test_absent_category_weight_spread_proportionally(self):
        result = aggregate({"license": 85, "secureScore": 70},
                           {"license": 0.3, "secureScore": 0.4, "identity": 0.3})
        assert result.missing_categories == ("identity",)
        assert result.weights["license"] == pytest.approx(0.3 / 0.7)
        assert result.weights["secureScore"] == pytest.approx(0.4 / 0.7)
        assert sum(result.weights.values()) == pytest.approx(1.0, abs=1e-9)
        # 85 × 3/7 + 70 × 4/7 = 76.43
        assert result.overall == 76

    def test_redistribute_preserves_total(self):
        weights = redistribute_weights({"a": 0.5, "b": 0.25, "c": 0.25}, {"a", "c"})
        assert set(weights) == {"a", "c"}
        assert weights["a"] == pytest.approx(2 / 3)
        assert weights["c"] == pytest.approx(1 / 3)

    def test_nothing_present_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            aggregate({"endpoint": 90}, {"license": 0.5, "identity": 0.5})

    def test_present_categories_with_zero_weight(self):
        with pytest.raises(ConfigurationError):
            aggregate({"license": 90}, {"license": 0.0, "identity": 1.0})


class TestWeightValidation:
    @pytest.mark.parametrize("weights", [
        {"license": 0.3, "secureScore": 0.4, "identity": 0.4},
        {"license": 0.5, "secureScore": 0.4},
        {"license": 1.2, "secureScore": -0.2},
        {},
    ])
    def test_bad_weights_rejected(self, weights):
        with pytest.raises(ConfigurationError):
            aggregate({"license": 85, "secureScore": 70, "identity": 60}, weights)

    def test_error_message_names_weights(self):
        with pytest.raises(ConfigurationError, match="license=0.5"):
            aggregate({"license": 85}, {"license": 0.5, "secureScore": 0.4})

    def test_tolerance_accepts_float_noise(self):
        weights = {"a": 0.1, "b": 0.2, "c": 0.7}
        assert aggregate({"a": 100, "b": 100, "c": 100}, weights).overall == 100


class TestOverallRange:
    @pytest.mark.parametrize("scores,weights", [
        ({"license": 0, "secureScore": 100, "identity": 55},
         {"license": 0.05, "secureScore": 0.9, "identity": 0.05}),
        ({"a": 0, "b": 100}, {"a": 0.999, "b": 0.001}),
        ({"a": 100, "b": 0}, {"a": 0.999, "b": 0.001}),
        ({"identity": 13, "dataProtection": 99, "endpoint": 47, "cloudApps": 0,
          "informationProtection": 100, "threatProtection": 71, "license": 28},
         {"identity": 0.2, "dataProtection": 0.1, "endpoint": 0.15, "cloudApps": 0.05,
          "informationProtection": 0.25, "threatProtection": 0.15, "license": 0.1}),
        ({"license": 33, "identity": 91},
         {"license": 0.1, "secureScore": 0.6, "identity": 0.3}),
    ])
    def test_overall_stays_between_category_extremes(self, scores, weights):
        result = aggregate(scores, weights)
        weighted = [scores[c] for c in weights if c in scores]
        assert 0 <= result.overall <= 100
        assert min(weighted) <= result.overall <= max(weighted)
