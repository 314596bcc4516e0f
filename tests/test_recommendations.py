"""Tests for the recommendation generator."""

from m365_posture_engine.analysis import DEFAULT_KNOWLEDGE_BASE, GapEntry, generate_recommendations
from m365_posture_engine.analysis.models import HIGH, LOW, MEDIUM
from m365_posture_engine.analysis.recommendations import GENERIC_REMEDIATION, recommendation_id


def _gap(category, metric, current, target, impact):
    return GapEntry(category=category, metric=metric, current=current, target=target, impact=impact)


class TestGenerateRecommendations:
    def test_known_pair_uses_knowledge_base(self):
        recs = generate_recommendations([_gap("identity", "mfaAdoption", 60, 90, HIGH)])
        assert len(recs) == 1
        rec = recs[0]
        entry = DEFAULT_KNOWLEDGE_BASE[("identity", "mfaAdoption")]
        assert rec.title == "Enforce Multi-Factor Authentication (MFA)"
        assert rec.remediation == entry.remediation
        assert rec.references == list(entry.references)
        assert rec.severity == HIGH
        assert rec.description == "Current mfaAdoption is at 60%, which is 30% below the 90% target."
        assert rec.impact == "High impact on overall security posture"

    def test_unknown_pair_uses_generic_template(self):
        recs = generate_recommendations([_gap("exchange", "mailboxAuditing", 20, 100, MEDIUM)])
        rec = recs[0]
        assert rec.title == "Review mailboxAuditing in exchange"
        assert rec.remediation.startswith(GENERIC_REMEDIATION)
        assert rec.references == []

    def test_empty_gaps(self):
        assert generate_recommendations([]) == []

    def test_duplicate_pair_refreshes_remediation_only(self):
        kb = {}
        recs = generate_recommendations([
            _gap("identity", "mfaAdoption", 60, 90, HIGH),
            _gap("identity", "mfaAdoption", 70, 95, LOW),
        ], kb)
        assert len(recs) == 1
        rec = recs[0]
        assert rec.severity == HIGH
        assert "60%" in rec.description
        assert rec.remediation.endswith("Bring mfaAdoption from 70% to at least 95%.")

    def test_ordered_by_severity_then_arrival(self):
        recs = generate_recommendations([
            _gap("license", "utilizationRate", 85, 90, LOW),
            _gap("secureScore", "secureScorePercentage", 70, 80, MEDIUM),
            _gap("identity", "mfaAdoption", 60, 95, HIGH),
            _gap("endpoint", "defenderStatus", 0, 100, HIGH),
        ])
        assert [r.metric for r in recs] == [
            "mfaAdoption", "defenderStatus", "secureScorePercentage", "utilizationRate",
        ]

    def test_severity_monotonic_within_category(self):
        recs = generate_recommendations([
            _gap("identity", "mfaAdoption", 60, 95, HIGH),                 # gap 35
            _gap("identity", "conditionalAccessCoverage", 0, 80, MEDIUM),   # gap 80
            _gap("identity", "guestReview", 90, 95, LOW),                   # gap 5
        ])
        by_metric = {r.metric: r.severity for r in recs}
        assert by_metric["conditionalAccessCoverage"] == HIGH
        assert by_metric["mfaAdoption"] == HIGH
        assert by_metric["guestReview"] == LOW

    def test_other_categories_not_raised(self):
        recs = generate_recommendations([
            _gap("identity", "mfaAdoption", 90, 95, HIGH),
            _gap("endpoint", "deviceCompliance", 10, 90, MEDIUM),
        ])
        assert {r.metric: r.severity for r in recs}["deviceCompliance"] == MEDIUM

    def test_deterministic(self):
        gaps = [
            _gap("identity", "mfaAdoption", 60, 95, HIGH),
            _gap("license", "utilizationRate", 85, 90, LOW),
        ]
        first = [r.to_dict() for r in generate_recommendations(gaps)]
        second = [r.to_dict() for r in generate_recommendations(gaps)]
        assert first == second
        assert first[0]["id"] == recommendation_id("identity", "mfaAdoption")
