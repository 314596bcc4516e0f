"""Shared fixtures for the posture engine test suite."""

import pytest

from m365_posture_engine.assessment import AssessmentStore
from m365_posture_engine.config import ScoringConfig
from m365_posture_engine.telemetry import FactBundle


@pytest.fixture()
def example_facts_data() -> dict:
    """Three-category bundle whose scores are license 85, secureScore 70, identity 60."""
    return {
        "license": {"totalLicenses": 100, "assignedLicenses": 85, "dataCollected": True},
        "secureScore": {"currentScore": 350, "maxScore": 500, "dataCollected": True},
        "identity": {"mfaAdoption": 60, "dataCollected": True},
    }


@pytest.fixture()
def example_facts(example_facts_data) -> FactBundle:
    return FactBundle.from_dict(example_facts_data)


@pytest.fixture()
def full_facts_data() -> dict:
    """Seven-category bundle as produced by the extended collector."""
    return {
        "identity": {
            "mfaAdoption": 80,
            "adminAccounts": {"total": 10, "protected": 7},
            "conditionalAccess": {"total": 5, "enabled": 4},
            "guestUsers": 12,
        },
        "dataProtection": {"dlpPolicies": {"total": 10, "active": 6}},
        "endpoint": {
            "deviceCompliance": {"total": 200, "compliant": 190},
            "defenderStatus": {"enabled": True, "upToDate": False},
        },
        "cloudApps": {"oauthApps": {"total": 40, "highRisk": 4}},
        "informationProtection": {"aipLabels": {"total": 100, "applied": 50}},
        "threatProtection": {"alerts": {"high": 1, "medium": 2, "low": 1, "resolved": 16}},
    }


@pytest.fixture()
def full_weights() -> dict:
    return {
        "identity": 0.25,
        "dataProtection": 0.15,
        "endpoint": 0.15,
        "cloudApps": 0.15,
        "informationProtection": 0.1,
        "threatProtection": 0.2,
    }


@pytest.fixture()
def scoring_config() -> ScoringConfig:
    return ScoringConfig()


@pytest.fixture()
def store(tmp_path) -> AssessmentStore:
    return AssessmentStore(tmp_path / "assessments.db")
