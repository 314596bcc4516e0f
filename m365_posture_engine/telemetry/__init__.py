"""Telemetry package — fixed-shape raw fact records supplied by the collector."""

from .facts import (
    FACT_TYPES,
    CategoryFacts,
    CloudAppsFacts,
    DataProtectionFacts,
    EndpointFacts,
    FactBundle,
    IdentityFacts,
    InformationProtectionFacts,
    LicenseFacts,
    SecureScoreControl,
    SecureScoreFacts,
    ThreatProtectionFacts,
    load_facts,
)

__all__ = [
    "FACT_TYPES",
    "CategoryFacts",
    "CloudAppsFacts",
    "DataProtectionFacts",
    "EndpointFacts",
    "FactBundle",
    "IdentityFacts",
    "InformationProtectionFacts",
    "LicenseFacts",
    "SecureScoreControl",
    "SecureScoreFacts",
    "ThreatProtectionFacts",
    "load_facts",
]
