"""
Metric Normalizer — Converts raw per-category telemetry into 0-100 scores.

Each category scorer computes the category's headline ratio × 100 (rounded
half-up) plus its sub-metric percentages. A zero denominator or an absent
required field never raises: the category scores 0, is flagged
``data_collected=False`` and a DataIncompleteWarning is recorded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping, Optional

from ..telemetry.facts import (
    CategoryFacts,
    CloudAppsFacts,
    DataProtectionFacts,
    EndpointFacts,
    FactBundle,
    IdentityFacts,
    InformationProtectionFacts,
    LicenseFacts,
    SecureScoreFacts,
    ThreatProtectionFacts,
)
from .models import CategoryMetrics
from .utils import clamp_score, ratio_percent, round_half_up, to_decimal

logger = logging.getLogger("m365_posture_engine.scoring.normalizer")


class DataIncompleteWarning(UserWarning):
    """A category's inputs were missing or zero. Recorded, never raised."""

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"{category}: {reason}")


@dataclass
class NormalizationResult:
    categories: dict[str, CategoryMetrics] = field(default_factory=dict)
    warnings: list[DataIncompleteWarning] = field(default_factory=list)

    @property
    def scores(self) -> dict[str, int]:
        return {name: record.score for name, record in self.categories.items()}


def _pct(value: Optional[Decimal]) -> Optional[float]:
    if value is None:
        return None
    return float(clamp_score(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass
class _Scored:
    """Intermediate output of a category scorer."""
    headline: Optional[Decimal]
    missing: str = ""
    values: dict[str, Optional[float]] = field(default_factory=dict)
    details: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Category scorers
# ---------------------------------------------------------------------------

def _score_license(facts: LicenseFacts) -> _Scored:
    utilization = ratio_percent(facts.assigned_licenses, facts.total_licenses)
    details = {}
    if facts.license_details:
        details["licenseDetails"] = [
            {
                **sku,
                "utilizationRate": _pct(ratio_percent(sku["assignedLicenses"], sku["totalLicenses"])),
            }
            for sku in facts.license_details
        ]
    return _Scored(
        headline=utilization,
        missing="total or assigned license count absent or zero",
        values={"utilizationRate": _pct(utilization)},
        details=details,
    )


def summarize_controls(facts: SecureScoreFacts) -> dict[str, int]:
    """Count Secure Score control profiles by implementation status."""
    summary = {"Implemented": 0, "Partial": 0, "Not Implemented": 0}
    for control in facts.control_scores:
        status = control.implementation_status
        if not isinstance(status, str) or status not in summary:
            status = "Not Implemented"
        summary[status] += 1
    return summary


def _score_secure_score(facts: SecureScoreFacts) -> _Scored:
    percentage = ratio_percent(facts.current_score, facts.max_score)
    values = {"secureScorePercentage": _pct(percentage)}
    details = {}
    if facts.control_scores:
        summary = summarize_controls(facts)
        details["controlSummary"] = summary
        values["controlsImplemented"] = _pct(
            ratio_percent(summary["Implemented"], len(facts.control_scores))
        )
    return _Scored(
        headline=percentage,
        missing="current or max Secure Score absent or zero",
        values=values,
        details=details,
    )


def _score_identity(facts: IdentityFacts) -> _Scored:
    if facts.mfa_adoption is not None:
        mfa = clamp_score(facts.mfa_adoption)
    else:
        mfa = ratio_percent(facts.mfa_registered_users, facts.total_users)
    details = {}
    if facts.guest_users is not None:
        details["guestUsers"] = int(facts.guest_users)
    return _Scored(
        headline=mfa,
        missing="MFA adoption absent and no registered/total user counts",
        values={
            "mfaAdoption": _pct(mfa),
            "protectedAdminAccounts": _pct(ratio_percent(
                facts.admin_accounts_protected, facts.admin_accounts_total
            )),
            "conditionalAccessCoverage": _pct(ratio_percent(
                facts.conditional_access_policies_enabled,
                facts.conditional_access_policies_total,
            )),
        },
        details=details,
    )


def _score_data_protection(facts: DataProtectionFacts) -> _Scored:
    active = ratio_percent(facts.dlp_policies_active, facts.dlp_policies_total)
    return _Scored(
        headline=active,
        missing="DLP policy counts absent or zero",
        values={"activeDlpPolicies": _pct(active)},
    )


def _score_endpoint(facts: EndpointFacts) -> _Scored:
    compliance = ratio_percent(facts.devices_compliant, facts.devices_total)
    defender: Optional[float] = None
    if facts.defender_enabled is not None:
        defender = 100.0 if (facts.defender_enabled and facts.defender_up_to_date) else 0.0
    return _Scored(
        headline=compliance,
        missing="device compliance counts absent or zero",
        values={"deviceCompliance": _pct(compliance), "defenderStatus": defender},
    )


def _score_cloud_apps(facts: CloudAppsFacts) -> _Scored:
    safety = None
    if facts.oauth_apps_high_risk is not None and facts.oauth_apps_total is not None:
        risky = ratio_percent(facts.oauth_apps_high_risk, facts.oauth_apps_total)
        if risky is not None:
            safety = 100 - clamp_score(risky)
    return _Scored(
        headline=safety,
        missing="OAuth app counts absent or zero",
        values={"oauthAppSafety": _pct(safety)},
    )


def _score_information_protection(facts: InformationProtectionFacts) -> _Scored:
    usage = ratio_percent(facts.labels_applied, facts.labels_total)
    return _Scored(
        headline=usage,
        missing="sensitivity label counts absent or zero",
        values={"aipLabelUsage": _pct(usage)},
    )


def _score_threat_protection(facts: ThreatProtectionFacts) -> _Scored:
    resolution = None
    counts = (facts.alerts_high, facts.alerts_medium, facts.alerts_low, facts.alerts_resolved)
    if facts.alerts_resolved is not None:
        total = sum(to_decimal(n) for n in counts if n is not None)
        resolution = ratio_percent(facts.alerts_resolved, total)
    return _Scored(
        headline=resolution,
        missing="alert counts absent or zero",
        values={"alertResolutionRate": _pct(resolution)},
        details={"openAlerts": facts.open_alerts},
    )


CategoryScorer = Callable[[CategoryFacts], _Scored]

CATEGORY_SCORERS: dict[str, CategoryScorer] = {
    "license": _score_license,
    "secureScore": _score_secure_score,
    "identity": _score_identity,
    "dataProtection": _score_data_protection,
    "endpoint": _score_endpoint,
    "cloudApps": _score_cloud_apps,
    "informationProtection": _score_information_protection,
    "threatProtection": _score_threat_protection,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def normalize_category(category: str, facts: CategoryFacts, scorer: CategoryScorer) -> tuple[CategoryMetrics, Optional[DataIncompleteWarning]]:
    """Score one category. Returns the record and, if incomplete, the warning."""
    scored = scorer(facts)
    values = {k: v for k, v in scored.values.items() if v is not None}

    reason = ""
    if not facts.data_collected:
        reason = "collector reported dataCollected=false"
    elif scored.headline is None:
        reason = scored.missing

    if reason:
        warning = DataIncompleteWarning(category, reason)
        logger.warning(f"[{category}] Incomplete data — score defaults to 0 ({reason})")
        record = CategoryMetrics(
            category=category,
            score=0,
            values=values if facts.data_collected else {},
            data_collected=False,
            details=scored.details,
        )
        return record, warning

    record = CategoryMetrics(
        category=category,
        score=round_half_up(clamp_score(scored.headline)),
        values=values,
        data_collected=True,
        details=scored.details,
    )
    return record, None


def normalize(
    facts: FactBundle,
    scorers: Optional[Mapping[str, CategoryScorer]] = None,
) -> NormalizationResult:
    """
    Normalize every category present in the bundle.

    Args:
        facts: Raw per-category facts from the telemetry collector.
        scorers: Category → scorer table. Defaults to CATEGORY_SCORERS.

    Returns:
        NormalizationResult with one CategoryMetrics per scored category and
        the DataIncompleteWarnings raised along the way (as values).
    """
    table = CATEGORY_SCORERS if scorers is None else scorers
    result = NormalizationResult()

    for category, category_facts in facts.categories.items():
        scorer = table.get(category)
        if scorer is None:
            logger.warning(f"No scorer registered for category '{category}' — skipped")
            continue
        record, warning = normalize_category(category, category_facts, scorer)
        result.categories[category] = record
        if warning is not None:
            result.warnings.append(warning)

    logger.info(
        f"Normalized {len(result.categories)} categories "
        f"({len(result.warnings)} incomplete)"
    )
    return result
