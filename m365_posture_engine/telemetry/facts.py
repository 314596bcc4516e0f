"""
Raw telemetry fact records — fixed-shape per-category inputs to the normalizer.

The telemetry collector hands over a bundle keyed by category, each carrying
provider-specific counters (camelCase, as returned by Graph) and a
``dataCollected`` flag. Every field a collector may omit is ``None`` here so
the normalizer can tell "absent" from "zero".
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger("m365_posture_engine.telemetry")


def _num(data: dict, *keys: str) -> Optional[float]:
    """First finite numeric value found under any of the given keys, else None."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and math.isfinite(value):
            return value
    return None


def _rows(data: dict, key: str) -> list:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        logger.warning(f"Ignoring {key}: expected a list, got {type(rows).__name__}")
        return []
    return rows


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _flag(data: dict, key: str) -> Optional[bool]:
    value = data.get(key)
    return value if isinstance(value, bool) else None


@dataclass(frozen=True)
class CategoryFacts:
    """Common base: every category record carries the collector's flag."""
    data_collected: bool = True


@dataclass(frozen=True)
class LicenseFacts(CategoryFacts):
    total_licenses: Optional[float] = None
    assigned_licenses: Optional[float] = None
    license_details: tuple = ()

    @classmethod
    def from_dict(cls, data: dict) -> "LicenseFacts":
        details = []
        for d in _rows(data, "licenseDetails"):
            if not isinstance(d, dict):
                logger.warning(f"Skipping malformed licenseDetails entry: {d!r}")
                continue
            total = _num(d, "totalLicenses")
            assigned = _num(d, "assignedLicenses")
            if total is None or assigned is None:
                logger.warning(
                    f"Skipping licenseDetails entry {d.get('skuPartNumber', '?')}: "
                    "license counts missing or not numeric"
                )
                continue
            details.append({
                "skuPartNumber": d.get("skuPartNumber", ""),
                "skuDisplayName": d.get("skuDisplayName", d.get("skuPartNumber", "")),
                "totalLicenses": total,
                "assignedLicenses": assigned,
            })
        return cls(
            data_collected=data.get("dataCollected", True),
            total_licenses=_num(data, "totalLicenses", "total"),
            assigned_licenses=_num(data, "assignedLicenses", "assigned"),
            license_details=tuple(details),
        )


@dataclass(frozen=True)
class SecureScoreControl:
    control_name: str
    category: str = "General"
    implementation_status: str = "Not Implemented"
    score: float = 0.0
    max_score: float = 0.0


@dataclass(frozen=True)
class SecureScoreFacts(CategoryFacts):
    current_score: Optional[float] = None
    max_score: Optional[float] = None
    control_scores: tuple[SecureScoreControl, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "SecureScoreFacts":
        controls = tuple(
            SecureScoreControl(
                control_name=c.get("controlName", "Unknown Control"),
                category=c.get("category", "General"),
                implementation_status=c.get("implementationStatus", "Not Implemented"),
                score=_num(c, "score") or 0,
                max_score=_num(c, "maxScore") or 0,
            )
            for c in _rows(data, "controlScores")
            if isinstance(c, dict)
        )
        return cls(
            data_collected=data.get("dataCollected", True),
            current_score=_num(data, "currentScore", "current"),
            max_score=_num(data, "maxScore", "max"),
            control_scores=controls,
        )


@dataclass(frozen=True)
class IdentityFacts(CategoryFacts):
    mfa_adoption: Optional[float] = None          # percent, 0-100
    total_users: Optional[float] = None
    mfa_registered_users: Optional[float] = None
    admin_accounts_total: Optional[float] = None
    admin_accounts_protected: Optional[float] = None
    conditional_access_policies_total: Optional[float] = None
    conditional_access_policies_enabled: Optional[float] = None
    guest_users: Optional[float] = None

    @staticmethod
    def _mfa_percent(data: dict) -> Optional[float]:
        """
        MFA adoption as a percentage.

        ``mfaAdoption`` is read as a percent (0-100). Collectors that report
        a fraction send ``mfaAdoptionRatio`` (0-1) instead; it is only used
        when ``mfaAdoption`` is absent.
        """
        percent = _num(data, "mfaAdoption")
        if percent is not None:
            return percent
        ratio = _num(data, "mfaAdoptionRatio")
        if ratio is None:
            return None
        if not 0 <= ratio <= 1:
            logger.warning(f"Ignoring mfaAdoptionRatio={ratio}: expected a fraction between 0 and 1")
            return None
        return float(Decimal(str(ratio)) * 100)

    @classmethod
    def from_dict(cls, data: dict) -> "IdentityFacts":
        admins = _section(data, "adminAccounts")
        ca = _section(data, "conditionalAccess")
        return cls(
            data_collected=data.get("dataCollected", True),
            mfa_adoption=cls._mfa_percent(data),
            total_users=_num(data, "totalUsers"),
            mfa_registered_users=_num(data, "mfaRegisteredUsers"),
            admin_accounts_total=_num(admins, "total"),
            admin_accounts_protected=_num(admins, "protected"),
            conditional_access_policies_total=_num(ca, "total"),
            conditional_access_policies_enabled=_num(ca, "enabled"),
            guest_users=_num(data, "guestUsers"),
        )


@dataclass(frozen=True)
class DataProtectionFacts(CategoryFacts):
    dlp_policies_total: Optional[float] = None
    dlp_policies_active: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "DataProtectionFacts":
        dlp = _section(data, "dlpPolicies")
        return cls(
            data_collected=data.get("dataCollected", True),
            dlp_policies_total=_num(dlp, "total"),
            dlp_policies_active=_num(dlp, "active"),
        )


@dataclass(frozen=True)
class EndpointFacts(CategoryFacts):
    devices_total: Optional[float] = None
    devices_compliant: Optional[float] = None
    defender_enabled: Optional[bool] = None
    defender_up_to_date: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> "EndpointFacts":
        compliance = _section(data, "deviceCompliance")
        defender = _section(data, "defenderStatus")
        return cls(
            data_collected=data.get("dataCollected", True),
            devices_total=_num(compliance, "total"),
            devices_compliant=_num(compliance, "compliant"),
            defender_enabled=_flag(defender, "enabled"),
            defender_up_to_date=_flag(defender, "upToDate"),
        )


@dataclass(frozen=True)
class CloudAppsFacts(CategoryFacts):
    oauth_apps_total: Optional[float] = None
    oauth_apps_high_risk: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CloudAppsFacts":
        apps = _section(data, "oauthApps")
        return cls(
            data_collected=data.get("dataCollected", True),
            oauth_apps_total=_num(apps, "total"),
            oauth_apps_high_risk=_num(apps, "highRisk"),
        )


@dataclass(frozen=True)
class InformationProtectionFacts(CategoryFacts):
    labels_total: Optional[float] = None
    labels_applied: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "InformationProtectionFacts":
        labels = _section(data, "aipLabels")
        return cls(
            data_collected=data.get("dataCollected", True),
            labels_total=_num(labels, "total"),
            labels_applied=_num(labels, "applied"),
        )


@dataclass(frozen=True)
class ThreatProtectionFacts(CategoryFacts):
    alerts_high: Optional[float] = None
    alerts_medium: Optional[float] = None
    alerts_low: Optional[float] = None
    alerts_resolved: Optional[float] = None

    @property
    def open_alerts(self) -> int:
        return int(sum(
            n for n in (self.alerts_high, self.alerts_medium, self.alerts_low)
            if n is not None
        ))

    @classmethod
    def from_dict(cls, data: dict) -> "ThreatProtectionFacts":
        alerts = _section(data, "alerts")
        return cls(
            data_collected=data.get("dataCollected", True),
            alerts_high=_num(alerts, "high"),
            alerts_medium=_num(alerts, "medium"),
            alerts_low=_num(alerts, "low"),
            alerts_resolved=_num(alerts, "resolved"),
        )


FACT_TYPES: dict[str, type] = {
    "license": LicenseFacts,
    "secureScore": SecureScoreFacts,
    "identity": IdentityFacts,
    "dataProtection": DataProtectionFacts,
    "endpoint": EndpointFacts,
    "cloudApps": CloudAppsFacts,
    "informationProtection": InformationProtectionFacts,
    "threatProtection": ThreatProtectionFacts,
}


@dataclass(frozen=True)
class FactBundle:
    """
    Raw facts for one assessment run, keyed by category.

    ``open_alerts`` overrides the alert count derived from the threat
    protection record when the collector reports it separately.
    """
    categories: dict[str, CategoryFacts] = field(default_factory=dict)
    open_alerts: Optional[int] = None

    def get(self, category: str) -> Optional[CategoryFacts]:
        return self.categories.get(category)

    @property
    def alert_count(self) -> int:
        if self.open_alerts is not None:
            return self.open_alerts
        threat = self.categories.get("threatProtection")
        if isinstance(threat, ThreatProtectionFacts):
            return threat.open_alerts
        return 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FactBundle":
        """Build a bundle from the collector's JSON shape. Unknown categories are skipped."""
        categories: dict[str, CategoryFacts] = {}
        for name, raw in data.items():
            if name == "openAlerts":
                continue
            fact_type = FACT_TYPES.get(name)
            if fact_type is None:
                logger.warning(f"Ignoring unknown telemetry category: {name}")
                continue
            if not isinstance(raw, dict):
                logger.warning(f"Telemetry for {name} is not an object — treating as not collected")
                raw = {"dataCollected": False}
            categories[name] = fact_type.from_dict(raw)
        open_alerts = data.get("openAlerts")
        return cls(
            categories=categories,
            open_alerts=open_alerts if isinstance(open_alerts, int) else None,
        )


def load_facts(path: str | Path) -> FactBundle:
    """Load a collector facts bundle from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return FactBundle.from_dict(data)
