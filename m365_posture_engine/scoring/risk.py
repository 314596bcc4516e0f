"""
Risk Classifier — Maps the overall score and open alert volume to a risk level.

Rules (defaults: warning=70, critical=50, alert bands 3 / 5):
  - Low       score >= warning and alerts < 3
  - Medium    critical <= score < warning, or 3 <= alerts <= 5
  - High      score < warning and alerts > 5, or score < critical
  - Critical  score < critical and alerts > 5
When more than one rule matches, the most severe level wins.
"""

from __future__ import annotations

import logging

from ..config import RiskThresholds

logger = logging.getLogger("m365_posture_engine.scoring.risk")

LOW = "Low"
MEDIUM = "Medium"
HIGH = "High"
CRITICAL = "Critical"

RISK_LEVELS = [LOW, MEDIUM, HIGH, CRITICAL]   # ascending severity


def _rank(level: str) -> int:
    return RISK_LEVELS.index(level)


def classify_risk(
    score: float,
    open_alerts: int,
    thresholds: RiskThresholds | None = None,
) -> str:
    """
    Classify tenant risk.

    A strong score combined with more than ``alert_severe`` alerts matches
    none of the rules; that case is classified Medium.
    """
    t = thresholds or RiskThresholds()
    alerts = max(0, int(open_alerts))
    below_warning = score < t.warning
    below_critical = score < t.critical
    elevated_alerts = t.alert_elevated <= alerts <= t.alert_severe
    severe_alerts = alerts > t.alert_severe

    matched = []
    if not below_warning and alerts < t.alert_elevated:
        matched.append(LOW)
    if (t.critical <= score < t.warning) or elevated_alerts:
        matched.append(MEDIUM)
    if (below_warning and severe_alerts) or below_critical:
        matched.append(HIGH)
    if below_critical and severe_alerts:
        matched.append(CRITICAL)

    if not matched:
        matched.append(MEDIUM)

    level = max(matched, key=_rank)
    logger.debug(f"Risk for score={score}, alerts={alerts}: {level} (matched {matched})")
    return level


def score_label(score: float, thresholds: RiskThresholds | None = None) -> str:
    """Human label for a posture score: Good / Needs Attention / Critical."""
    t = thresholds or RiskThresholds()
    if score >= t.good:
        return "Good"
    if score >= t.warning:
        return "Needs Attention"
    return "Critical"
