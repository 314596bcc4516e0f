"""
JSON exporter — Writes the full assessment record as JSON, headed by a
compact posture summary.
"""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from .. import __version__


def _summarize(assessment) -> dict:
    metrics = assessment.metrics
    severities = Counter(rec.severity for rec in assessment.recommendations)
    return {
        "overallScore": assessment.overall_score,
        "scoreLabel": assessment.score_label,
        "riskLevel": assessment.risk_level,
        "openAlerts": metrics.open_alerts if metrics else 0,
        "incompleteCategories": metrics.incomplete_categories if metrics else [],
        "recommendationsBySeverity": {
            level: severities.get(level, 0) for level in ("high", "medium", "low")
        },
    }


def export_json(assessment, output_dir: Path) -> Path:
    """
    Write the assessment (metrics, comparison results, recommendations)
    to a JSON file.

    Returns:
        Path to the created JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": {
            "engine": "M365 Security Posture Engine",
            "version": __version__,
            "assessment_id": assessment.id,
            "tenant_id": assessment.tenant_id,
            "generated_utc": datetime.now(timezone.utc).isoformat(),
        },
        "summary": _summarize(assessment),
        "assessment": assessment.to_dict(),
    }

    filepath = output_dir / f"m365_posture_assessment_{assessment.id}.json"
    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str, ensure_ascii=False)

    return filepath
