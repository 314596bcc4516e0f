"""
CSV exporter — Produces structured CSV summaries of scores and recommendations.
"""

from __future__ import annotations

import csv
from pathlib import Path


def export_csv(assessment, output_dir: Path) -> list[Path]:
    """
    Write CSV files for category scores, recommendations and a summary row set.

    Returns:
        List of created CSV file paths.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    created = []
    metrics = assessment.metrics

    # --- Category Scores CSV ---
    scores_path = output_dir / f"category_scores_{assessment.id}.csv"
    SCORE_FIELDS = ["category", "score", "weight", "data_collected", "sub_metrics"]

    with open(scores_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=SCORE_FIELDS)
        writer.writeheader()
        for name, record in (metrics.categories.items() if metrics else []):
            writer.writerow({
                "category": name,
                "score": record.score,
                "weight": round(metrics.score.weights.get(name, 0.0), 4),
                "data_collected": record.data_collected,
                "sub_metrics": "; ".join(f"{k}={v}" for k, v in record.values.items()),
            })
    created.append(scores_path)

    # --- Recommendations CSV ---
    recs_path = output_dir / f"recommendations_{assessment.id}.csv"
    REC_FIELDS = [
        "id", "category", "metric", "severity", "title",
        "description", "impact", "remediation", "references",
    ]

    with open(recs_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=REC_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for rec in assessment.recommendations:
            row = rec.to_dict()
            row["references"] = " | ".join(r.url for r in rec.references)
            writer.writerow(row)
    created.append(recs_path)

    # --- Summary CSV ---
    summary_path = output_dir / f"assessment_summary_{assessment.id}.csv"
    with open(summary_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.writer(fh)
        writer.writerow(["metric", "value"])
        writer.writerow(["tenant_id", assessment.tenant_id])
        writer.writerow(["overall_score", assessment.overall_score])
        writer.writerow(["score_label", assessment.score_label])
        writer.writerow(["risk_level", assessment.risk_level])
        writer.writerow(["open_alerts", metrics.open_alerts if metrics else 0])
        writer.writerow(["recommendations", len(assessment.recommendations)])
        writer.writerow(["status", assessment.status])
    created.append(summary_path)

    return created
