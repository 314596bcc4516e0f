"""Tests for JSON, CSV and Markdown assessment reports."""

import csv
import json

import pytest

from m365_posture_engine.assessment import AssessmentService
from m365_posture_engine.reporting import export_csv, export_json, export_markdown, render_markdown


@pytest.fixture()
def assessment(example_facts, scoring_config):
    return AssessmentService(scoring_config).assess(example_facts, "tenant-a")


class TestJsonExport:
    def test_writes_full_record(self, assessment, tmp_path):
        path = export_json(assessment, tmp_path / "out")
        assert path.name == f"m365_posture_assessment_{assessment.id}.json"

        payload = json.loads(path.read_text(encoding="utf-8"))
        record = payload["assessment"]
        assert payload["metadata"]["version"]
        assert record["tenantId"] == "tenant-a"
        assert record["status"] == "completed"
        assert record["metrics"]["score"]["overall"] == 72
        assert record["riskLevel"] == "Low"
        assert len(record["recommendations"]) == 5
        assert record["comparisonResults"]["bestPractices"]["gaps"][0]["metric"] == "protectedAdminAccounts"

    def test_summary_block(self, assessment, tmp_path):
        payload = json.loads(export_json(assessment, tmp_path).read_text(encoding="utf-8"))
        assert payload["metadata"]["assessment_id"] == assessment.id
        assert payload["summary"] == {
            "overallScore": 72,
            "scoreLabel": "Needs Attention",
            "riskLevel": "Low",
            "openAlerts": 0,
            "incompleteCategories": [],
            "recommendationsBySeverity": {"high": 3, "medium": 1, "low": 1},
        }


class TestCsvExport:
    def test_three_files(self, assessment, tmp_path):
        paths = export_csv(assessment, tmp_path)
        assert [p.name for p in paths] == [
            f"category_scores_{assessment.id}.csv",
            f"recommendations_{assessment.id}.csv",
            f"assessment_summary_{assessment.id}.csv",
        ]

    def test_category_scores(self, assessment, tmp_path):
        scores_path = export_csv(assessment, tmp_path)[0]
        with open(scores_path, newline="", encoding="utf-8-sig") as fh:
            rows = {row["category"]: row for row in csv.DictReader(fh)}
        assert rows["license"]["score"] == "85"
        assert rows["secureScore"]["weight"] == "0.4"
        assert rows["identity"]["data_collected"] == "True"

    def test_recommendations(self, assessment, tmp_path):
        recs_path = export_csv(assessment, tmp_path)[1]
        with open(recs_path, newline="", encoding="utf-8-sig") as fh:
            rows = list(csv.DictReader(fh))
        assert [r["severity"] for r in rows] == ["high", "high", "high", "medium", "low"]
        assert rows[1]["title"] == "Enforce Multi-Factor Authentication (MFA)"
        assert rows[1]["references"].startswith("https://")


class TestMarkdownReport:
    def test_render(self, assessment):
        content = render_markdown(assessment, tenant_name="Contoso")
        assert "**Tenant:** Contoso" in content
        assert "**72 / 100** (Needs Attention)" in content
        assert "| license | 85 | 30% | yes |" in content
        assert "Enforce Multi-Factor Authentication (MFA)" in content
        assert "Change Since Previous Assessment" not in content

    def test_tenant_id_used_when_no_name(self, assessment):
        assert "**Tenant:** tenant-a" in render_markdown(assessment)

    def test_export(self, assessment, tmp_path):
        path = export_markdown(assessment, tmp_path)
        assert path.name == f"assessment_report_{assessment.id}.md"
        assert path.read_text(encoding="utf-8").startswith("# M365 Security Posture Assessment")
