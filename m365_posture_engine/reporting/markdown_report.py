"""
Markdown assessment report — rendered via Jinja2.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "assessment_report.md.j2"

_SEVERITY_ICONS = {
    "high":   "🟠",
    "medium": "🟡",
    "low":    "🟢",
}

_RISK_ICONS = {
    "Low":      "🟢",
    "Medium":   "🟡",
    "High":     "🟠",
    "Critical": "🔴",
}


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_markdown(assessment, tenant_name: str = "") -> str:
    template = _environment().get_template(TEMPLATE_NAME)
    return template.render(
        assessment=assessment,
        tenant_name=tenant_name or assessment.tenant_id,
        generated_utc=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        metrics=assessment.metrics,
        comparison=assessment.comparison_results,
        severity_icons=_SEVERITY_ICONS,
        risk_icon=_RISK_ICONS.get(assessment.risk_level or "", "⚪"),
    )


def export_markdown(assessment, output_dir: Path, tenant_name: str = "") -> Path:
    """
    Generate the Markdown assessment report.

    Returns:
        Path to the created Markdown file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"assessment_report_{assessment.id}.md"

    content = render_markdown(assessment, tenant_name)
    with open(filepath, "w", encoding="utf-8") as fh:
        fh.write(content)

    return filepath
