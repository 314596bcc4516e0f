"""
M365 Security Posture Engine — Command-line entry point

Usage:
    python -m m365_posture_engine assess --facts facts.json --tenant-id <GUID>
    python -m m365_posture_engine assess --facts facts.json --tenant-id <GUID> --config config.json
    python -m m365_posture_engine history --tenant-id <GUID>
    python -m m365_posture_engine show <assessment-id>
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from . import __version__
from .assessment import AssessmentService, AssessmentStore, Assessor
from .config import ConfigurationError, EngineConfig
from .reporting import export_csv, export_json, export_markdown, render_markdown
from .telemetry import load_facts

logger = logging.getLogger("m365_posture_engine")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="m365_posture_engine",
        description="M365 Security Posture Engine — scoring, gaps and recommendations",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON configuration file (weights, thresholds, targets)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the SQLite assessment store (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # assess
    assess_p = subparsers.add_parser("assess", help="Score a tenant from a facts bundle")
    assess_p.add_argument("--facts", "-f", type=Path, required=True, help="Collector facts bundle (JSON)")
    assess_p.add_argument("--tenant-id", required=True, help="Tenant ID (GUID)")
    assess_p.add_argument("--tenant-name", default=None, help="Display name for reports")
    assess_p.add_argument("--assessor-name", default="", help="Name of the person running the assessment")
    assess_p.add_argument("--assessor-email", default="", help="Assessor e-mail")
    assess_p.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory for reports (default: ./m365_posture_<timestamp>)",
    )
    assess_p.add_argument(
        "--formats",
        nargs="+",
        choices=["json", "csv", "markdown"],
        default=None,
        help="Report formats to generate",
    )
    assess_p.add_argument(
        "--alerts",
        type=int,
        default=None,
        help="Open security alert count (overrides the count derived from threat protection facts)",
    )
    assess_p.add_argument("--no-save", action="store_true", help="Do not persist the assessment")

    # history
    hist_p = subparsers.add_parser("history", help="List recent assessments for a tenant")
    hist_p.add_argument("--tenant-id", required=True, help="Tenant ID (GUID)")
    hist_p.add_argument("--limit", type=int, default=10, help="Maximum rows (default: 10)")

    # show
    show_p = subparsers.add_parser("show", help="Print one stored assessment")
    show_p.add_argument("assessment_id", help="Assessment ID")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Build engine configuration from the config file and CLI overrides."""
    if args.config:
        if not args.config.exists():
            raise ConfigurationError(f"Config file not found: {args.config}")
        config = EngineConfig.from_file(args.config)
    else:
        config = EngineConfig()

    if args.db:
        config.db_path = str(args.db)
    if args.verbose:
        config.verbose = True
    if getattr(args, "output_dir", None):
        config.output.base_dir = str(args.output_dir)
    if getattr(args, "formats", None):
        config.output.formats = list(args.formats)
    return config


def _cmd_assess(args: argparse.Namespace, config: EngineConfig) -> int:
    facts = load_facts(args.facts)
    if args.alerts is not None:
        facts = replace(facts, open_alerts=args.alerts)
    store = None if args.no_save else AssessmentStore(config.db_path)
    service = AssessmentService(
        config.scoring,
        store=store,
        targets=config.targets,
    )
    assessor = Assessor(name=args.assessor_name, email=args.assessor_email)

    if store is not None:
        assessment = service.run(facts, args.tenant_id, assessor=assessor)
    else:
        assessment = service.assess(facts, args.tenant_id, assessor=assessor)

    metrics = assessment.metrics
    print("=" * 70)
    print(f" M365 Security Posture Engine v{__version__}")
    print("=" * 70)
    print(f"\n📋 Assessment ID: {assessment.id}")
    print(f"🏢 Tenant:        {args.tenant_name or args.tenant_id}")
    print(f"\n  Overall Score:    {assessment.overall_score}/100 ({assessment.score_label})")
    print(f"  Risk Level:       {assessment.risk_level}")
    print(f"  Open Alerts:      {metrics.open_alerts}")
    for name, record in metrics.categories.items():
        flag = "" if record.data_collected else "  ⚠ data incomplete"
        print(f"    {name:28s} {record.score:3d}/100{flag}")

    print(f"\n  Recommendations:  {len(assessment.recommendations)}")
    for i, rec in enumerate(assessment.recommendations[:10], 1):
        print(f"    {i:2d}. [{rec.severity.upper():6s}] {rec.title}")

    output_dir = config.output.report_dir
    formats = config.output.formats
    print()
    if "json" in formats:
        print(f"  📄 JSON:       {export_json(assessment, output_dir)}")
    if "csv" in formats:
        for p in export_csv(assessment, output_dir):
            print(f"  📊 CSV:        {p}")
    if "markdown" in formats:
        print(f"  📝 Markdown:   {export_markdown(assessment, output_dir, args.tenant_name or '')}")
    print()
    return 0


def _cmd_history(args: argparse.Namespace, config: EngineConfig) -> int:
    store = AssessmentStore(config.db_path)
    assessments = store.list_for_tenant(args.tenant_id, limit=args.limit)
    if not assessments:
        print(f"No assessments stored for tenant {args.tenant_id}.")
        return 0

    print(f"\n  {'Assessment ID':<34s} {'Date':<26s} {'Score':>5s}  {'Risk':<9s} {'Status'}")
    print(f"  {'─'*34} {'─'*26} {'─'*5}  {'─'*9} {'─'*9}")
    for a in assessments:
        score = "-" if a.overall_score is None else str(a.overall_score)
        print(
            f"  {a.id:<34s} {a.assessment_date.isoformat()[:26]:<26s} {score:>5s}  "
            f"{a.risk_level or '-':<9s} {a.status}"
        )
    print()
    return 0


def _cmd_show(args: argparse.Namespace, config: EngineConfig) -> int:
    store = AssessmentStore(config.db_path)
    assessment = store.get(args.assessment_id)
    if assessment is None:
        print(f"  ❌ Assessment '{args.assessment_id}' not found.")
        return 1
    print(render_markdown(assessment))
    return 0


COMMANDS = {
    "assess": _cmd_assess,
    "history": _cmd_history,
    "show": _cmd_show,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    if not args.command:
        print("Usage: python -m m365_posture_engine {assess|history|show} ...")
        return 0

    try:
        config = build_config(args)
        return COMMANDS[args.command](args, config)
    except ConfigurationError as e:
        logger.debug("Configuration rejected", exc_info=True)
        print(f"\n❌ Configuration error: {e}")
        return 2
    except FileNotFoundError as e:
        print(f"\n❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
