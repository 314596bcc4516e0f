"""Reporting package — multi-format assessment output."""

from .json_export import export_json
from .csv_export import export_csv
from .markdown_report import export_markdown, render_markdown

__all__ = [
    "export_json",
    "export_csv",
    "export_markdown",
    "render_markdown",
]
