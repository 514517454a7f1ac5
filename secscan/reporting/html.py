"""HTML report generator using Jinja2 templates."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from secscan.core.vulnerability import SEVERITIES_DESC, ScanReport

TEMPLATE_DIR = Path(__file__).parent / "templates"

SEVERITY_COLORS = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#facc15",
    "low": "#84cc16",
    "info": "#0ea5e9",
}

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def to_html(report: ScanReport) -> str:
    template = _env.get_template("report.html")
    return template.render(
        report=report,
        summary=report.summary.to_dict(),
        severities=[s.value for s in SEVERITIES_DESC],
        colors=SEVERITY_COLORS,
    )
