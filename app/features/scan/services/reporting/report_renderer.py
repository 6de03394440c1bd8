"""Renders the human-readable HTML accessibility report."""
import os
from datetime import datetime
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.features.scan.schemas.audit import FailedPage, PageAuditResult, SiteSummary
from app.features.scan.services.utils.aggregator import summarize_site

current_dir = os.path.dirname(os.path.abspath(__file__))
scan_template_dir = os.path.join(current_dir, "../../template")

# Fallback path if running from a different location
if not os.path.exists(scan_template_dir):
    scan_template_dir = os.path.join(os.getcwd(), "app/features/scan/template")

env = Environment(
    loader=FileSystemLoader(scan_template_dir),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

IMPACT_BADGES = {
    "critical": "badge badge-critical",
    "serious": "badge badge-serious",
    "moderate": "badge badge-moderate",
    "minor": "badge badge-minor",
}


def impact_class(impact) -> str:
    value = getattr(impact, "value", impact) or "unknown"
    return IMPACT_BADGES.get(str(value).lower(), "badge")


def format_timestamp(value) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value or "")


env.filters["impact_class"] = impact_class
env.filters["timestamp"] = format_timestamp


def render_report(
    start_url: str,
    scanned_at: datetime,
    reports: Sequence[PageAuditResult],
    summary: Optional[SiteSummary] = None,
    failed_pages: Sequence[FailedPage] = (),
) -> bytes:
    """Render the site report as UTF-8 encoded HTML."""
    template = env.get_template("report.html")
    html = template.render(
        start_url=start_url,
        scanned_at=scanned_at,
        summary=summary or summarize_site(reports),
        reports=list(reports),
        failed_pages=list(failed_pages),
    )
    return html.encode("utf-8")
