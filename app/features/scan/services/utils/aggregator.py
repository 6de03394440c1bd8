from typing import Dict, List, Sequence

from app.features.scan.schemas.audit import (
    PageAuditResult,
    PageSummary,
    RuleFinding,
    SiteSummary,
    TopRule,
)

TOP_RULES_LIMIT = 10


def summarize_pages(reports: Sequence[PageAuditResult]) -> List[PageSummary]:
    """Per-page violation/incomplete counts, in input order."""
    return [
        PageSummary(
            url=report.url,
            violation_count=len(report.violations),
            incomplete_count=len(report.incomplete),
        )
        for report in reports
    ]


def rank_rules(reports: Sequence[PageAuditResult], limit: int = TOP_RULES_LIMIT) -> List[TopRule]:
    """
    Rank violated rules by the number of affected elements across the site.

    The first occurrence of a rule id supplies its metadata; later occurrences
    only add to the count. Equal counts keep first-seen order.
    """
    counts: Dict[str, int] = {}
    first_seen: Dict[str, RuleFinding] = {}

    for report in reports:
        for finding in report.violations:
            counts[finding.rule_id] = counts.get(finding.rule_id, 0) + len(finding.affected_nodes)
            first_seen.setdefault(finding.rule_id, finding)

    # sorted() is stable and dicts keep insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]

    return [
        TopRule(
            rule_id=rule_id,
            count=count,
            impact=first_seen[rule_id].impact,
            help=first_seen[rule_id].help,
            help_url=first_seen[rule_id].help_url,
            description=first_seen[rule_id].description,
        )
        for rule_id, count in ranked
    ]


def summarize_site(reports: Sequence[PageAuditResult]) -> SiteSummary:
    """Reduce per-page audit results into site-level statistics. Pure."""
    return SiteSummary(
        total_pages=len(reports),
        total_violations=sum(len(r.violations) for r in reports),
        total_incomplete=sum(len(r.incomplete) for r in reports),
        top_rules=rank_rules(reports),
        page_summaries=summarize_pages(reports),
    )
