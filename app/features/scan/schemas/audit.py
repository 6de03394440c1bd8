"""
Audit Schemas

Per-page axe results and the site-level aggregates built from them.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Impact(str, Enum):
    critical = "critical"
    serious = "serious"
    moderate = "moderate"
    minor = "minor"
    unknown = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Impact":
        try:
            return cls((value or "unknown").lower())
        except ValueError:
            return cls.unknown


class AffectedNode(BaseModel):
    """One page element implicated by a finding."""
    target_selectors: List[str] = Field(default_factory=list)
    failure_summary: Optional[str] = None

    @classmethod
    def from_axe(cls, node: Dict[str, Any]) -> "AffectedNode":
        selectors = []
        for target in node.get("target") or []:
            # iframe and shadow DOM targets come back as nested selector lists
            if isinstance(target, list):
                selectors.append(" >>> ".join(str(part) for part in target))
            else:
                selectors.append(str(target))
        return cls(target_selectors=selectors, failure_summary=node.get("failureSummary"))


class RuleFinding(BaseModel):
    """A rule violation or needs-review result reported by axe."""
    rule_id: str
    impact: Impact = Impact.unknown
    description: str = ""
    help: str = ""
    help_url: str = ""
    tags: List[str] = Field(default_factory=list)
    affected_nodes: List[AffectedNode] = Field(default_factory=list)

    @classmethod
    def from_axe(cls, rule: Dict[str, Any]) -> "RuleFinding":
        return cls(
            rule_id=rule["id"],
            impact=Impact.parse(rule.get("impact")),
            description=rule.get("description") or "",
            help=rule.get("help") or "",
            help_url=rule.get("helpUrl") or "",
            tags=list(dict.fromkeys(rule.get("tags") or [])),
            affected_nodes=[AffectedNode.from_axe(n) for n in rule.get("nodes") or []],
        )


class PageAuditResult(BaseModel):
    url: str
    timestamp: datetime
    user_agent: str = ""
    violations: List[RuleFinding] = Field(default_factory=list)
    incomplete: List[RuleFinding] = Field(default_factory=list)
    passes: Optional[List[RuleFinding]] = None

    @classmethod
    def from_axe(
        cls,
        url: str,
        results: Dict[str, Any],
        timestamp: datetime,
        user_agent: str = "",
    ) -> "PageAuditResult":
        passes = results.get("passes")
        return cls(
            url=url,
            timestamp=timestamp,
            user_agent=user_agent,
            violations=[RuleFinding.from_axe(r) for r in results.get("violations") or []],
            incomplete=[RuleFinding.from_axe(r) for r in results.get("incomplete") or []],
            passes=[RuleFinding.from_axe(r) for r in passes] if passes is not None else None,
        )


class TopRule(BaseModel):
    rule_id: str
    count: int
    impact: Impact = Impact.unknown
    help: str = ""
    help_url: str = ""
    description: str = ""


class PageSummary(BaseModel):
    url: str
    violation_count: int
    incomplete_count: int


class SiteSummary(BaseModel):
    total_pages: int
    total_violations: int
    total_incomplete: int
    top_rules: List[TopRule] = Field(default_factory=list)
    page_summaries: List[PageSummary] = Field(default_factory=list)


class FailedPage(BaseModel):
    url: str
    error: str


class ReportArtifact(BaseModel):
    """The machine-readable report written next to the rendered HTML."""
    model_config = ConfigDict(frozen=True)

    report_id: str
    start_url: str
    scanned_at: datetime
    count: int
    reports: List[PageAuditResult] = Field(default_factory=list)
    failed_pages: List[FailedPage] = Field(default_factory=list)
