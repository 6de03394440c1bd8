from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from app.features.scan.schemas.audit import FailedPage, PageAuditResult, SiteSummary
from app.features.scan.services.discovery.page_discovery import PageDiscoveryService
from app.features.scan.services.reporting.artifact_writer import ReportStorage
from app.features.scan.services.scan.scan import ScanService
from app.features.scan.services.utils.aggregator import summarize_site
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

FAILURE_POLICIES = ("abort", "skip")


class SiteScanOutcome(BaseModel):
    report_id: str
    start_url: str
    scanned_at: datetime
    pages: List[str] = Field(default_factory=list)
    summary: SiteSummary
    failed_pages: List[FailedPage] = Field(default_factory=list)


class SiteScanService:
    """Crawl a site, audit every discovered page and store the report."""

    def __init__(
        self,
        discovery: Optional[PageDiscoveryService] = None,
        scanner: Optional[ScanService] = None,
        storage: Optional[ReportStorage] = None,
        failure_policy: Optional[str] = None,
    ):
        self.discovery = discovery or PageDiscoveryService()
        self.scanner = scanner or ScanService()
        self.storage = storage or ReportStorage()
        self.failure_policy = failure_policy or settings.SITE_SCAN_FAILURE_POLICY
        if self.failure_policy not in FAILURE_POLICIES:
            raise ValueError(f"Unknown site scan failure policy: {self.failure_policy!r}")

    def run(
        self,
        start_url: str,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> SiteScanOutcome:
        """
        Raises:
            InvalidUrlError: start_url is not an absolute http(s) URL
            NavigationError, AuditError: a page failed under the "abort" policy
            StorageError: the report could not be written
        """
        pages = self.discovery.crawl(start_url, max_pages=max_pages, max_depth=max_depth)

        reports: List[PageAuditResult] = []
        failed: List[FailedPage] = []
        for outcome in self.scanner.scan_each(pages):
            if outcome.ok:
                reports.append(outcome.result)
                continue
            if self.failure_policy == "abort":
                raise outcome.error
            logger.warning(f"Skipping {outcome.url} in site report: {outcome.error}")
            failed.append(FailedPage(url=outcome.url, error=str(outcome.error)))

        scanned_at = datetime.now(timezone.utc)
        summary = summarize_site(reports)
        report_id = self.storage.persist(start_url, scanned_at, reports, failed_pages=failed)

        logger.info(
            f"Site scan of {start_url} stored as {report_id}: "
            f"{summary.total_pages} pages, {summary.total_violations} violations"
        )
        return SiteScanOutcome(
            report_id=report_id,
            start_url=start_url,
            scanned_at=scanned_at,
            pages=pages,
            summary=summary,
            failed_pages=failed,
        )
