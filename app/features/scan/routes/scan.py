from fastapi import APIRouter, Depends, HTTPException, status

from app.features.scan.dependencies.scan import get_scan_service, get_site_scan_service
from app.features.scan.schemas.scan import (
    ScanRequest,
    SiteScanRequest,
    SiteScanResponse,
    SiteScanSummary,
)
from app.features.scan.services.orchestration.site_scan import SiteScanService
from app.features.scan.services.scan.scan import ScanService
from app.platform.exceptions import A11yCheckerError, AuditError, NavigationError
from app.platform.logger import get_logger
from app.platform.response import api_response
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)

router = APIRouter(prefix="/scan", tags=["scan"])


def report_links(report_id: str) -> dict:
    return {
        "html_url": f"/reports/{report_id}/report.html",
        "json_url": f"/reports/{report_id}/report.json",
    }


# Selenium blocks, so these are plain `def` handlers and run in FastAPI's threadpool.

@router.post("")
def scan_page(
    data: ScanRequest,
    scanner: ScanService = Depends(get_scan_service),
):
    """
    Audit a single page against the WCAG A/AA rule set.

    Returns the page's violations and needs-review findings, plus passing
    rules when `include_passes` is set.
    """
    is_valid, url, error_message = validate_url(data.url)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Provide a valid http(s) URL: {error_message}"
        )

    try:
        result = scanner.scan_url(url, include_passes=data.include_passes)
    except (NavigationError, AuditError) as e:
        logger.error(f"Single page scan failed for {url}: {e}")
        return api_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Scan failed.",
            data={"details": str(e)}
        )

    return api_response(
        data=result,
        message=f"Found {len(result.violations)} violations on {url}"
    )


@router.post("/site")
def scan_site(
    data: SiteScanRequest,
    site_scanner: SiteScanService = Depends(get_site_scan_service),
):
    """
    Crawl a site from `start_url`, audit every discovered page and store the report.

    **Process:**
    1. Validates the start URL (http/https only)
    2. Crawls same-origin pages breadth-first within max_pages / max_depth
    3. Audits each page sequentially with axe-core
    4. Aggregates the results and writes report.json and report.html

    **Returns:** the report id, headline counts and links to both artifacts.
    """
    is_valid, start_url, error_message = validate_url(data.start_url)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Provide a valid start_url (http/https): {error_message}"
        )

    logger.info(f"Site scan requested for {start_url}")

    try:
        outcome = site_scanner.run(start_url, max_pages=data.max_pages, max_depth=data.max_depth)
    except A11yCheckerError as e:
        logger.error(f"Site scan failed for {start_url}: {e}")
        return api_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Site scan failed.",
            data={"details": str(e)}
        )

    response = SiteScanResponse(
        report_id=outcome.report_id,
        summary=SiteScanSummary(
            start_url=outcome.start_url,
            scanned_at=outcome.scanned_at,
            pages_scanned=outcome.summary.total_pages,
            total_violations=outcome.summary.total_violations,
            total_incomplete=outcome.summary.total_incomplete,
            failed_pages=outcome.failed_pages,
        ),
        **report_links(outcome.report_id),
    )

    return api_response(
        data=response,
        message=f"Scanned {outcome.summary.total_pages} pages"
    )
