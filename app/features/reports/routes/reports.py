from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.features.scan.dependencies.scan import get_report_storage
from app.features.scan.routes.scan import report_links
from app.features.scan.schemas.scan import ReportDetailResponse
from app.features.scan.services.reporting.artifact_writer import ReportStorage
from app.features.scan.services.utils.aggregator import summarize_site
from app.platform.response import api_response

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/{report_id}", status_code=200)
def get_report(
    report_id: str,
    storage: ReportStorage = Depends(get_report_storage),
):
    """
    Fetch a stored site report with its site-level summary recomputed from the per-page results.
    """
    artifact = storage.load(report_id)

    data = ReportDetailResponse(
        report_id=artifact.report_id,
        start_url=artifact.start_url,
        scanned_at=artifact.scanned_at,
        count=artifact.count,
        summary=summarize_site(artifact.reports),
        failed_pages=artifact.failed_pages,
        **report_links(artifact.report_id),
    )
    return api_response(data=data)


@router.get("/{report_id}/html")
def get_report_html(
    report_id: str,
    storage: ReportStorage = Depends(get_report_storage),
):
    return FileResponse(storage.html_path(report_id), media_type="text/html")
