from app.features.scan.services.orchestration.site_scan import SiteScanService
from app.features.scan.services.reporting.artifact_writer import ReportStorage
from app.features.scan.services.scan.scan import ScanService


def get_report_storage() -> ReportStorage:
    return ReportStorage()


def get_scan_service() -> ScanService:
    return ScanService()


def get_site_scan_service() -> SiteScanService:
    """A fresh service (and so fresh browser sessions) per request."""
    return SiteScanService(storage=get_report_storage())
