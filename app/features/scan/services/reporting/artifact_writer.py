import os
import re
import secrets
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from pydantic import ValidationError

from app.features.scan.schemas.audit import FailedPage, PageAuditResult, ReportArtifact
from app.features.scan.services.reporting.report_renderer import render_report
from app.platform.config import settings
from app.platform.exceptions import ReportNotFoundError, StorageError
from app.platform.logger import get_logger

logger = get_logger(__name__)

REPORT_JSON = "report.json"
REPORT_HTML = "report.html"
REPORT_ID_BYTES = 8
MAX_ID_ATTEMPTS = 5

_REPORT_ID_RE = re.compile(r"^[0-9a-f]{%d}$" % (REPORT_ID_BYTES * 2))

Renderer = Callable[..., bytes]


def make_report_id() -> str:
    return secrets.token_hex(REPORT_ID_BYTES)


class ReportStorage:
    """
    Stores report artifacts on disk as <root>/<report_id>/{report.json,report.html}.

    Both files are written into a hidden staging directory that is renamed into
    place only once complete, so a report id is never visible half-written.
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        renderer: Renderer = render_report,
        id_factory: Callable[[], str] = make_report_id,
    ):
        self.root = Path(root or settings.REPORTS_DIR)
        self.renderer = renderer
        self.id_factory = id_factory

    def report_dir(self, report_id: str) -> Path:
        if not _REPORT_ID_RE.match(report_id or ""):
            raise ReportNotFoundError(report_id)
        return self.root / report_id

    def _reserve_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            report_id = self.id_factory()
            if not (self.root / report_id).exists():
                return report_id
            logger.warning(f"Report id {report_id} already taken, generating another")
        raise StorageError(f"Could not allocate a free report id after {MAX_ID_ATTEMPTS} attempts")

    def persist(
        self,
        start_url: str,
        scanned_at: datetime,
        reports: Sequence[PageAuditResult],
        failed_pages: Sequence[FailedPage] = (),
    ) -> str:
        """
        Write the JSON and HTML artifacts for one site scan.

        Returns:
            The generated report id

        Raises:
            StorageError: if either artifact could not be written
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create report directory {self.root}: {e}")

        report_id = self._reserve_id()
        artifact = ReportArtifact(
            report_id=report_id,
            start_url=start_url,
            scanned_at=scanned_at,
            count=len(reports),
            reports=list(reports),
            failed_pages=list(failed_pages),
        )

        staging: Optional[Path] = None
        try:
            staging = Path(tempfile.mkdtemp(prefix=f".{report_id}-", dir=self.root))
            html = self.renderer(start_url, scanned_at, reports, failed_pages=failed_pages)
            (staging / REPORT_HTML).write_bytes(html)
            (staging / REPORT_JSON).write_text(artifact.model_dump_json(indent=2), encoding="utf-8")
            # rename() refuses to replace a non-empty directory
            os.rename(staging, self.root / report_id)
        except Exception as e:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)
            raise StorageError(f"Failed to write report {report_id}: {e}") from e

        logger.info(f"Stored report {report_id} ({len(reports)} pages) under {self.root}")
        return report_id

    def load(self, report_id: str) -> ReportArtifact:
        path = self.report_dir(report_id) / REPORT_JSON
        if not path.is_file():
            raise ReportNotFoundError(report_id)
        try:
            return ReportArtifact.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise StorageError(f"Report {report_id} is unreadable: {e}")

    def html_path(self, report_id: str) -> Path:
        path = self.report_dir(report_id) / REPORT_HTML
        if not path.is_file():
            raise ReportNotFoundError(report_id)
        return path
