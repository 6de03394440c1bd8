"""
Scan Schemas

Request and response models for the scan API endpoints.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.features.scan.schemas.audit import FailedPage, SiteSummary


# ============================================================================
# Single page scan
# ============================================================================

class ScanRequest(BaseModel):
    """Request to audit one page."""
    url: str
    include_passes: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com",
                "include_passes": False
            }
        }


# ============================================================================
# Site scan
# ============================================================================

class SiteScanRequest(BaseModel):
    """Request to crawl a site and audit every discovered page."""
    start_url: str
    max_pages: Optional[int] = Field(default=None, ge=1)
    max_depth: Optional[int] = Field(default=None, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "start_url": "https://example.com",
                "max_pages": 25,
                "max_depth": 2
            }
        }


class SiteScanSummary(BaseModel):
    start_url: str
    scanned_at: datetime
    pages_scanned: int
    total_violations: int
    total_incomplete: int
    failed_pages: List[FailedPage] = Field(default_factory=list)


class SiteScanResponse(BaseModel):
    report_id: str
    summary: SiteScanSummary
    html_url: str
    json_url: str


class ReportDetailResponse(BaseModel):
    report_id: str
    start_url: str
    scanned_at: datetime
    count: int
    summary: SiteSummary
    failed_pages: List[FailedPage] = Field(default_factory=list)
    html_url: str
    json_url: str
