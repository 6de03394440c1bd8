"""
Tests for the scan and report HTTP endpoints.

Browser-backed services are replaced through FastAPI dependency overrides.
"""
import pytest

from app.features.scan.dependencies.scan import (
    get_report_storage,
    get_scan_service,
    get_site_scan_service,
)
from app.features.scan.services.discovery.page_discovery import PageDiscoveryService
from app.features.scan.services.orchestration.site_scan import SiteScanService
from app.features.scan.services.reporting.artifact_writer import ReportStorage
from app.features.scan.services.scan.scan import ScanService
from fakes import FakeAxeRunner, FakeNavigatorFactory, axe_rule

SITE = {
    "https://example.com/": ["/about", "mailto:hi@example.com"],
    "https://example.com/about": [],
}

RESULTS = {
    "https://example.com/": {
        "violations": [axe_rule("image-alt", nodes=2, impact="critical")],
        "incomplete": [axe_rule("color-contrast")],
    },
}


@pytest.fixture
def scanner():
    return ScanService(
        navigator_factory=FakeNavigatorFactory(),
        axe_runner=FakeAxeRunner(results_by_url=RESULTS, failing={"https://broken.example/"}),
    )


@pytest.fixture
def storage():
    return ReportStorage()


@pytest.fixture
def site_scanner(scanner, storage):
    return SiteScanService(
        discovery=PageDiscoveryService(navigator_factory=FakeNavigatorFactory(links=SITE)),
        scanner=scanner,
        storage=storage,
        failure_policy="abort",
    )


@pytest.fixture
def api(client, test_app, scanner, storage, site_scanner):
    test_app.dependency_overrides[get_scan_service] = lambda: scanner
    test_app.dependency_overrides[get_report_storage] = lambda: storage
    test_app.dependency_overrides[get_site_scan_service] = lambda: site_scanner
    return client


class TestSinglePageScan:

    def test_scan_page(self, api):
        response = api.post("/api/v1/scan", json={"url": "https://example.com"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "success"
        assert payload["message"] == "Found 1 violations on https://example.com/"
        data = payload["data"]
        assert data["url"] == "https://example.com/"
        assert data["violations"][0]["rule_id"] == "image-alt"
        assert data["violations"][0]["impact"] == "critical"
        assert data["incomplete"][0]["rule_id"] == "color-contrast"
        assert data["passes"] is None

    def test_scan_page_with_passes(self, api):
        response = api.post("/api/v1/scan", json={"url": "https://example.com", "include_passes": True})
        assert response.json()["data"]["passes"] == []

    @pytest.mark.parametrize("url", ["ftp://example.com", "example.com", "   "])
    def test_rejects_non_http_urls(self, api, url):
        response = api.post("/api/v1/scan", json={"url": url})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Provide a valid http(s) URL")

    def test_missing_url_is_validation_error(self, api):
        response = api.post("/api/v1/scan", json={})
        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    def test_scan_failure(self, api):
        response = api.post("/api/v1/scan", json={"url": "https://broken.example/"})

        assert response.status_code == 500
        payload = response.json()
        assert payload["status"] == "error"
        assert payload["message"] == "Scan failed."
        assert "boom" in payload["data"]["details"]


class TestSiteScan:

    def test_scan_site(self, api):
        response = api.post("/api/v1/scan/site", json={"start_url": "https://example.com"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] == "Scanned 2 pages"
        data = payload["data"]
        report_id = data["report_id"]
        assert len(report_id) == 16
        assert data["html_url"] == f"/reports/{report_id}/report.html"
        assert data["json_url"] == f"/reports/{report_id}/report.json"
        summary = data["summary"]
        assert summary["start_url"] == "https://example.com/"
        assert summary["pages_scanned"] == 2
        assert summary["total_violations"] == 1
        assert summary["total_incomplete"] == 1
        assert summary["failed_pages"] == []
        assert summary["scanned_at"]

    def test_artifacts_served_statically(self, api):
        report_id = api.post(
            "/api/v1/scan/site", json={"start_url": "https://example.com"}
        ).json()["data"]["report_id"]

        html = api.get(f"/reports/{report_id}/report.html")
        assert html.status_code == 200
        assert "text/html" in html.headers["content-type"]
        assert "image-alt" in html.text

        artifact = api.get(f"/reports/{report_id}/report.json")
        assert artifact.status_code == 200
        assert artifact.json()["count"] == 2

    def test_rejects_invalid_start_url(self, api):
        response = api.post("/api/v1/scan/site", json={"start_url": "javascript:alert(1)"})
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"start_url": "https://example.com", "max_pages": 0},
        {"start_url": "https://example.com", "max_depth": -1},
        {"max_pages": 3},
    ])
    def test_invalid_limits_are_validation_errors(self, api, body):
        assert api.post("/api/v1/scan/site", json=body).status_code == 422

    def test_page_failure_aborts_site_scan(self, api, test_app, scanner, storage):
        failing_site = SiteScanService(
            discovery=PageDiscoveryService(navigator_factory=FakeNavigatorFactory(links={})),
            scanner=scanner,
            storage=storage,
            failure_policy="abort",
        )
        test_app.dependency_overrides[get_site_scan_service] = lambda: failing_site

        response = api.post("/api/v1/scan/site", json={"start_url": "https://broken.example/"})

        assert response.status_code == 500
        assert response.json()["message"] == "Site scan failed."


    def test_storage_failure_reported_as_site_scan_failure(self, api, test_app, scanner, tmp_path):
        def unencodable_renderer(*args, **kwargs):
            return "\ud800".encode("utf-8")

        broken_storage = SiteScanService(
            discovery=PageDiscoveryService(navigator_factory=FakeNavigatorFactory(links={})),
            scanner=scanner,
            storage=ReportStorage(root=tmp_path, renderer=unencodable_renderer),
            failure_policy="abort",
        )
        test_app.dependency_overrides[get_site_scan_service] = lambda: broken_storage

        response = api.post("/api/v1/scan/site", json={"start_url": "https://example.com"})

        assert response.status_code == 500
        assert response.json()["message"] == "Site scan failed."
        assert "Failed to write report" in response.json()["data"]["details"]


class TestReports:

    def test_get_report(self, api):
        report_id = api.post(
            "/api/v1/scan/site", json={"start_url": "https://example.com"}
        ).json()["data"]["report_id"]

        response = api.get(f"/api/v1/reports/{report_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["report_id"] == report_id
        assert data["count"] == 2
        assert data["summary"]["total_pages"] == 2
        assert data["summary"]["top_rules"][0]["rule_id"] == "image-alt"
        assert data["summary"]["top_rules"][0]["count"] == 2
        assert [p["url"] for p in data["summary"]["page_summaries"]] == [
            "https://example.com/",
            "https://example.com/about",
        ]

    def test_get_report_html(self, api):
        report_id = api.post(
            "/api/v1/scan/site", json={"start_url": "https://example.com"}
        ).json()["data"]["report_id"]

        response = api.get(f"/api/v1/reports/{report_id}/html")

        assert response.status_code == 200
        assert "Accessibility Report" in response.text

    @pytest.mark.parametrize("report_id", ["0123456789abcdef", "not-a-report"])
    def test_unknown_report(self, api, report_id):
        response = api.get(f"/api/v1/reports/{report_id}")

        assert response.status_code == 404
        assert response.json()["status"] == "error"
