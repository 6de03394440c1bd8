import pytest
from unittest.mock import MagicMock
from selenium.common.exceptions import TimeoutException

from app.features.scan.services.audit.axe_runner import WCAG_TAGS, AxeRunner
from app.features.scan.services.navigation.page_navigator import PageNavigator
from app.platform.exceptions import AuditError


@pytest.fixture
def axe_script(tmp_path):
    path = tmp_path / "axe.min.js"
    path.write_text("window.axe = {run: function () {}};", encoding="utf-8")
    return path


@pytest.fixture
def navigator():
    driver = MagicMock()
    driver.execute_script.return_value = True
    nav = PageNavigator(driver)
    nav.current_url = "https://example.com/"
    return nav


class TestAxeRunner:

    def test_options_always_request_wcag_a_and_aa(self):
        options = AxeRunner.build_options()
        assert options["runOnly"] == {
            "type": "tag",
            "values": ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "wcag22aa"],
        }
        assert options["resultTypes"] == ["violations", "incomplete"]

    def test_options_with_passes(self):
        assert AxeRunner.build_options(include_passes=True)["resultTypes"] == [
            "violations", "incomplete", "passes"
        ]

    def test_options_do_not_share_tag_list(self):
        AxeRunner.build_options()["runOnly"]["values"].append("best-practice")
        assert "best-practice" not in WCAG_TAGS

    def test_run_injects_and_returns_results(self, axe_script, navigator):
        navigator.driver.execute_async_script.return_value = {
            "ok": True,
            "results": {"violations": [{"id": "image-alt"}], "incomplete": [], "passes": [{"id": "x"}]},
        }
        runner = AxeRunner(str(axe_script))

        results = runner.run(navigator, timeout_ms=5000)

        injected = navigator.driver.execute_script.call_args_list[0].args[0]
        assert injected.startswith("window.axe")
        assert results == {"violations": [{"id": "image-alt"}], "incomplete": []}
        navigator.driver.set_script_timeout.assert_called_once_with(5.0)
        options = navigator.driver.execute_async_script.call_args.args[1]
        assert options == AxeRunner.build_options()

    def test_run_keeps_passes_when_requested(self, axe_script, navigator):
        navigator.driver.execute_async_script.return_value = {
            "ok": True,
            "results": {"violations": [], "incomplete": [], "passes": [{"id": "x"}]},
        }
        results = AxeRunner(str(axe_script)).run(navigator, include_passes=True)
        assert results["passes"] == [{"id": "x"}]

    def test_missing_bundle_raises_audit_error(self, tmp_path, navigator):
        runner = AxeRunner(str(tmp_path / "missing.js"))
        with pytest.raises(AuditError):
            runner.run(navigator)

    def test_axe_not_present_after_injection(self, axe_script, navigator):
        navigator.driver.execute_script.side_effect = [None, False]
        with pytest.raises(AuditError) as exc:
            AxeRunner(str(axe_script)).run(navigator)
        assert "window.axe not found" in str(exc.value)

    def test_axe_error_result_raises_audit_error(self, axe_script, navigator):
        navigator.driver.execute_async_script.return_value = {"error": "boom"}
        with pytest.raises(AuditError) as exc:
            AxeRunner(str(axe_script)).run(navigator)
        assert exc.value.url == "https://example.com/"
        assert "boom" in exc.value.reason

    def test_script_timeout_raises_audit_error(self, axe_script, navigator):
        navigator.driver.execute_async_script.side_effect = TimeoutException("too slow")
        with pytest.raises(AuditError):
            AxeRunner(str(axe_script)).run(navigator)

    def test_bundle_read_once(self, axe_script, navigator):
        navigator.driver.execute_async_script.return_value = {"ok": True, "results": {}}
        runner = AxeRunner(str(axe_script))
        runner.run(navigator)
        axe_script.unlink()
        runner.run(navigator)
