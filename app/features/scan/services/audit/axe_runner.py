from pathlib import Path
from typing import Any, Dict, Optional

from selenium.common.exceptions import WebDriverException

from app.features.scan.services.navigation.page_navigator import PageNavigator
from app.platform.config import settings
from app.platform.exceptions import AuditError

# WCAG A + AA; AA assumes A is also met
WCAG_TAGS = ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "wcag22aa"]

_AXE_PRESENT_JS = "return !!window.axe;"

_AXE_RUN_JS = """
const options = arguments[0];
const done = arguments[arguments.length - 1];
if (!window.axe) { done({error: 'axe not injected'}); return; }
axe.run(document, options)
    .then(r => done({ok: true, results: r}))
    .catch(e => done({error: (e && e.message) || String(e)}));
"""


class AxeRunner:
    """Injects axe-core into a loaded page and runs it with the WCAG A/AA rule set."""

    def __init__(self, script_path: Optional[str] = None):
        self.script_path = Path(script_path or settings.AXE_SCRIPT_PATH)
        self._source: Optional[str] = None

    def load_source(self) -> str:
        if self._source is None:
            try:
                self._source = self.script_path.read_text(encoding="utf-8")
            except OSError as e:
                raise AuditError("", f"cannot read axe-core bundle at {self.script_path}: {e}")
        return self._source

    @staticmethod
    def build_options(include_passes: bool = False) -> Dict[str, Any]:
        result_types = ["violations", "incomplete"]
        if include_passes:
            result_types.append("passes")
        return {
            "runOnly": {"type": "tag", "values": list(WCAG_TAGS)},
            "resultTypes": result_types,
        }

    def inject(self, navigator: PageNavigator) -> None:
        url = navigator.current_url or ""
        source = self.load_source()
        try:
            navigator.evaluate(source)
            present = navigator.evaluate(_AXE_PRESENT_JS)
        except WebDriverException as e:
            raise AuditError(url, f"axe injection failed: {e.msg or e}")
        if not present:
            raise AuditError(url, "axe was injected but window.axe not found")

    def run(
        self,
        navigator: PageNavigator,
        include_passes: bool = False,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Return axe's raw result dict (violations, incomplete and optionally passes)."""
        url = navigator.current_url or ""
        self.inject(navigator)

        try:
            outcome = navigator.evaluate_async(
                _AXE_RUN_JS, self.build_options(include_passes), timeout_ms=timeout_ms
            )
        except WebDriverException as e:
            raise AuditError(url, f"axe.run failed: {e.msg or e}")

        if not isinstance(outcome, dict) or outcome.get("error"):
            reason = outcome.get("error") if isinstance(outcome, dict) else "no result returned"
            raise AuditError(url, f"axe.run failed: {reason}")

        results = outcome.get("results") or {}
        if not include_passes:
            results.pop("passes", None)
        return results
