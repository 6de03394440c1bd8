from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional

from selenium.common.exceptions import WebDriverException

from app.features.scan.schemas.audit import PageAuditResult
from app.features.scan.services.audit.axe_runner import AxeRunner
from app.features.scan.services.discovery.page_discovery import NavigatorFactory
from app.features.scan.services.navigation.page_navigator import PageNavigator, WaitCondition
from app.platform.config import settings
from app.platform.exceptions import AuditError, NavigationError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScanOutcome:
    """Result of scanning one URL: either `result` or `error` is set."""

    __slots__ = ("url", "result", "error")

    def __init__(
        self,
        url: str,
        result: Optional[PageAuditResult] = None,
        error: Optional[Exception] = None,
    ):
        self.url = url
        self.result = result
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        state = "ok" if self.ok else f"error={self.error!r}"
        return f"ScanOutcome({self.url!r}, {state})"


class ScanService:
    """
    Runs axe against pages, one fresh browser session per URL.

    Sequential unless SCAN_CONCURRENCY > 1, in which case each worker gets its
    own session and outcomes are still returned in input order.
    """

    def __init__(
        self,
        navigator_factory: Optional[NavigatorFactory] = None,
        axe_runner: Optional[AxeRunner] = None,
        wait_until: Optional[WaitCondition] = None,
        timeout_ms: Optional[int] = None,
        concurrency: Optional[int] = None,
    ):
        self.navigator_factory = navigator_factory or PageNavigator.launch
        self.axe_runner = axe_runner or AxeRunner()
        self.wait_until = WaitCondition(wait_until or settings.SCAN_WAIT_UNTIL)
        self.timeout_ms = timeout_ms or settings.SCAN_TIMEOUT_MS
        self.concurrency = max(1, concurrency or settings.SCAN_CONCURRENCY)

    def scan_url(
        self,
        url: str,
        include_passes: bool = False,
        wait_until: Optional[WaitCondition] = None,
        timeout_ms: Optional[int] = None,
    ) -> PageAuditResult:
        """
        Audit a single page.

        Raises:
            NavigationError: page could not be loaded within the timeout
            AuditError: axe could not be injected or run
        """
        condition = WaitCondition(wait_until or self.wait_until)
        timeout_ms = timeout_ms or self.timeout_ms

        logger.info(f"Scanning {url} (wait_until={condition.value}, timeout={timeout_ms}ms)")
        navigator = self.navigator_factory(condition)
        try:
            navigator.navigate(url, condition, timeout_ms)
            results = self.axe_runner.run(navigator, include_passes=include_passes, timeout_ms=timeout_ms)
            try:
                user_agent = navigator.user_agent
            except WebDriverException as e:
                raise AuditError(url, f"could not read user agent: {e.msg or e}")

            return PageAuditResult.from_axe(
                url,
                results,
                timestamp=datetime.now(timezone.utc),
                user_agent=user_agent,
            )
        finally:
            navigator.close()

    def _scan_outcome(self, url: str) -> ScanOutcome:
        try:
            return ScanOutcome(url, result=self.scan_url(url))
        except (NavigationError, AuditError) as e:
            logger.error(f"Scan failed for {url}: {e}")
            return ScanOutcome(url, error=e)

    def scan_each(self, urls: Iterable[str]) -> Iterator[ScanOutcome]:
        """Yield exactly one outcome per URL, in input order."""
        urls = list(urls)
        if self.concurrency == 1 or len(urls) < 2:
            for url in urls:
                yield self._scan_outcome(url)
            return

        workers = min(self.concurrency, len(urls))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="axe-scan") as pool:
            # map() hands results back in submission order
            yield from pool.map(self._scan_outcome, urls)

    def scan_all(self, urls: Iterable[str]) -> List[PageAuditResult]:
        """
        Audit every URL in order.

        Raises:
            NavigationError, AuditError: the first per-URL failure
        """
        results = []
        for outcome in self.scan_each(urls):
            if outcome.error is not None:
                raise outcome.error
            results.append(outcome.result)
        return results
