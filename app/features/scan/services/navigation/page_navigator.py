import time
from enum import Enum
from typing import Any, List, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from app.platform.config import settings
from app.platform.exceptions import NavigationError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class WaitCondition(str, Enum):
    load = "load"
    domcontentloaded = "domcontentloaded"
    networkidle = "networkidle"


# Selenium fixes the page load strategy per session
PAGE_LOAD_STRATEGIES = {
    WaitCondition.load: "normal",
    WaitCondition.domcontentloaded: "eager",
    WaitCondition.networkidle: "normal",
}

NETWORK_IDLE_MS = 500

_EXTRACT_LINKS_JS = """
return Array.from(document.querySelectorAll('a[href]'))
    .map(a => a.getAttribute('href'))
    .filter(Boolean);
"""

_DOCUMENT_COMPLETE_JS = "return document.readyState === 'complete';"

_NETWORK_IDLE_JS = """
const quietFor = arguments[0];
if (document.readyState !== 'complete') return false;
const entries = performance.getEntriesByType('resource') || [];
const now = performance.now();
let last = 0;
for (const e of entries) {
    if (!e.responseEnd) return false;
    last = Math.max(last, e.responseEnd);
}
return now - last >= quietFor;
"""


class PageNavigator:
    """
    One headless Chrome session.

    The crawler keeps a single navigator for its whole traversal; the scanner
    opens a fresh one per audited URL. Always close() it (or use it as a
    context manager) so the browser process is released.
    """

    def __init__(self, driver: webdriver.Chrome, wait_until: WaitCondition = WaitCondition.load):
        self.driver = driver
        self.wait_until = WaitCondition(wait_until)
        self.current_url: Optional[str] = None

    @staticmethod
    def build_driver(wait_until: WaitCondition = WaitCondition.load) -> webdriver.Chrome:
        chrome_options = Options()
        if settings.HEADLESS:
            chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.page_load_strategy = PAGE_LOAD_STRATEGIES[WaitCondition(wait_until)]

        if settings.CHROMEDRIVER_PATH:
            driver_service = Service(executable_path=settings.CHROMEDRIVER_PATH)
            return webdriver.Chrome(service=driver_service, options=chrome_options)
        if settings.USE_WEBDRIVER_MANAGER:
            driver_service = Service(ChromeDriverManager().install())
            return webdriver.Chrome(service=driver_service, options=chrome_options)
        return webdriver.Chrome(options=chrome_options)

    @classmethod
    def launch(cls, wait_until: WaitCondition = WaitCondition.load) -> "PageNavigator":
        try:
            driver = cls.build_driver(wait_until)
        except WebDriverException as e:
            raise NavigationError("about:blank", f"could not start browser: {e.msg or e}")
        return cls(driver, wait_until)

    def __enter__(self) -> "PageNavigator":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def navigate(
        self,
        url: str,
        wait_until: Optional[WaitCondition] = None,
        timeout_ms: int = 30000,
    ) -> None:
        """
        Load `url` and block until the wait condition holds.

        Raises:
            NavigationError: on timeout or any WebDriver failure
        """
        condition = WaitCondition(wait_until or self.wait_until)
        timeout = timeout_ms / 1000.0
        started = time.monotonic()

        try:
            self.driver.set_page_load_timeout(timeout)
            self.driver.get(url)

            remaining = max(timeout - (time.monotonic() - started), 0.1)
            if condition == WaitCondition.load:
                WebDriverWait(self.driver, remaining).until(
                    lambda d: d.execute_script(_DOCUMENT_COMPLETE_JS) is True
                )
            elif condition == WaitCondition.networkidle:
                WebDriverWait(self.driver, remaining, poll_frequency=0.1).until(
                    lambda d: d.execute_script(_NETWORK_IDLE_JS, NETWORK_IDLE_MS) is True
                )
        except TimeoutException:
            raise NavigationError(url, f"timed out after {timeout_ms} ms waiting for {condition.value}")
        except WebDriverException as e:
            raise NavigationError(url, e.msg or str(e))

        self.current_url = url

    def extract_links(self) -> List[str]:
        """Raw href attribute values of every anchor on the loaded page."""
        try:
            hrefs = self.driver.execute_script(_EXTRACT_LINKS_JS) or []
        except WebDriverException as e:
            raise NavigationError(self.current_url or "", f"link extraction failed: {e.msg or e}")
        return [href for href in hrefs if isinstance(href, str) and href]

    def evaluate(self, script: str, *args: Any) -> Any:
        return self.driver.execute_script(script, *args)

    def evaluate_async(self, script: str, *args: Any, timeout_ms: Optional[int] = None) -> Any:
        if timeout_ms is not None:
            self.driver.set_script_timeout(timeout_ms / 1000.0)
        return self.driver.execute_async_script(script, *args)

    @property
    def user_agent(self) -> str:
        return self.driver.execute_script("return navigator.userAgent;") or ""

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.debug(f"Ignoring error while closing browser session: {e}")
