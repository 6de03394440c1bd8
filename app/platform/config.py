from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "A11y Checker"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # ── Report storage ──────────────────────────
    REPORTS_DIR: str = "reports"

    # ── Browser ─────────────────────────────────
    AXE_SCRIPT_PATH: str = "static/vendor/axe.min.js"
    CHROMEDRIVER_PATH: Optional[str] = None
    USE_WEBDRIVER_MANAGER: bool = False
    HEADLESS: bool = True

    # ── Crawl ───────────────────────────────────
    CRAWL_WAIT_UNTIL: Literal["load", "domcontentloaded", "networkidle"] = "domcontentloaded"
    CRAWL_TIMEOUT_MS: int = 30000
    DEFAULT_MAX_PAGES: int = 25
    MAX_PAGES_LIMIT: int = 200
    DEFAULT_MAX_DEPTH: int = 2
    MAX_DEPTH_LIMIT: int = 10

    # ── Scan ────────────────────────────────────
    SCAN_WAIT_UNTIL: Literal["load", "domcontentloaded", "networkidle"] = "networkidle"
    SCAN_TIMEOUT_MS: int = 45000
    SCAN_CONCURRENCY: int = 1  # >1 gives each worker its own browser session
    SITE_SCAN_FAILURE_POLICY: Literal["abort", "skip"] = "abort"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
