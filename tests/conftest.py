"""
Test configuration and fixtures for the A11y Checker API.

Reports and logs are redirected to temporary directories before the app is
imported, so no test writes into the working tree.
"""

import os
import tempfile
from typing import Generator

from dotenv import load_dotenv

import pytest
from fastapi.testclient import TestClient

load_dotenv()

os.environ["REPORTS_DIR"] = tempfile.mkdtemp(prefix="a11y-reports-")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="a11y-logs-")
os.environ["ENVIRONMENT"] = "local"
os.environ["SCAN_CONCURRENCY"] = "1"
os.environ["SITE_SCAN_FAILURE_POLICY"] = "abort"


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Dependency overrides are cleared after every test.
    """
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest.fixture
def navigator_factory():
    from fakes import FakeNavigatorFactory

    return FakeNavigatorFactory()
