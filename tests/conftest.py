"""Shared pytest fixtures for API error handler test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client over the application entrypoint."""
    from api_errors.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _reset_error_handler_settings() -> Generator[None, None, None]:
    """Reload environment-driven settings around every test."""
    from api_errors.core.config import get_error_handler_settings

    get_error_handler_settings.cache_clear()
    yield
    get_error_handler_settings.cache_clear()
