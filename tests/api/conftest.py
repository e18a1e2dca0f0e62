"""Pytest fixtures for API tests.

Provides a TestClient whose config and assistant service dependencies are
replaced with the test config and the in-memory service double.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_assistant_service, get_config
from src.api.main import app
from src.config import AppConfig
from tests.helpers import FakeAssistantService


@pytest.fixture
def client(
    app_config: AppConfig, fake_service: FakeAssistantService
) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden config and service dependencies.

    Args:
        app_config: Test configuration fixture.
        fake_service: In-memory assistant service fixture.

    Yields:
        TestClient configured for testing.
    """
    app.dependency_overrides[get_config] = lambda: app_config
    app.dependency_overrides[get_assistant_service] = lambda: fake_service

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
