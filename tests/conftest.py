"""
Shared fixtures.

API tests run the real application against an in-memory mock database.
Each test gets a fresh MockSnowflakeConnection, so nothing leaks between
tests.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from trainerdesk.api.dependencies import get_connection
from trainerdesk.config.settings import Settings, get_settings
from trainerdesk.infrastructure.snowflake.client import MockSnowflakeConnection
from trainerdesk.infrastructure.snowflake.repositories.training import TrainingRepository
from trainerdesk.main import create_app

API_KEY = "test-key"


@pytest.fixture
def mock_connection() -> MockSnowflakeConnection:
    return MockSnowflakeConnection()


@pytest.fixture
def repository(mock_connection) -> TrainingRepository:
    return TrainingRepository(mock_connection)


@pytest.fixture
def session_date() -> datetime:
    return datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def client(mock_connection) -> TestClient:
    """HTTP client for an app wired to the mock database."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(
        api_keys=API_KEY,
        snowflake_mock_mode=True,
    )
    app.dependency_overrides[get_connection] = lambda: mock_connection
    return TestClient(app)


@pytest.fixture
def make_headers():
    """Build request headers for a signed-in trainer."""
    def _make(trainer_id: str = "trainer-1", **claims: str) -> dict[str, str]:
        headers = {"X-API-Key": API_KEY, "X-User-Id": trainer_id}
        for name, value in claims.items():
            header = "X-User-" + "-".join(part.capitalize() for part in name.split("_"))
            headers[header] = value
        return headers
    return _make


@pytest.fixture
def headers(make_headers) -> dict[str, str]:
    return make_headers("trainer-1")


@pytest.fixture
def other_headers(make_headers) -> dict[str, str]:
    return make_headers("trainer-2")
