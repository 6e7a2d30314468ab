"""
Test configuration and shared fixtures for Docmost MCP tests.
"""

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from docmost_mcp.config import Settings
from docmost_mcp.main import create_app
from docmost_mcp.services.dispatcher import ToolDispatcher
from docmost_mcp.services.docmost_client import DocmostClient

BASE_URL = "https://docs.example.com"


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env file"""
    values = {"docmost_base_url": BASE_URL, "docmost_api_token": "test-token"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def mock_client():
    """Mock Docmost client"""
    client = AsyncMock(spec=DocmostClient)
    client.base_url = BASE_URL
    client.auth_cookie = None
    return client


@pytest.fixture
def dispatcher(mock_client):
    return ToolDispatcher(mock_client)


@pytest.fixture
def read_only_dispatcher(mock_client):
    return ToolDispatcher(mock_client, read_only=True)


@pytest.fixture
def docmost():
    """Real client pointed at the respx-mocked Docmost instance"""
    return DocmostClient(BASE_URL, api_token="test-token")


@pytest.fixture
def app(settings, mock_client):
    return create_app(settings, client=mock_client)


@pytest.fixture
def client(app):
    """FastAPI test client backed by the mock Docmost client"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def read_only_client(mock_client):
    app = create_app(make_settings(read_only=True), client=mock_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_page():
    return {
        "id": "p1",
        "slugId": "Ab12Cd",
        "title": "Café del Mar!!",
        "spaceId": "s1",
        "parentPageId": None,
        "space": {"id": "s1", "slug": "general", "name": "General"},
    }


@pytest.fixture
def make_app(mock_client):
    """Build an app over the mock client with overridden settings"""
    def _make_app(**overrides):
        return create_app(make_settings(**overrides), client=mock_client)
    return _make_app
