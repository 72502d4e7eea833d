"""
Shared fixtures.

API tests run against a fresh app in mock mode: in-memory MongoDB
collection, mock ImageKit keys. Nothing leaves the process.
"""

import pytest
from fastapi.testclient import TestClient

from reelhub.api import dependencies
from reelhub.config.settings import Settings, get_settings
from reelhub.main import create_app

TEST_API_KEY = "test-key"


def make_settings(**overrides) -> Settings:
    values = {
        "api_keys": TEST_API_KEY,
        "mongo_mock_mode": True,
        "imagekit_mock_mode": True,
        "imagekit_url_endpoint": "https://ik.imagekit.io/test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings):
    dependencies.reset_mock_state()
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    yield application
    application.dependency_overrides.clear()
    dependencies.reset_mock_state()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def client_with(app):
    """Build a client whose settings differ from the defaults."""
    def _make(**overrides) -> TestClient:
        settings = make_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        return TestClient(app)
    return _make


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": TEST_API_KEY}


@pytest.fixture
def video_payload() -> dict:
    return {
        "title": "Sunset at the pier",
        "description": "Golden hour over the water, shot on a phone.",
        "videoUrl": "/sunset_ab12cd34.mp4",
        "thumbnailUrl": "/sunset_ab12cd34.mp4/ik-thumbnail.jpg",
    }
