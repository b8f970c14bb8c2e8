import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from main import app


@pytest.fixture
def use_settings():
    def _use(**overrides):
        settings = Settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        return settings
    yield _use
    app.dependency_overrides.clear()


@pytest.fixture
def client(use_settings):
    use_settings(google_api_key="test-key")
    return TestClient(app)
