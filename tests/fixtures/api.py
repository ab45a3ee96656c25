"""
API client fixtures.

The application is served against the seeded test database and a fake
Redis through FastAPI dependency overrides.
"""
import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_db, get_redis
from core.config import get_settings

TEST_BASE_URL = "https://moodle.example.org"


@pytest.fixture
def test_client(db_session, fake_redis, settings):
    """TestClient for the full application"""
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_settings] = lambda: settings

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


def viewer_headers(user_id=None, *capabilities):
    """Headers the host application sets for the current viewer"""
    headers = {}
    if user_id is not None:
        headers["X-User-ID"] = str(user_id)
    if capabilities:
        headers["X-User-Capabilities"] = ",".join(capabilities)
    return headers
