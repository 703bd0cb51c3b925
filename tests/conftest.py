"""
Shared fixtures: every test gets its own data file and SQLite database.
"""
import pytest
from fastapi.testclient import TestClient

from portfolio.config import get_settings, reload_settings
from portfolio.deps import reset_store


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings pointing at temporary storage, with retries that never sleep."""
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "portfolio.json"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'portfolio.db'}")
    monkeypatch.setenv("ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("SECRET_KEY", "test-signing-key")
    monkeypatch.setenv("DB_RETRY_WAIT_MIN_SECONDS", "0")
    monkeypatch.setenv("DB_RETRY_WAIT_MAX_SECONDS", "0")
    reset_store()
    yield reload_settings()
    reset_store()
    get_settings.cache_clear()


@pytest.fixture
def json_only_settings(settings, monkeypatch):
    """Settings with no database configured."""
    monkeypatch.delenv("DATABASE_URL")
    reset_store()
    return reload_settings()


@pytest.fixture
def client(settings):
    """Test client fixture (anonymous)."""
    from portfolio.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    """Test client logged in as admin."""
    response = client.post(
        "/api/auth",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client
