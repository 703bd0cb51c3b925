"""
Tests for the JSON → database migration jobs and endpoints.
"""
import pytest

from portfolio.deps import get_store
from portfolio.schemas import LearningItem, Link, LinkGroups, Note, PortfolioData, Profile, ResourceLink
from portfolio.services.migrate import migration_status, verify_migration
from portfolio.services.store import BackendUnavailable
from portfolio.tasks.jobs import job_migrate_json, job_verify_migration


SAMPLE = PortfolioData(
    profile=Profile(
        name="Grace", title="Admiral", location="Arlington", email="grace@example.com",
        skills="COBOL", interests="Compilers",
    ),
    links=LinkGroups(
        work=[Link(id="link-w", name="Work", url="https://work", icon="briefcase", category="work")],
        presence=[Link(id="link-p", name="Social", url="https://social", icon="at", category="presence")],
    ),
    notes=[
        Note(id="note-2", title="Second", content="b", published_at="2024-02-01"),
        Note(id="note-1", title="First", content="a", published_at="2024-01-01"),
    ],
    learning=[
        LearningItem(
            id="learning-1", title="Compilers", description="Dragon book", type="book",
            date="2024-01-15", links=[ResourceLink(title="Book", url="https://dragon")],
        ),
    ],
)


@pytest.fixture
def store(settings):
    store = get_store()
    store.fallback.dump(SAMPLE)
    return store


def test_migrate_copies_every_collection(store):
    result = job_migrate_json(store)

    assert result["status"] == "success"
    assert result["migrated"] == {"profiles": 1, "links": 2, "notes": 2, "learning": 1}
    assert result["total"] == 6
    assert result["verification"]["match"] is True

    assert store.primary.get_profile().name == "Grace"
    assert store.primary.get_learning("learning-1").links[0].url == "https://dragon"


def test_migrate_replaces_existing_rows(store):
    store.primary.add_note(Note(id="note-db-only", title="x", content="y", published_at="2024-01-01"))

    job_migrate_json(store)

    assert store.primary.get_note("note-db-only") is None
    assert store.primary.counts()["notes"] == 2


def test_verify_detects_mismatch(store):
    job_migrate_json(store)
    store.primary.delete_note("note-1")

    result = job_verify_migration(store)

    assert result["status"] == "mismatch"
    assert result["mismatched"] == ["notes"]


def test_migrate_skipped_without_database(json_only_settings):
    result = job_migrate_json(get_store())
    assert result["status"] == "skipped"


def test_migrate_skipped_without_data_file(settings):
    result = job_migrate_json(get_store())
    assert result["status"] == "skipped"


def test_verify_requires_reachable_database(store, monkeypatch):
    monkeypatch.setattr(store, "is_database_available", lambda refresh=False: False)

    with pytest.raises(BackendUnavailable):
        verify_migration(store)


def test_migration_status(store):
    status = migration_status(store)

    assert status["databaseConfigured"] is True
    assert status["databaseHealthy"] is True
    assert status["hasDataFile"] is True
    assert status["canMigrate"] is True


def test_migrate_endpoint(store, admin_client):
    response = admin_client.post("/api/migrate", json={"verify": True})
    assert response.status_code == 200
    assert response.json()["status"] == "success"

    assert admin_client.get("/api/stats").json()["notes"] == 2


def test_migrate_endpoint_without_data_file(admin_client):
    response = admin_client.post("/api/migrate")
    assert response.status_code == 409
    assert response.json()["status"] == "skipped"


def test_migrate_status_endpoint(store, admin_client):
    data = admin_client.get("/api/migrate").json()
    assert data["canMigrate"] is True
    assert data["currentDataStats"]["notes"] == 0
