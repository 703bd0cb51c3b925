"""
Tests for the JSON data file store.
"""
import json

import pytest

from portfolio.schemas import LearningItem, Link, Note, Profile, ResourceLink
from portfolio.services.json_store import JsonFileStore
from portfolio.services.store import BackendUnavailable, DuplicateIdError


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "data" / "portfolio.json")


def make_note(note_id: str, title: str = "A note") -> Note:
    return Note(id=note_id, title=title, content="Body", published_at="2024-01-01")


def test_missing_file_is_empty(store):
    data = store.load()
    assert data.profile is None
    assert data.notes == []
    assert store.counts() == {"profiles": 0, "links": 0, "notes": 0, "learning": 0}


def test_corrupt_file_raises(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(BackendUnavailable):
        store.load()


def test_file_layout_is_camel_case(store):
    store.save_profile(Profile(
        name="Ada", title="Engineer", location="London", email="ada@example.com",
        skills="Math", interests="Engines", home_image="/ada.png",
    ))
    store.add_link(Link(id="link-1", name="GitHub", url="https://github.com", icon="github", category="presence"))
    store.add_note(make_note("note-1"))

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert set(raw) == {"profile", "links", "notes", "learning"}
    assert raw["profile"]["homeImage"] == "/ada.png"
    assert raw["links"]["work"] == []
    assert raw["links"]["presence"] == [
        {"id": "link-1", "name": "GitHub", "url": "https://github.com", "icon": "github"}
    ]
    assert raw["notes"][0]["publishedAt"] == "2024-01-01"
    assert "createdAt" in raw["notes"][0]


def test_reads_legacy_file(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps({
        "profile": None,
        "links": {"work": [{"id": "w1", "name": "Blog", "url": "https://blog", "icon": "pen"}]},
        "notes": [{"id": "n1", "title": "Old", "content": "x", "publishedAt": "2023-05-01"}],
        "learning": [],
    }), encoding="utf-8")

    links = store.list_links()
    assert links[0].category == "work"
    assert store.get_note("n1").created_at is None


def test_notes_newest_first(store):
    store.add_note(make_note("note-1", "first"))
    store.add_note(make_note("note-2", "second"))

    assert [n.id for n in store.list_notes()] == ["note-2", "note-1"]


def test_duplicate_note_rejected(store):
    store.add_note(make_note("note-1"))
    with pytest.raises(DuplicateIdError):
        store.add_note(make_note("note-1"))


def test_update_only_changes_supplied_fields(store):
    created = store.add_note(make_note("note-1"))

    updated = store.update_note("note-1", {"title": "Renamed"})
    assert updated.title == "Renamed"
    assert updated.content == "Body"
    assert updated.updated_at >= created.updated_at


def test_identical_update_keeps_timestamp(store):
    store.add_note(make_note("note-1"))
    first = store.update_note("note-1", {"title": "Renamed"})
    second = store.update_note("note-1", {"title": "Renamed"})

    assert second.updated_at == first.updated_at


def test_update_missing_returns_none(store):
    assert store.update_note("nope", {"title": "x"}) is None
    assert store.delete_note("nope") is False


def test_link_category_change_moves_group(store):
    store.add_link(Link(id="link-1", name="Site", url="https://a", icon="globe", category="work"))

    store.update_link("link-1", {"category": "presence"})

    data = store.load()
    assert data.links.work == []
    assert [link.id for link in data.links.presence] == ["link-1"]


def test_replace_links_rejects_duplicate_ids(store):
    links = [
        Link(id="same", name="A", url="https://a", icon="a", category="work"),
        Link(id="same", name="B", url="https://b", icon="b", category="presence"),
    ]
    with pytest.raises(DuplicateIdError):
        store.replace_links(links)


def test_learning_links_round_trip(store):
    item = LearningItem(
        id="learning-1", title="SQL", description="Joins", type="course", date="2024-02-02",
        links=[ResourceLink(title="Docs", url="https://docs")],
    )
    store.add_learning(item)

    stored = store.get_learning("learning-1")
    assert stored.links == [ResourceLink(title="Docs", url="https://docs", description="")]


def test_delete_removes_record(store):
    store.add_note(make_note("note-1"))
    assert store.delete_note("note-1") is True
    assert store.get_note("note-1") is None


def test_no_temp_files_left_behind(store):
    store.add_note(make_note("note-1"))
    assert [p.name for p in store.path.parent.iterdir()] == ["portfolio.json"]


def test_link_category_change_moves_to_end_of_group(store):
    store.add_link(Link(id="a", name="A", url="https://a", icon="a", category="work"))
    store.add_link(Link(id="b", name="B", url="https://b", icon="b", category="presence"))
    store.add_link(Link(id="c", name="C", url="https://c", icon="c", category="presence"))

    store.update_link("a", {"category": "presence"})

    assert [link.id for link in store.load().links.presence] == ["b", "c", "a"]
