from datetime import timedelta

import pytest

from db.client import NOTES
from db.collections import estimated_read_time
from utils.dates import to_iso, utc_now
from utils.errors import NotFound, ValidationError

USER = "user-1"


def _insert(storage, **fields):
    now = to_iso(utc_now())
    doc = {
        "user_id": USER,
        "title": "Note",
        "content": "",
        "type": "note",
        "category": "General",
        "tags": [],
        "isFavorite": False,
        "isPinned": False,
        "isArchived": False,
        "isPublic": False,
        "viewCount": 0,
        "estimatedReadTime": 1,
        "createdAt": now,
        "updatedAt": now,
    }
    doc.update(fields)
    storage.collection(NOTES).insert_one(doc)


def test_create_applies_defaults(note_store):
    note = note_store.create(USER, {})
    assert note["id"].startswith("note-")
    assert note["title"] == "Untitled Note"
    assert note["type"] == "note"
    assert note["category"] == "General"
    assert note["viewCount"] == 0
    assert note["estimatedReadTime"] == 1
    assert note["isArchived"] is False


def test_create_rejects_unknown_type(note_store):
    with pytest.raises(ValidationError):
        note_store.create(USER, {"type": "poem"})


def test_read_time():
    assert estimated_read_time("") == 1
    assert estimated_read_time(" ".join(["w"] * 200)) == 1
    assert estimated_read_time(" ".join(["w"] * 201)) == 2


def test_update_recomputes_read_time(note_store):
    note = note_store.create(USER, {"title": "DP", "content": "short"})
    updated = note_store.update(USER, note["id"], {"content": " ".join(["word"] * 450)})
    assert updated["estimatedReadTime"] == 3
    assert updated["title"] == "DP"


def test_update_unknown_note(note_store):
    with pytest.raises(NotFound):
        note_store.update(USER, "note-missing", {"title": "x"})


def test_view_increments_count(note_store):
    note = note_store.create(USER, {"title": "Segment trees"})
    note_store.view(USER, note["id"])
    viewed = note_store.view(USER, note["id"])
    assert viewed["viewCount"] == 2
    assert viewed["lastViewedAt"]


def test_toggle_flag(note_store):
    note = note_store.create(USER, {"title": "Templates"})
    assert note_store.toggle(USER, note["id"], "isFavorite")["isFavorite"] is True
    assert note_store.toggle(USER, note["id"], "isFavorite")["isFavorite"] is False
    with pytest.raises(ValidationError):
        note_store.toggle(USER, note["id"], "viewCount")


def test_search_covers_title_content_tags_and_category(note_store):
    note_store.create(USER, {"title": "Knapsack", "content": "", "tags": [], "category": "DP"})
    note_store.create(USER, {"title": "Other", "content": "uses a FENWICK tree"})
    note_store.create(USER, {"title": "Tagged", "tags": ["fenwick"]})
    note_store.create(USER, {"title": "Unrelated"})
    titles = {n["title"] for n in note_store.list(USER, search="fenwick")}
    assert titles == {"Other", "Tagged"}
    assert [n["title"] for n in note_store.list(USER, search="dp")] == ["Knapsack"]


def test_filters_by_type_category_and_status(note_store):
    note_store.create(USER, {"title": "Code", "type": "code", "category": "Graphs", "isFavorite": True})
    note_store.create(USER, {"title": "Sheet", "type": "cheatsheet", "category": "Graphs", "isPublic": True})
    note_store.create(USER, {"title": "Plain", "category": "Math"})
    assert [n["title"] for n in note_store.list(USER, note_type="code")] == ["Code"]
    assert {n["title"] for n in note_store.list(USER, category="Graphs")} == {"Code", "Sheet"}
    assert [n["title"] for n in note_store.list(USER, status="favorites")] == ["Code"]
    assert [n["title"] for n in note_store.list(USER, status="public")] == ["Sheet"]
    assert len(note_store.list(USER, note_type="all", category="all", status="all")) == 3


def test_recent_excludes_old_and_archived(note_store, storage):
    old = to_iso(utc_now() - timedelta(days=30))
    _insert(storage, id="old", title="Old", updatedAt=old, createdAt=old)
    _insert(storage, id="archived", title="Archived", isArchived=True)
    _insert(storage, id="fresh", title="Fresh")
    assert [n["id"] for n in note_store.list(USER, status="recent")] == ["fresh"]


def test_sorting_keeps_pinned_first(note_store, storage):
    _insert(storage, id="a", title="Alpha", viewCount=5, createdAt="2024-01-01T00:00:00.000Z",
            updatedAt="2024-01-05T00:00:00.000Z")
    _insert(storage, id="b", title="Bravo", viewCount=9, isPinned=True, createdAt="2024-01-02T00:00:00.000Z",
            updatedAt="2024-01-02T00:00:00.000Z")
    _insert(storage, id="c", title="charlie", viewCount=1, createdAt="2024-01-03T00:00:00.000Z",
            updatedAt="2024-01-03T00:00:00.000Z", estimatedReadTime=4)
    assert [n["id"] for n in note_store.list(USER)] == ["b", "a", "c"]
    assert [n["id"] for n in note_store.list(USER, sort_by="created")] == ["b", "c", "a"]
    assert [n["id"] for n in note_store.list(USER, sort_by="title")] == ["b", "a", "c"]
    assert [n["id"] for n in note_store.list(USER, sort_by="views")] == ["b", "a", "c"]
    assert [n["id"] for n in note_store.list(USER, sort_by="readTime")] == ["b", "a", "c"]


def test_invalid_sort_key(note_store):
    with pytest.raises(ValidationError):
        note_store.list(USER, sort_by="random")


def test_stats_and_categories(note_store):
    a = note_store.create(USER, {"title": "A", "category": "DP", "tags": ["dp"], "isFavorite": True})
    note_store.create(USER, {"title": "B", "category": "Graphs", "tags": ["bfs", "dp"], "content": " ".join(["x"] * 500)})
    note_store.view(USER, a["id"])
    stats = note_store.stats(USER)
    assert stats == {
        "total": 2,
        "favorites": 1,
        "pinned": 0,
        "archived": 0,
        "publicNotes": 0,
        "totalViews": 1,
        "avgReadTime": 2,
    }
    assert note_store.categories(USER) == {"categories": ["DP", "Graphs"], "tags": ["dp", "bfs"]}


def test_delete(note_store):
    note = note_store.create(USER, {"title": "Gone"})
    note_store.delete(USER, note["id"])
    with pytest.raises(NotFound):
        note_store.get(USER, note["id"])
    with pytest.raises(NotFound):
        note_store.delete(USER, note["id"])


def test_clearing_content_resets_read_time(note_store):
    note = note_store.create(USER, {"title": "Long", "content": " ".join(["word"] * 1000)})
    assert note["estimatedReadTime"] == 5
    cleared = note_store.update(USER, note["id"], {"content": ""})
    assert cleared["estimatedReadTime"] == 1
    assert note_store.get(USER, note["id"])["estimatedReadTime"] == 1


def test_note_store_annotations_resolve():
    import typing

    from db.notes import NoteStore

    hints = typing.get_type_hints(NoteStore.categories)
    assert hints["return"] == dict[str, list[str]]
