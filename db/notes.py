"""Knowledge-base notes: one document per note, keyed by (user_id, id)."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from db.collections import (
    DIFFICULTIES,
    NOTE_FLAGS,
    NOTE_TYPES,
    PROTECTED_FIELDS,
    PUBLIC_PROJECTION,
    clean_tags,
    estimated_read_time,
    note_doc,
)
from utils.dates import now_iso, parse_timestamp, utc_now
from utils.errors import NotFound, ValidationError

STATUS_FILTERS = ("all", "favorites", "pinned", "archived", "public", "recent")
SORT_KEYS = ("updated", "created", "title", "views", "readTime")
RECENT_DAYS = 7


def _validate(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    note_type = payload.get("type")
    if note_type is not None and note_type not in NOTE_TYPES:
        raise ValidationError(f"Invalid note type '{note_type}'. Expected one of: {', '.join(NOTE_TYPES)}")
    difficulty = payload.get("difficulty")
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise ValidationError(f"Invalid difficulty '{difficulty}'")
    return payload


def _ts(doc: dict, key: str) -> float:
    dt = parse_timestamp(doc.get(key))
    return dt.timestamp() if dt else 0.0


def _matches_search(note: dict, query: str) -> bool:
    q = query.lower()
    return (
        q in (note.get("title") or "").lower()
        or q in (note.get("content") or "").lower()
        or any(q in t.lower() for t in note.get("tags") or [])
        or q in (note.get("category") or "").lower()
    )


def _matches_status(note: dict, status: str) -> bool:
    if status == "favorites":
        return bool(note.get("isFavorite"))
    if status == "pinned":
        return bool(note.get("isPinned"))
    if status == "archived":
        return bool(note.get("isArchived"))
    if status == "public":
        return bool(note.get("isPublic"))
    if status == "recent":
        cutoff = utc_now() - timedelta(days=RECENT_DAYS)
        updated = parse_timestamp(note.get("updatedAt"))
        return not note.get("isArchived") and updated is not None and updated > cutoff
    return True


def filter_notes(
    notes: list[dict],
    search: str | None = None,
    note_type: str | None = None,
    category: str | None = None,
    status: str | None = None,
) -> list[dict]:
    out = []
    for n in notes:
        if search and not _matches_search(n, search):
            continue
        if note_type and note_type != "all" and n.get("type") != note_type:
            continue
        if category and category != "all" and n.get("category") != category:
            continue
        if status and not _matches_status(n, status):
            continue
        out.append(n)
    return out


def sort_notes(notes: list[dict], sort_by: str = "updated") -> list[dict]:
    """Pinned notes first, then by `sort_by`."""
    if sort_by == "created":
        ordered = sorted(notes, key=lambda n: _ts(n, "createdAt"), reverse=True)
    elif sort_by == "title":
        ordered = sorted(notes, key=lambda n: (n.get("title") or "").lower())
    elif sort_by == "views":
        ordered = sorted(notes, key=lambda n: n.get("viewCount") or 0, reverse=True)
    elif sort_by == "readTime":
        ordered = sorted(notes, key=lambda n: n.get("estimatedReadTime") or 0)
    else:
        ordered = sorted(notes, key=lambda n: _ts(n, "updatedAt"), reverse=True)
    # sorted() is stable, so this keeps the order within each group.
    return sorted(ordered, key=lambda n: not n.get("isPinned"))


def note_stats(notes: list[dict]) -> dict[str, int]:
    total = len(notes)
    read_times = sum(n.get("estimatedReadTime") or 0 for n in notes)
    return {
        "total": total,
        "favorites": sum(1 for n in notes if n.get("isFavorite")),
        "pinned": sum(1 for n in notes if n.get("isPinned")),
        "archived": sum(1 for n in notes if n.get("isArchived")),
        "publicNotes": sum(1 for n in notes if n.get("isPublic")),
        "totalViews": sum(n.get("viewCount") or 0 for n in notes),
        "avgReadTime": round(read_times / (total or 1)),
    }


class NoteStore:
    def __init__(self, coll: Collection) -> None:
        self.coll = coll

    def all(self, user_id: str) -> list[dict]:
        return list(self.coll.find({"user_id": user_id}, PUBLIC_PROJECTION))

    def list(
        self,
        user_id: str,
        search: str | None = None,
        note_type: str | None = None,
        category: str | None = None,
        status: str | None = None,
        sort_by: str = "updated",
    ) -> list[dict]:
        if status and status not in STATUS_FILTERS:
            raise ValidationError(f"Invalid status filter '{status}'")
        if sort_by not in SORT_KEYS:
            raise ValidationError(f"Invalid sort key '{sort_by}'")
        notes = filter_notes(self.all(user_id), search=search, note_type=note_type, category=category, status=status)
        return sort_notes(notes, sort_by)

    def get(self, user_id: str, note_id: str) -> dict:
        doc = self.coll.find_one({"user_id": user_id, "id": note_id}, PUBLIC_PROJECTION)
        if doc is None:
            raise NotFound("Note not found")
        return doc

    def create(self, user_id: str, payload: Any) -> dict:
        doc = note_doc(_validate(payload))
        self.coll.insert_one({**doc, "user_id": user_id})
        return doc

    def _apply(self, user_id: str, note_id: str, update: dict) -> dict:
        doc = self.coll.find_one_and_update(
            {"user_id": user_id, "id": note_id},
            update,
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFound("Note not found")
        return doc

    def update(self, user_id: str, note_id: str, updates: Any) -> dict:
        fields = {k: v for k, v in _validate(updates).items() if k not in PROTECTED_FIELDS}
        if "tags" in fields:
            fields["tags"] = clean_tags(fields["tags"])
        if "content" in fields:
            fields["estimatedReadTime"] = estimated_read_time(fields["content"])
        fields["updatedAt"] = now_iso()
        return self._apply(user_id, note_id, {"$set": fields})

    def view(self, user_id: str, note_id: str) -> dict:
        now = now_iso()
        return self._apply(
            user_id,
            note_id,
            {"$inc": {"viewCount": 1}, "$set": {"lastViewedAt": now, "updatedAt": now}},
        )

    def toggle(self, user_id: str, note_id: str, flag: str) -> dict:
        if flag not in NOTE_FLAGS:
            raise ValidationError(f"Unknown flag '{flag}'. Expected one of: {', '.join(NOTE_FLAGS)}")
        current = self.get(user_id, note_id)
        return self._apply(
            user_id,
            note_id,
            {"$set": {flag: not current.get(flag), "updatedAt": now_iso()}},
        )

    def delete(self, user_id: str, note_id: str) -> None:
        r = self.coll.delete_one({"user_id": user_id, "id": note_id})
        if r.deleted_count == 0:
            raise NotFound("Note not found")

    def stats(self, user_id: str) -> dict[str, int]:
        return note_stats(self.all(user_id))

    def categories(self, user_id: str) -> dict[str, list[str]]:
        """Distinct categories and tags, in first-seen order."""
        categories: list[str] = []
        tags: list[str] = []
        for n in self.all(user_id):
            if n.get("category") and n["category"] not in categories:
                categories.append(n["category"])
            for t in n.get("tags") or []:
                if t not in tags:
                    tags.append(t)
        return {"categories": categories, "tags": tags}
