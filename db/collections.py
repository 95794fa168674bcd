"""Document shapes for problems and notes. Keys are camelCase because the web client reads them directly."""
import math
import random
import string
import time

from utils.dates import now_iso

STATUSES = ("Solved", "Attempted", "To Review")
DIFFICULTIES = ("Easy", "Medium", "Hard")
NOTE_TYPES = ("note", "code", "explanation", "template", "cheatsheet", "journal", "analysis")
NOTE_FLAGS = ("isFavorite", "isPinned", "isArchived", "isPublic")

DEFAULT_STATUS = "Attempted"
DEFAULT_DIFFICULTY = "Medium"

# Never written from request bodies.
PROTECTED_FIELDS = ("id", "createdAt", "user_id", "_id")

# Strips storage-only fields from query results.
PUBLIC_PROJECTION = {"_id": 0, "user_id": 0}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_id(prefix: str = "") -> str:
    """`<epoch-ms>-<9 base36 chars>`, optionally prefixed."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    ident = f"{int(time.time() * 1000)}-{suffix}"
    return f"{prefix}-{ident}" if prefix else ident


def clean_tags(tags) -> list[str]:
    if not tags:
        return []
    if isinstance(tags, str):
        tags = [tags]
    out: list[str] = []
    for t in tags:
        t = str(t).strip()
        if t and t not in out:
            out.append(t)
    return out


def estimated_read_time(content: str | None) -> int:
    """Minutes at 200 words per minute, at least one."""
    words = len((content or "").split(" "))
    return max(1, math.ceil(words / 200))


def problem_doc(payload: dict) -> dict:
    now = now_iso()
    doc = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS and k != "updatedAt"}
    doc["title"] = str(payload["title"]).strip()
    doc["platform"] = str(payload["platform"]).strip()
    doc["url"] = str(payload["url"]).strip()
    doc["status"] = payload.get("status") or DEFAULT_STATUS
    doc["difficulty"] = payload.get("difficulty") or DEFAULT_DIFFICULTY
    doc["tags"] = clean_tags(payload.get("tags"))
    if doc["status"] == "Solved" and not doc.get("solvedAt"):
        doc["solvedAt"] = now
    doc["id"] = new_id()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def note_doc(payload: dict) -> dict:
    now = now_iso()
    content = payload.get("content") or ""
    return {
        "id": new_id("note"),
        "title": (payload.get("title") or "").strip() or "Untitled Note",
        "content": content,
        "type": payload.get("type") or "note",
        "category": (payload.get("category") or "").strip() or "General",
        "tags": clean_tags(payload.get("tags")),
        "difficulty": payload.get("difficulty"),
        "isFavorite": bool(payload.get("isFavorite", False)),
        "isPinned": bool(payload.get("isPinned", False)),
        "isArchived": False,
        "isPublic": bool(payload.get("isPublic", False)),
        "createdAt": now,
        "updatedAt": now,
        "viewCount": 0,
        "lastViewedAt": None,
        "estimatedReadTime": estimated_read_time(content),
        "linkedProblems": [str(p) for p in payload.get("linkedProblems") or []],
    }
