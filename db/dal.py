"""Data access layer for per-user problem records.

Each problem is its own document keyed by (user_id, id); every mutation is a
single-document operation, so concurrent edits to different problems of the
same user never overwrite each other.
"""
from __future__ import annotations

from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection

from db.collections import (
    DIFFICULTIES,
    PROTECTED_FIELDS,
    PUBLIC_PROJECTION,
    STATUSES,
    clean_tags,
    problem_doc,
)
from utils.dates import now_iso, parse_timestamp
from utils.errors import NotFound, ValidationError
from utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("title", "platform", "url")


def _check_enums(payload: dict) -> None:
    status = payload.get("status")
    if status is not None and status not in STATUSES:
        raise ValidationError(f"Invalid status '{status}'. Expected one of: {', '.join(STATUSES)}")
    difficulty = payload.get("difficulty")
    if difficulty is not None and difficulty not in DIFFICULTIES:
        raise ValidationError(f"Invalid difficulty '{difficulty}'. Expected one of: {', '.join(DIFFICULTIES)}")


def validate_new_problem(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    if any(not str(payload.get(f) or "").strip() for f in REQUIRED_FIELDS):
        raise ValidationError("Title, platform, and URL are required")
    _check_enums(payload)
    return payload


def validate_problem_updates(updates: Any) -> dict:
    if not isinstance(updates, dict):
        raise ValidationError("Request body must be a JSON object")
    for f in REQUIRED_FIELDS:
        if f in updates and not str(updates[f] or "").strip():
            raise ValidationError(f"'{f}' cannot be empty")
    _check_enums(updates)
    out = {k: v for k, v in updates.items() if k not in PROTECTED_FIELDS}
    if "tags" in out:
        out["tags"] = clean_tags(out["tags"])
    return out


def _recency(doc: dict) -> float:
    ts = parse_timestamp(doc.get("updatedAt") or doc.get("createdAt"))
    return ts.timestamp() if ts else 0.0


class ProblemStore:
    def __init__(self, coll: Collection) -> None:
        self.coll = coll

    def list(self, user_id: str) -> list[dict]:
        """All of the user's problems, most recently updated (or created) first."""
        docs = list(self.coll.find({"user_id": user_id}, PUBLIC_PROJECTION))
        docs.sort(key=_recency, reverse=True)
        return docs

    def get(self, user_id: str, problem_id: str) -> dict:
        doc = self.coll.find_one({"user_id": user_id, "id": problem_id}, PUBLIC_PROJECTION)
        if doc is None:
            raise NotFound("Problem not found")
        return doc

    def create(self, user_id: str, payload: Any) -> dict:
        doc = problem_doc(validate_new_problem(payload))
        self.coll.insert_one({**doc, "user_id": user_id})
        logger.info("Problem %s created for user %s", doc["id"], user_id)
        return doc

    def update(self, user_id: str, problem_id: str, updates: Any) -> dict:
        """Shallow-merge `updates` into the stored record and refresh updatedAt."""
        fields = validate_problem_updates(updates)
        now = now_iso()
        fields["updatedAt"] = now
        key = {"user_id": user_id, "id": problem_id}
        doc = self.coll.find_one_and_update(
            key,
            {"$set": fields},
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFound("Problem not found")
        return self._fill_solved_at(key, doc, now)

    def mark_reviewed(self, user_id: str, problem_id: str) -> dict:
        """Record a review now: status becomes Solved and reviewCount moves the next interval along."""
        now = now_iso()
        key = {"user_id": user_id, "id": problem_id}
        doc = self.coll.find_one_and_update(
            key,
            {"$set": {"reviewDate": now, "status": "Solved", "updatedAt": now}, "$inc": {"reviewCount": 1}},
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFound("Problem not found")
        return self._fill_solved_at(key, doc, now)

    def _fill_solved_at(self, key: dict, doc: dict, now: str) -> dict:
        if doc.get("status") != "Solved" or doc.get("solvedAt"):
            return doc
        # Only fills solvedAt when it is still unset or blank.
        r = self.coll.update_one(
            {**key, "$or": [{"solvedAt": None}, {"solvedAt": ""}]},
            {"$set": {"solvedAt": now}},
        )
        if r.modified_count == 0:
            return self.get(key["user_id"], key["id"])
        return {**doc, "solvedAt": now}

    def delete(self, user_id: str, problem_id: str) -> None:
        r = self.coll.delete_one({"user_id": user_id, "id": problem_id})
        if r.deleted_count == 0:
            raise NotFound("Problem not found")
        logger.info("Problem %s deleted for user %s", problem_id, user_id)
