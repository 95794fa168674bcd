"""Spaced-repetition review queue derived from the problem list.

Every Solved, Attempted or To Review problem becomes a review item with a
priority, a next review time and the days elapsed since it was last solved or
reviewed. The next review is the last review (or the solve, or now) plus the
difficulty's interval for the number of reviews done so far.
"""
from datetime import datetime, timedelta
from typing import Any

from utils.dates import parse_timestamp, to_iso, utc_now
from utils.errors import ValidationError

REVIEW_STATUSES = ("Solved", "Attempted", "To Review")

# Days until the next review, indexed by reviewCount (last interval repeats).
INTERVALS = {
    "Easy": [1, 3, 7, 14, 30],
    "Medium": [1, 2, 5, 10, 21],
    "Hard": [1, 2, 4, 8, 16],
}

PRIORITY_ORDER = {"High": 3, "Medium": 2, "Low": 1}
DIFFICULTY_SCORE = {"Hard": 3, "Medium": 2, "Easy": 1}

FILTERS = ("all", "due", "overdue")
SORT_KEYS = ("priority", "date", "difficulty")


def _days_since(ts: datetime | None, now: datetime) -> int:
    if ts is None:
        return 0
    return int((now - ts).total_seconds() // 86400)


def review_priority(problem: dict, now: datetime) -> str:
    if problem.get("status") in ("Attempted", "To Review"):
        return "High"
    days = _days_since(parse_timestamp(problem.get("solvedAt")), now)
    if days > 7 and problem.get("difficulty") == "Hard":
        return "High"
    if days > 14:
        return "Medium"
    return "Low"


def next_review_at(problem: dict, now: datetime) -> datetime:
    base = parse_timestamp(problem.get("reviewDate")) or parse_timestamp(problem.get("solvedAt")) or now
    intervals = INTERVALS.get(problem.get("difficulty"), INTERVALS["Medium"])
    count = max(0, int(problem.get("reviewCount") or 0))
    return base + timedelta(days=intervals[min(count, len(intervals) - 1)])


def review_item(problem: dict, now: datetime) -> dict[str, Any]:
    last = parse_timestamp(problem.get("reviewDate")) or parse_timestamp(problem.get("solvedAt"))
    return {
        **problem,
        "reviewPriority": review_priority(problem, now),
        "daysSinceLastReview": _days_since(last, now),
        "difficultyScore": DIFFICULTY_SCORE.get(problem.get("difficulty"), 2),
        "nextReviewAt": to_iso(next_review_at(problem, now)),
    }


def _is_due(item: dict, now: datetime) -> bool:
    return parse_timestamp(item["nextReviewAt"]) <= now


def _is_overdue(item: dict, now: datetime) -> bool:
    return parse_timestamp(item["nextReviewAt"]) < now - timedelta(days=1)


def review_stats(items: list[dict], now: datetime) -> dict[str, int]:
    return {
        "total": len(items),
        "due": sum(1 for i in items if _is_due(i, now)),
        "overdue": sum(1 for i in items if _is_overdue(i, now)),
        "highPriority": sum(1 for i in items if i["reviewPriority"] == "High"),
    }


def build_review_queue(
    problems: list[dict],
    filter_by: str = "all",
    sort_by: str = "priority",
    now: datetime | None = None,
) -> dict[str, Any]:
    """Return {items, stats}. Stats always cover the whole queue, not just the filtered items."""
    if filter_by not in FILTERS:
        raise ValidationError(f"Invalid review filter '{filter_by}'. Expected one of: {', '.join(FILTERS)}")
    if sort_by not in SORT_KEYS:
        raise ValidationError(f"Invalid review sort '{sort_by}'. Expected one of: {', '.join(SORT_KEYS)}")
    now = now or utc_now()
    items = [review_item(p, now) for p in problems if p.get("status") in REVIEW_STATUSES]

    if filter_by == "due":
        shown = [i for i in items if _is_due(i, now)]
    elif filter_by == "overdue":
        shown = [i for i in items if _is_overdue(i, now)]
    else:
        shown = list(items)

    if sort_by == "date":
        shown.sort(key=lambda i: parse_timestamp(i["nextReviewAt"]))
    elif sort_by == "difficulty":
        shown.sort(key=lambda i: i["difficultyScore"], reverse=True)
    else:
        shown.sort(key=lambda i: PRIORITY_ORDER[i["reviewPriority"]], reverse=True)
    return {"items": shown, "stats": review_stats(items, now)}
