from datetime import datetime, timedelta, timezone

import pytest

from analytics.review import build_review_queue, next_review_at, review_priority
from utils.dates import to_iso
from utils.errors import ValidationError

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _ago(days: float) -> str:
    return to_iso(NOW - timedelta(days=days))


def _problem(pid, status="Solved", difficulty="Medium", **fields):
    return {"id": pid, "title": pid, "status": status, "difficulty": difficulty, **fields}


def test_priority_rules():
    assert review_priority(_problem("a", status="Attempted"), NOW) == "High"
    assert review_priority(_problem("b", status="To Review"), NOW) == "High"
    assert review_priority(_problem("c", difficulty="Hard", solvedAt=_ago(8)), NOW) == "High"
    assert review_priority(_problem("d", difficulty="Hard", solvedAt=_ago(7)), NOW) == "Low"
    assert review_priority(_problem("e", difficulty="Easy", solvedAt=_ago(15)), NOW) == "Medium"
    assert review_priority(_problem("f", difficulty="Easy", solvedAt=_ago(14)), NOW) == "Low"
    assert review_priority(_problem("g"), NOW) == "Low"


@pytest.mark.parametrize("difficulty, days", [("Easy", 1), ("Medium", 1), ("Hard", 1)])
def test_first_interval_from_solve(difficulty, days):
    p = _problem("x", difficulty=difficulty, solvedAt=_ago(10))
    assert next_review_at(p, NOW) == NOW - timedelta(days=10) + timedelta(days=days)


def test_review_date_and_count_move_the_schedule():
    p = _problem("x", difficulty="Easy", solvedAt=_ago(30), reviewDate=_ago(2), reviewCount=2)
    assert next_review_at(p, NOW) == NOW - timedelta(days=2) + timedelta(days=7)
    p["reviewCount"] = 50
    assert next_review_at(p, NOW) == NOW - timedelta(days=2) + timedelta(days=30)


def test_without_dates_next_review_is_from_now():
    assert next_review_at(_problem("x", difficulty="Hard"), NOW) == NOW + timedelta(days=1)


def test_queue_items_stats_and_filters():
    problems = [
        _problem("fresh", solvedAt=_ago(0.5)),
        _problem("due", solvedAt=_ago(1.5)),
        _problem("overdue", difficulty="Hard", solvedAt=_ago(10)),
        _problem("retry", status="Attempted"),
        {"id": "other", "status": "Unsolved", "difficulty": "Easy"},
    ]
    queue = build_review_queue(problems, now=NOW)
    assert {i["id"] for i in queue["items"]} == {"fresh", "due", "overdue", "retry"}
    assert queue["stats"] == {"total": 4, "due": 2, "overdue": 1, "highPriority": 2}

    due = build_review_queue(problems, filter_by="due", now=NOW)
    assert {i["id"] for i in due["items"]} == {"due", "overdue"}
    assert due["stats"] == queue["stats"]
    assert [i["id"] for i in build_review_queue(problems, filter_by="overdue", now=NOW)["items"]] == ["overdue"]

    item = next(i for i in queue["items"] if i["id"] == "overdue")
    assert item["reviewPriority"] == "High"
    assert item["daysSinceLastReview"] == 10
    assert item["difficultyScore"] == 3
    assert item["nextReviewAt"] == to_iso(NOW - timedelta(days=9))


def test_sorting():
    problems = [
        _problem("easy-low", difficulty="Easy", solvedAt=_ago(1)),
        _problem("hard-high", difficulty="Hard", solvedAt=_ago(20)),
        _problem("medium-mid", difficulty="Medium", solvedAt=_ago(15)),
    ]
    by_priority = build_review_queue(problems, sort_by="priority", now=NOW)["items"]
    assert [i["id"] for i in by_priority] == ["hard-high", "medium-mid", "easy-low"]
    by_date = build_review_queue(problems, sort_by="date", now=NOW)["items"]
    assert [i["id"] for i in by_date] == ["hard-high", "medium-mid", "easy-low"]
    by_difficulty = build_review_queue(problems, sort_by="difficulty", now=NOW)["items"]
    assert [i["difficultyScore"] for i in by_difficulty] == [3, 2, 1]


def test_rejects_unknown_filter_and_sort():
    with pytest.raises(ValidationError):
        build_review_queue([], filter_by="someday", now=NOW)
    with pytest.raises(ValidationError):
        build_review_queue([], sort_by="random", now=NOW)
