"""Daily solve activity over a fixed window, and the streaks derived from it."""
from collections import Counter
from datetime import date, timedelta
from typing import Any

from utils.dates import utc_day, utc_now
from utils.logging import get_logger

logger = get_logger(__name__)

WINDOW_DAYS = 365


def activity_level(count: int) -> int:
    """0 for no solves, otherwise min(count, 4)."""
    if count >= 4:
        return 4
    if count >= 3:
        return 3
    if count >= 2:
        return 2
    if count >= 1:
        return 1
    return 0


def solves_by_day(problems: list[dict]) -> Counter:
    counts: Counter = Counter()
    for p in problems:
        solved_at = p.get("solvedAt")
        if not solved_at:
            continue
        day = utc_day(solved_at)
        if day is None:
            logger.warning("Skipping problem %s with unparseable solvedAt %r", p.get("id"), solved_at)
            continue
        counts[day] += 1
    return counts


def generate_heatmap(problems: list[dict], today: date | None = None, days: int = WINDOW_DAYS) -> list[dict[str, Any]]:
    """Return `days` entries {date, count, level}, oldest first, the last one being `today` (UTC)."""
    today = today or utc_now().date()
    counts = solves_by_day(problems)
    out = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        count = counts.get(day, 0)
        out.append({"date": day.isoformat(), "count": count, "level": activity_level(count)})
    return out


def calculate_streak(heatmap: list[dict]) -> dict[str, int]:
    current = 0
    for entry in reversed(heatmap):
        if entry["count"] <= 0:
            break
        current += 1

    longest = run = 0
    for entry in heatmap:
        if entry["count"] > 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return {"currentStreak": current, "longestStreak": longest}
