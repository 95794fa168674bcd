"""Dashboard counters, recomputed from the full problem list on every call."""
from collections import Counter
from datetime import date
from typing import Any

from analytics.heatmap import calculate_streak, generate_heatmap
from db.collections import DIFFICULTIES


def compute_stats(problems: list[dict], today: date | None = None) -> dict[str, Any]:
    status_counts = Counter(p.get("status") or "Unknown" for p in problems)
    solved = [p for p in problems if p.get("status") == "Solved"]

    difficulty_stats = {d: 0 for d in DIFFICULTIES}
    platform_stats: Counter = Counter()
    tag_stats: Counter = Counter()
    for p in solved:
        if p.get("difficulty"):
            difficulty_stats[p["difficulty"]] = difficulty_stats.get(p["difficulty"], 0) + 1
        if p.get("platform"):
            platform_stats[p["platform"]] += 1
        for t in dict.fromkeys(p.get("tags") or []):
            tag_stats[t] += 1

    streaks = calculate_streak(generate_heatmap(problems, today=today))
    return {
        "totalProblems": len(problems),
        "solvedProblems": status_counts.get("Solved", 0),
        "attemptedProblems": status_counts.get("Attempted", 0),
        "reviewProblems": status_counts.get("To Review", 0),
        "statusStats": dict(status_counts),
        "difficultyStats": difficulty_stats,
        "platformStats": dict(platform_stats),
        "tagStats": dict(tag_stats),
        **streaks,
    }
