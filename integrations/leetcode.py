"""LeetCode problem lookup: a small table of known problems, with a title synthesized from the slug otherwise."""
import re
from typing import Any

from utils.errors import InvalidUrl

PLATFORM = "LeetCode"

_SLUG_RE = re.compile(r"leetcode\.com/problems/([^/?#]+)")

KNOWN_PROBLEMS: dict[str, dict[str, Any]] = {
    "two-sum": {
        "title": "Two Sum",
        "difficulty": "Easy",
        "tags": ["array", "hash-table"],
    },
    "add-two-numbers": {
        "title": "Add Two Numbers",
        "difficulty": "Medium",
        "tags": ["linked-list", "math", "recursion"],
    },
    "longest-substring-without-repeating-characters": {
        "title": "Longest Substring Without Repeating Characters",
        "difficulty": "Medium",
        "tags": ["hash-table", "string", "sliding-window"],
    },
    "median-of-two-sorted-arrays": {
        "title": "Median of Two Sorted Arrays",
        "difficulty": "Hard",
        "tags": ["array", "binary-search", "divide-and-conquer"],
    },
    "reverse-integer": {
        "title": "Reverse Integer",
        "difficulty": "Medium",
        "tags": ["math"],
    },
}


def parse_slug(url: str) -> str:
    m = _SLUG_RE.search(url)
    if not m:
        raise InvalidUrl("Invalid LeetCode URL format")
    return m.group(1)


def title_from_slug(slug: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in slug.split("-"))


def fetch_problem(url: str) -> dict[str, Any]:
    slug = parse_slug(url)
    known = KNOWN_PROBLEMS.get(slug)
    if known:
        return {**known, "tags": list(known["tags"]), "platform": PLATFORM, "url": url}
    return {
        "title": title_from_slug(slug),
        "difficulty": "Medium",
        "tags": ["algorithm"],
        "platform": PLATFORM,
        "url": url,
    }
