"""Pick the judge for a problem URL and return its normalized metadata."""
from typing import Any, Callable

from integrations import codeforces, leetcode
from utils.errors import UnsupportedPlatform, ValidationError

# Checked in order; first matching domain wins.
STRATEGIES: list[tuple[str, Callable[[str], dict[str, Any]]]] = [
    ("codeforces.com", codeforces.fetch_problem),
    ("leetcode.com", leetcode.fetch_problem),
]


def fetch_problem_details(url: str) -> dict[str, Any]:
    if not url or not str(url).strip():
        raise ValidationError("URL is required")
    url = str(url).strip()
    for domain, fetch in STRATEGIES:
        if domain in url:
            return fetch(url)
    raise UnsupportedPlatform()
