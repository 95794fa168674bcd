"""Codeforces official API client and URL parsing for problem import."""
import re
from typing import Any

import requests

from config import settings
from utils.errors import InvalidUrl, NotFound, UpstreamError
from utils.logging import get_logger

logger = get_logger(__name__)

PLATFORM = "Codeforces"

# /contest/<id>/<index> and /problemset/problem/<id>/<index>
_URL_RE = re.compile(r"codeforces\.com/(?:contest|problemset/problem)/(\d+)/([A-Z]\d*)")


def _get(method: str, params: dict[str, str | int] | None = None) -> Any:
    url = f"{settings.CODEFORCES_API}/{method}"
    try:
        r = requests.get(url, params=params or {}, timeout=settings.JUDGE_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Codeforces API %s failed: %s", method, e)
        raise UpstreamError(f"Codeforces API request failed: {e}") from e
    if data.get("status") != "OK":
        logger.warning("Codeforces API %s returned %s", method, data.get("comment"))
        raise UpstreamError(data.get("comment") or "Failed to fetch from Codeforces API")
    return data.get("result", data)


class CodeforcesAPI:
    @staticmethod
    def problemset_problems(tags: str | None = None) -> dict:
        params = {}
        if tags:
            params["tags"] = tags
        return _get("problemset.problems", params if params else None)


def parse_problem_url(url: str) -> tuple[str, str]:
    """Return (contest_id, index) from a contest or problemset URL."""
    m = _URL_RE.search(url)
    if not m:
        raise InvalidUrl("Invalid Codeforces URL format")
    return m.group(1), m.group(2)


def rating_to_difficulty(rating: int | None) -> str:
    if not rating:
        return "Medium"
    if rating <= 1200:
        return "Easy"
    if rating <= 1600:
        return "Medium"
    return "Hard"


def fetch_problem(url: str) -> dict[str, Any]:
    contest_id, index = parse_problem_url(url)
    catalog = CodeforcesAPI.problemset_problems()
    problems = catalog.get("problems", []) if isinstance(catalog, dict) else []
    problem = next(
        (p for p in problems if str(p.get("contestId")) == contest_id and p.get("index") == index),
        None,
    )
    if problem is None:
        raise NotFound(f"Problem {contest_id}{index} not found on Codeforces")
    rating = problem.get("rating")
    return {
        "title": problem.get("name", f"{contest_id}{index}"),
        "difficulty": rating_to_difficulty(rating),
        "rating": rating,
        "tags": problem.get("tags") or [],
        "platform": PLATFORM,
        "url": url,
    }
