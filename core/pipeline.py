"""
pipeline.py — Filter → sort → paginate for the repository table and activity timeline.

`apply()` is the whole pipeline as one pure function of
(source collection, query, sort key, page). The table's query, sort key and
page live in core/state.AppState.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from config import (
    ACTIVITY_FILTERS,
    DEFAULT_SORT_KEY,
    ITEMS_PER_PAGE,
    SORT_KEYS,
    TIMELINE_LIMIT,
)
from utils.utils import parse_github_date

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


# ─── Filter ───────────────────────────────────────────────────────────────────

def unique_by_name(repos: list[dict]) -> list[dict]:
    """Drop repositories whose name was already seen; the first one wins."""
    seen = set()
    result = []
    for repo in repos:
        name = repo.get("name")
        if name in seen:
            logger.debug(f"Dropping duplicate repository: {name}")
            continue
        seen.add(name)
        result.append(repo)
    return result


def filter_repositories(repos: list[dict], query: str | None) -> list[dict]:
    """Case-insensitive substring match on name or description."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(repos)
    return [
        r for r in repos
        if needle in (r.get("name") or "").lower()
        or needle in (r.get("description") or "").lower()
    ]


def filter_events(events: list[dict], category: str) -> list[dict]:
    """Keep events of the category's type; "all" and unknown categories pass everything."""
    event_type = ACTIVITY_FILTERS.get(category)
    if event_type is None:
        return list(events)
    return [e for e in events if e.get("type") == event_type]


def timeline(events: list[dict], category: str = "all", limit: int = TIMELINE_LIMIT) -> list[dict]:
    return filter_events(events, category)[:limit]


# ─── Sort ─────────────────────────────────────────────────────────────────────

def _date_key(field_name: str):
    def key(repo: dict):
        return parse_github_date(repo.get(field_name)) or _OLDEST
    return key


_SORT_KEYS = {
    "stars":   lambda r: r.get("stargazers_count") or 0,
    "forks":   lambda r: r.get("forks_count") or 0,
    "updated": _date_key("updated_at"),
    "created": _date_key("created_at"),
}


def sort_repositories(repos: list[dict], sort_key: str) -> list[dict]:
    """
    Stable descending sort. Unknown keys fall back to stars; repositories
    without a timestamp sort after every dated one.
    """
    if sort_key not in SORT_KEYS:
        sort_key = DEFAULT_SORT_KEY
    return sorted(repos, key=_SORT_KEYS[sort_key], reverse=True)


# ─── Paginate ─────────────────────────────────────────────────────────────────

def total_pages(count: int, per_page: int = ITEMS_PER_PAGE) -> int:
    return math.ceil(count / per_page) if count > 0 else 0


def clamp_page(page: int, pages: int) -> int:
    return min(max(page, 1), max(pages, 1))


def navigate(current: int, target: int, pages: int) -> int:
    """Return `target` when it is a real page, otherwise stay on `current`."""
    if 1 <= target <= pages:
        return target
    return current


def page_window(page: int, pages: int) -> list[int]:
    """Up to three page buttons centred on the current page."""
    start = max(1, page - 1)
    end = min(pages, start + 2)
    return list(range(start, end + 1))


def paginate(items: list, page: int, per_page: int = ITEMS_PER_PAGE) -> list:
    start = (page - 1) * per_page
    return items[start:start + per_page]


@dataclass(frozen=True)
class PageResult:
    items: list
    page: int
    total_pages: int
    total: int
    start: int     # 1-based index of the first visible row, 0 when empty
    end: int

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end} of {self.total}"


def apply(
    repos: list[dict],
    query: str | None,
    sort_key: str,
    page: int,
    per_page: int = ITEMS_PER_PAGE,
) -> PageResult:
    """Run filter → sort → paginate over `repos` without touching it."""
    rows = sort_repositories(filter_repositories(repos, query), sort_key)
    pages = total_pages(len(rows), per_page)
    page = clamp_page(page, pages)
    items = paginate(rows, page, per_page)

    start = (page - 1) * per_page + 1 if rows else 0
    end = min(page * per_page, len(rows))
    return PageResult(items, page, pages, len(rows), start, end)
