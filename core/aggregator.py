"""
aggregator.py — Derive language, activity and insight statistics from raw GitHub data.

Input:  repository / event lists as returned by GitHubClient, plus the profile dict
Output: plain lists / dicts consumed by scorer.py, charts.py and the UI

Everything here is a pure function of its arguments: nothing is cached between
calls, so every chart request recomputes from the current collection.
"""

import logging
import math
from collections import Counter
from datetime import date, timedelta

from config import (
    CODING_FREQUENCY_LEVELS,
    COLLABORATION_LEVELS,
    DIVERSITY_LEVELS,
    HEATMAP_DAYS,
    HEATMAP_MAX_LEVEL,
    LANGUAGE_CHART_LIMIT,
    MAINTENANCE_MONTHS,
    MIN_PROJECT_COUNT,
    RECENT_DAYS,
    TIME_WINDOWS,
    DEFAULT_TIME_WINDOW,
    VISIBILITY_STAR_THRESHOLD,
)
from utils.utils import (
    days_ago,
    local_date,
    parse_github_date,
    safe_divide,
    subtract_months,
    updated_since,
    utc_now,
)

logger = logging.getLogger(__name__)


# ─── Totals ───────────────────────────────────────────────────────────────────

def total_stars(repos: list[dict]) -> int:
    return sum(r.get("stargazers_count") or 0 for r in repos)


def total_forks(repos: list[dict]) -> int:
    return sum(r.get("forks_count") or 0 for r in repos)


def distinct_languages(repos: list[dict]) -> set[str]:
    return {r["language"] for r in repos if r.get("language")}


def summary_metrics(profile: dict, repos: list[dict]) -> dict:
    """Headline counters shown above the charts."""
    return {
        "followers":    profile.get("followers") or 0,
        "public_repos": profile.get("public_repos") or 0,
        "total_stars":  total_stars(repos),
        "total_forks":  total_forks(repos),
    }


# ─── Language Statistics ──────────────────────────────────────────────────────

def language_size_stats(repos: list[dict], limit: int = LANGUAGE_CHART_LIMIT) -> list[tuple[str, int]]:
    """
    Sum repository `size` per primary language.

    Repos without a language are skipped. Sorted descending by size (ties keep
    first-seen order) and truncated to `limit` entries.
    """
    sizes: dict[str, int] = {}
    for repo in repos:
        language = repo.get("language")
        if not language:
            continue
        sizes[language] = sizes.get(language, 0) + (repo.get("size") or 0)

    ranked = sorted(sizes.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def language_count_stats(repos: list[dict]) -> list[tuple[str, int]]:
    """Number of repositories per primary language, most common first."""
    counter = Counter(r["language"] for r in repos if r.get("language"))
    return counter.most_common()


def primary_language(repos: list[dict]) -> str:
    counts = language_count_stats(repos)
    return counts[0][0] if counts else "Various"


def _level(value: float, levels: tuple) -> str:
    for label, threshold in levels:
        if value > threshold:
            return label
    return "Low"


def project_diversity_label(repos: list[dict]) -> str:
    return _level(len(distinct_languages(repos)), DIVERSITY_LEVELS)


# ─── Activity ─────────────────────────────────────────────────────────────────

def window_days_for(period: str) -> int:
    """Map a window name ("7d" / "30d" / "90d") to its length in days."""
    return TIME_WINDOWS.get(period, TIME_WINDOWS[DEFAULT_TIME_WINDOW])


def activity_by_day(
    events: list[dict],
    window_days: int,
    today: date | None = None,
    tz=None,
) -> list[tuple[str, int]]:
    """
    Count events per calendar day over the trailing `window_days` days.

    Returns exactly `window_days` (iso_date, count) pairs, oldest first, with
    zero for days without events. An event lands on the day of its
    `created_at` as seen in `tz` (local time when None); events outside the
    window or without a parseable timestamp are ignored.
    """
    if window_days <= 0:
        return []

    today = today or local_date(utc_now(), tz)
    buckets = {
        (today - timedelta(days=offset)).isoformat(): 0
        for offset in range(window_days - 1, -1, -1)
    }

    for event in events:
        created = parse_github_date(event.get("created_at"))
        if created is None:
            continue
        key = local_date(created, tz).isoformat()
        if key in buckets:
            buckets[key] += 1

    return list(buckets.items())


def activity_heatmap(
    events: list[dict],
    days: int = HEATMAP_DAYS,
    today: date | None = None,
    tz=None,
) -> list[tuple[str, int, int]]:
    """
    Year-long contribution grid: (iso_date, count, level) per day.

    Levels run 0..HEATMAP_MAX_LEVEL; 0 means no events, otherwise the count is
    scaled against the busiest day and rounded up so any activity is visible.
    """
    buckets = activity_by_day(events, days, today=today, tz=tz)
    peak = max((count for _, count in buckets), default=0)

    cells = []
    for day, count in buckets:
        if count == 0:
            level = 0
        else:
            level = min(HEATMAP_MAX_LEVEL, math.ceil(count / peak * HEATMAP_MAX_LEVEL))
        cells.append((day, count, level))
    return cells


# ─── Insight Labels ───────────────────────────────────────────────────────────

def recently_updated_count(repos: list[dict], days: int = RECENT_DAYS, now=None) -> int:
    cutoff = days_ago(now or utc_now(), days)
    return sum(1 for r in repos if updated_since(r, cutoff))


def coding_frequency_label(repos: list[dict], now=None) -> str:
    return _level(recently_updated_count(repos, now=now), CODING_FREQUENCY_LEVELS)


def collaboration_level_label(repos: list[dict]) -> str:
    return _level(total_stars(repos), COLLABORATION_LEVELS)


def insights(repos: list[dict], now=None) -> dict:
    """The four insight labels displayed on the dashboard."""
    return {
        "primary_language":    primary_language(repos),
        "coding_frequency":    coding_frequency_label(repos, now=now),
        "collaboration_level": collaboration_level_label(repos),
        "project_diversity":   project_diversity_label(repos),
    }


# ─── Recommendations ─────────────────────────────────────────────────────────

POSITIVE_ACKNOWLEDGMENT = {
    "title": "Excellent Profile",
    "description": "Excellent profile! Keep up the great work!",
}


def recommendations(profile: dict, repos: list[dict], now=None) -> list[dict]:
    """
    Evaluate every improvement rule in order and return all that apply.
    A profile that trips none of them gets a single acknowledgment entry.
    """
    login = (profile.get("login") or "").lower()
    has_profile_readme = any((r.get("name") or "").lower() == login for r in repos)

    rules = [
        (
            total_stars(repos) < VISIBILITY_STAR_THRESHOLD,
            "Improve Repository Visibility",
            "Add detailed README files, descriptions, and topics to attract more stars and contributors.",
        ),
        (
            not profile.get("bio"),
            "Complete Your Profile",
            "Add a bio, location, and website to make your GitHub profile more professional and discoverable.",
        ),
        (
            not has_profile_readme,
            "Create a Profile README",
            "Create a special repository with your username to showcase your skills and projects on your profile.",
        ),
        (
            len(repos) < MIN_PROJECT_COUNT,
            "Build More Projects",
            "Create more repositories to showcase your skills and expertise in different programming areas.",
        ),
        (
            recently_updated_count(repos, now=now) == 0,
            "Stay Active",
            "Regular commits and updates show that you're an active developer. Try to contribute code regularly.",
        ),
    ]

    result = [
        {"title": title, "description": description}
        for matched, title, description in rules
        if matched
    ]
    if not result:
        return [dict(POSITIVE_ACKNOWLEDGMENT)]

    logger.debug(f"{len(result)} recommendations for {login or 'unknown'}")
    return result


# ─── Repository Health ────────────────────────────────────────────────────────

def code_quality(repos: list[dict], now=None) -> dict:
    """Documentation / maintenance / popularity ratios across all repositories."""
    if not repos:
        return {
            "avg_repo_size":       0.0,
            "documentation_score": 0.0,
            "maintenance_score":   0.0,
            "popularity_score":    0.0,
        }

    count = len(repos)
    cutoff = subtract_months(now or utc_now(), MAINTENANCE_MONTHS)
    documented = sum(1 for r in repos if r.get("description"))
    maintained = sum(1 for r in repos if updated_since(r, cutoff))

    return {
        "avg_repo_size":       safe_divide(sum(r.get("size") or 0 for r in repos), count),
        "documentation_score": safe_divide(documented, count) * 100,
        "maintenance_score":   safe_divide(maintained, count) * 100,
        "popularity_score":    safe_divide(total_stars(repos), count),
    }


def repository_growth(repos: list[dict], today: date | None = None, tz=None) -> dict:
    """Repositories created this calendar month, this calendar year, and overall."""
    today = today or local_date(utc_now(), tz)
    this_month = 0
    this_year = 0

    for repo in repos:
        created = parse_github_date(repo.get("created_at"))
        if created is None:
            continue
        day = local_date(created, tz)
        if day.year == today.year:
            this_year += 1
            if day.month == today.month:
                this_month += 1

    return {
        "this_month": this_month,
        "this_year":  this_year,
        "total":      len(repos),
    }
