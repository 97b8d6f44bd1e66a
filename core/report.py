"""
report.py — One-shot dashboard report: everything derived from a fetch result.

Input:  raw dict from GitHubClient.fetch_all()
Output: report dict consumed by the UI and summary_writer.py
"""

import logging

from core.aggregator import (
    code_quality,
    insights,
    language_count_stats,
    language_size_stats,
    recommendations,
    repository_growth,
    summary_metrics,
)
from core.pipeline import unique_by_name
from core.scorer import achievements, developer_score, score_breakdown, score_tier
from utils.utils import local_date, utc_now

logger = logging.getLogger(__name__)


def build_report(raw_data: dict, now=None, tz=None) -> dict:
    """
    Derive the dashboard statistics from a raw fetch result.

    Returns:
        {
            "username", "metrics", "languages", "language_counts", "insights",
            "recommendations", "score", "score_breakdown", "tier",
            "achievements", "code_quality", "growth",
        }
    """
    now = now or utc_now()
    profile = raw_data.get("profile") or {}
    repos = unique_by_name(raw_data.get("repos") or [])

    total = developer_score(profile, repos, now=now)
    report = {
        "username":        profile.get("login", "unknown"),
        "metrics":         summary_metrics(profile, repos),
        "languages":       language_size_stats(repos),
        "language_counts": language_count_stats(repos),
        "insights":        insights(repos, now=now),
        "recommendations": recommendations(profile, repos, now=now),
        "score":           total,
        "score_breakdown": score_breakdown(profile, repos, now=now),
        "tier":            score_tier(total),
        "achievements":    achievements(profile, repos),
        "code_quality":    code_quality(repos, now=now),
        "growth":          repository_growth(repos, today=local_date(now, tz), tz=tz),
    }

    logger.debug(f"Built report for {report['username']}: score {total}")
    return report
