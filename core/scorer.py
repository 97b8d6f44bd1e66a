"""
scorer.py — Deterministic developer score and achievement badges.

Input:  profile dict + repository list (raw GitHub API shapes)
Output: score breakdown / total, tier label, achievement records

All math is transparent and explainable — each term is capped on its own,
so the total can never exceed the sum of the caps (100).
"""

import logging

from config import SCORE_CAPS, SCORE_ACTIVITY_MONTHS, SCORE_TIERS
from core.aggregator import distinct_languages, total_stars
from utils.utils import safe_divide, subtract_months, updated_since, utc_now

logger = logging.getLogger(__name__)


def score_breakdown(profile: dict, repos: list[dict], now=None) -> dict:
    """
    Compute the five capped score terms.

    Returns:
        {
            "followers": float (0–25),
            "quality":   float (0–30),
            "activity":  float (0–20),
            "diversity": float (0–15),
            "openness":  float (0–10),
        }
    """
    now = now or utc_now()
    return {
        "followers": _follower_term(profile),
        "quality":   _quality_term(repos),
        "activity":  _activity_term(repos, now),
        "diversity": _diversity_term(repos),
        "openness":  _openness_term(repos),
    }


def developer_score(profile: dict, repos: list[dict], now=None) -> int:
    """Sum of the capped terms, rounded to the nearest integer."""
    terms = score_breakdown(profile, repos, now=now)
    total = round(sum(terms.values()))

    logger.info(f"Developer score for {profile.get('login', 'unknown')}: {total} ({terms})")
    return total


def term_fractions(terms: dict) -> dict:
    """Each score term as a share of its own cap, for progress bars."""
    return {term: safe_divide(value, SCORE_CAPS[term]) for term, value in terms.items()}


def score_tier(total: float) -> str:
    for floor, label in SCORE_TIERS:
        if total >= floor:
            return label
    return SCORE_TIERS[-1][1]


# ─── Term Scorers ─────────────────────────────────────────────────────────────

def _follower_term(profile: dict) -> float:
    """Influence: one point per 100 followers."""
    return min((profile.get("followers") or 0) / 100, SCORE_CAPS["followers"])


def _quality_term(repos: list[dict]) -> float:
    """Repository quality: one point per 10 average stars."""
    avg_stars = safe_divide(total_stars(repos), len(repos))
    return min(avg_stars / 10, SCORE_CAPS["quality"])


def _activity_term(repos: list[dict], now) -> float:
    """Consistency: two points per repo touched in the last six calendar months."""
    cutoff = subtract_months(now, SCORE_ACTIVITY_MONTHS)
    recent = sum(1 for r in repos if updated_since(r, cutoff))
    return min(recent * 2, SCORE_CAPS["activity"])


def _diversity_term(repos: list[dict]) -> float:
    return min(len(distinct_languages(repos)) * 2, SCORE_CAPS["diversity"])


def _openness_term(repos: list[dict]) -> float:
    forked = sum(1 for r in repos if r.get("fork"))
    return min(forked, SCORE_CAPS["openness"])


# ─── Achievements ─────────────────────────────────────────────────────────────

_ACHIEVEMENTS = (
    {
        "id": "influencer",
        "title": "Influencer",
        "description": "Has over 1000 followers",
        "rarity": "gold",
    },
    {
        "id": "prolific",
        "title": "Prolific Developer",
        "description": "Created over 50 repositories",
        "rarity": "silver",
    },
    {
        "id": "rockstar",
        "title": "Open Source Rockstar",
        "description": "Earned over 10,000 stars",
        "rarity": "platinum",
    },
    {
        "id": "polyglot",
        "title": "Programming Polyglot",
        "description": "Uses over 10 programming languages",
        "rarity": "gold",
    },
)


def achievements(profile: dict, repos: list[dict]) -> list[dict]:
    """Return every unlocked achievement, in declaration order."""
    unlocked = {
        "influencer": (profile.get("followers") or 0) > 1000,
        "prolific":   len(repos) > 50,
        "rockstar":   total_stars(repos) > 10000,
        "polyglot":   len(distinct_languages(repos)) > 10,
    }
    return [dict(a) for a in _ACHIEVEMENTS if unlocked[a["id"]]]
