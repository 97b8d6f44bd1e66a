"""
tests/test_aggregator.py — Unit tests for aggregator.py

Tests use mock GitHub API data (no network calls). Dates are pinned through
the `now` / `today` / `tz` parameters so results never depend on the clock.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, datetime, timezone

import pytest
from core.aggregator import (
    POSITIVE_ACKNOWLEDGMENT,
    activity_by_day,
    activity_heatmap,
    code_quality,
    coding_frequency_label,
    collaboration_level_label,
    insights,
    language_count_stats,
    language_size_stats,
    primary_language,
    project_diversity_label,
    recommendations,
    repository_growth,
    summary_metrics,
    window_days_for,
)


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()
UTC = timezone.utc


# ─── Mock data ────────────────────────────────────────────────────────────────

def make_repo(name: str, **overrides) -> dict:
    base = {
        "name":             name,
        "description":      f"{name} description",
        "language":         "Python",
        "size":             100,
        "stargazers_count": 0,
        "forks_count":      0,
        "watchers_count":   0,
        "fork":             False,
        "created_at":       "2024-01-01T00:00:00Z",
        "updated_at":       "2025-01-01T00:00:00Z",
        "html_url":         f"https://github.com/testuser/{name}",
    }
    base.update(overrides)
    return base


def make_event(created_at: str, event_type: str = "PushEvent") -> dict:
    return {"type": event_type, "repo": {"name": "testuser/repo"}, "created_at": created_at}


MOCK_PROFILE = {
    "login":        "testuser",
    "name":         "Test User",
    "bio":          "I write code.",
    "followers":    42,
    "public_repos": 6,
}

MOCK_REPOS = [
    make_repo("alpha", language="Go", size=300, stargazers_count=10),
    make_repo("beta", language="Rust", size=100, stargazers_count=5),
    make_repo("gamma", language="Go", size=50),
    make_repo("delta", language=None, size=999),
    make_repo("epsilon", language="Python", size=200, updated_at="2026-03-10T00:00:00Z"),
]


# ─── Language statistics ─────────────────────────────────────────────────────

class TestLanguageSizeStats:
    def test_sums_sizes_per_language(self):
        stats = dict(language_size_stats(MOCK_REPOS))
        assert stats == {"Go": 350, "Python": 200, "Rust": 100}

    def test_sorted_descending(self):
        values = [v for _, v in language_size_stats(MOCK_REPOS)]
        assert values == sorted(values, reverse=True)

    def test_skips_repos_without_language(self):
        stats = dict(language_size_stats(MOCK_REPOS))
        total_with_language = sum(r["size"] for r in MOCK_REPOS if r.get("language"))
        assert sum(stats.values()) <= total_with_language
        assert None not in stats

    def test_truncated_to_top_eight(self):
        repos = [make_repo(f"r{i}", language=f"Lang{i}", size=i + 1) for i in range(12)]
        stats = language_size_stats(repos)
        assert len(stats) == 8
        assert stats[0] == ("Lang11", 12)
        assert stats[-1] == ("Lang4", 5)

    def test_ties_keep_first_seen_order(self):
        repos = [make_repo("a", language="Zig", size=10), make_repo("b", language="Ada", size=10)]
        assert [lang for lang, _ in language_size_stats(repos)] == ["Zig", "Ada"]

    def test_empty(self):
        assert language_size_stats([]) == []

    def test_missing_size_counts_as_zero(self):
        repo = make_repo("x", language="C")
        del repo["size"]
        assert language_size_stats([repo]) == [("C", 0)]


class TestLanguageCounts:
    def test_counts_repositories(self):
        assert dict(language_count_stats(MOCK_REPOS)) == {"Go": 2, "Rust": 1, "Python": 1}

    def test_primary_language(self):
        assert primary_language(MOCK_REPOS) == "Go"
        assert primary_language([]) == "Various"

    def test_diversity_levels(self):
        def repos_with(n):
            return [make_repo(f"r{i}", language=f"L{i}") for i in range(n)]

        assert project_diversity_label(repos_with(2)) == "Low"
        assert project_diversity_label(repos_with(3)) == "Medium"
        assert project_diversity_label(repos_with(5)) == "Medium"
        assert project_diversity_label(repos_with(6)) == "High"
        assert project_diversity_label([]) == "Low"


# ─── Activity ────────────────────────────────────────────────────────────────

class TestActivityByDay:
    def test_window_length_and_order(self):
        buckets = activity_by_day([], 7, today=TODAY, tz=UTC)
        days = [d for d, _ in buckets]
        assert len(buckets) == 7
        assert days == sorted(days)
        assert days[-1] == "2026-03-15"
        assert days[0] == "2026-03-09"

    def test_empty_events_zero_filled(self):
        buckets = activity_by_day([], 30, today=TODAY, tz=UTC)
        assert len(buckets) == 30
        assert all(count == 0 for _, count in buckets)

    def test_counts_by_date_portion(self):
        events = [
            make_event("2026-03-15T00:05:00Z"),
            make_event("2026-03-15T23:55:00Z"),
            make_event("2026-03-13T12:00:00Z"),
        ]
        buckets = dict(activity_by_day(events, 7, today=TODAY, tz=UTC))
        assert buckets["2026-03-15"] == 2
        assert buckets["2026-03-13"] == 1
        assert buckets["2026-03-14"] == 0

    def test_ignores_events_outside_window(self):
        events = [make_event("2026-03-01T12:00:00Z"), make_event("2026-03-20T12:00:00Z")]
        buckets = activity_by_day(events, 7, today=TODAY, tz=UTC)
        assert sum(count for _, count in buckets) == 0

    def test_sum_never_exceeds_input(self):
        events = [make_event(f"2026-03-{d:02d}T08:00:00Z") for d in range(1, 16)]
        buckets = activity_by_day(events, 7, today=TODAY, tz=UTC)
        assert sum(c for _, c in buckets) == 7
        assert all(c >= 0 for _, c in buckets)

    def test_uses_calendar_of_given_timezone(self):
        from datetime import timedelta
        plus_five = timezone(timedelta(hours=5))
        events = [make_event("2026-03-14T22:00:00Z")]  # 03:00 on the 15th at UTC+5
        assert dict(activity_by_day(events, 3, today=TODAY, tz=plus_five))["2026-03-15"] == 1
        assert dict(activity_by_day(events, 3, today=TODAY, tz=UTC))["2026-03-14"] == 1

    def test_malformed_events_ignored(self):
        events = [{"type": "PushEvent"}, {"created_at": "not a date"}, {}]
        buckets = activity_by_day(events, 7, today=TODAY, tz=UTC)
        assert len(buckets) == 7

    def test_window_names(self):
        assert window_days_for("7d") == 7
        assert window_days_for("30d") == 30
        assert window_days_for("90d") == 90
        assert window_days_for("bogus") == 30


class TestActivityHeatmap:
    def test_365_cells(self):
        cells = activity_heatmap([], today=TODAY, tz=UTC)
        assert len(cells) == 365
        assert all(level == 0 for _, _, level in cells)

    def test_levels_scale_with_busiest_day(self):
        events = [make_event("2026-03-15T10:00:00Z")] * 8 + [make_event("2026-03-14T10:00:00Z")]
        cells = {day: level for day, _, level in activity_heatmap(events, today=TODAY, tz=UTC)}
        assert cells["2026-03-15"] == 4
        assert cells["2026-03-14"] == 1
        assert cells["2026-03-13"] == 0


# ─── Insight labels ──────────────────────────────────────────────────────────

class TestInsightLabels:
    def test_coding_frequency(self):
        recent = "2026-03-10T00:00:00Z"

        def repos_updated(n):
            return [make_repo(f"r{i}", updated_at=recent) for i in range(n)]

        assert coding_frequency_label(repos_updated(2), now=NOW) == "Low"
        assert coding_frequency_label(repos_updated(3), now=NOW) == "Medium"
        assert coding_frequency_label(repos_updated(6), now=NOW) == "High"

    def test_collaboration_level(self):
        assert collaboration_level_label([make_repo("a", stargazers_count=20)]) == "Low"
        assert collaboration_level_label([make_repo("a", stargazers_count=21)]) == "Medium"
        assert collaboration_level_label([make_repo("a", stargazers_count=101)]) == "High"

    def test_insights_bundle(self):
        result = insights(MOCK_REPOS, now=NOW)
        assert result == {
            "primary_language":    "Go",
            "coding_frequency":    "Low",
            "collaboration_level": "Low",
            "project_diversity":   "Medium",
        }

    def test_summary_metrics(self):
        metrics = summary_metrics(MOCK_PROFILE, MOCK_REPOS)
        assert metrics["total_stars"] == 15
        assert metrics["followers"] == 42


# ─── Recommendations ─────────────────────────────────────────────────────────

class TestRecommendations:
    def test_all_matching_rules_in_order(self):
        profile = {"login": "newbie", "bio": None}
        titles = [r["title"] for r in recommendations(profile, [], now=NOW)]
        assert titles == [
            "Improve Repository Visibility",
            "Complete Your Profile",
            "Create a Profile README",
            "Build More Projects",
            "Stay Active",
        ]

    def test_profile_readme_is_case_insensitive(self):
        repos = [make_repo("TestUser")]
        titles = [r["title"] for r in recommendations(MOCK_PROFILE, repos, now=NOW)]
        assert "Create a Profile README" not in titles

    def test_positive_acknowledgment_when_nothing_matches(self):
        repos = [make_repo("testuser", stargazers_count=100, updated_at="2026-03-14T00:00:00Z")]
        repos += [make_repo(f"r{i}") for i in range(4)]
        result = recommendations(MOCK_PROFILE, repos, now=NOW)
        assert result == [POSITIVE_ACKNOWLEDGMENT]

    def test_each_entry_has_title_and_description(self):
        for rec in recommendations({}, MOCK_REPOS, now=NOW):
            assert set(rec) == {"title", "description"}


# ─── Repository health ───────────────────────────────────────────────────────

class TestRepositoryHealth:
    def test_code_quality_empty(self):
        assert code_quality([]) == {
            "avg_repo_size":       0.0,
            "documentation_score": 0.0,
            "maintenance_score":   0.0,
            "popularity_score":    0.0,
        }

    def test_code_quality_ratios(self):
        repos = [
            make_repo("a", size=100, stargazers_count=4, updated_at="2026-03-01T00:00:00Z"),
            make_repo("b", size=300, description=None),
        ]
        result = code_quality(repos, now=NOW)
        assert result["avg_repo_size"] == 200
        assert result["documentation_score"] == 50
        assert result["maintenance_score"] == 50
        assert result["popularity_score"] == 2

    def test_repository_growth(self):
        repos = [
            make_repo("a", created_at="2026-03-02T00:00:00Z"),
            make_repo("b", created_at="2026-01-20T00:00:00Z"),
            make_repo("c", created_at="2025-03-20T00:00:00Z"),
            make_repo("d", created_at=None),
        ]
        growth = repository_growth(repos, today=TODAY, tz=UTC)
        assert growth == {"this_month": 1, "this_year": 2, "total": 4}
