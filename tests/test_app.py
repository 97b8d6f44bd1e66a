"""
tests/test_app.py — End-to-end runs of app.py through Streamlit's AppTest

GitHub, the disk cache, the preference files and OpenAI are all replaced
in-process, so the script runs offline.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import MagicMock

import pytest
import requests
import streamlit as st
from streamlit.testing.v1 import AppTest

import core.aggregator
from core.github_client import GitHubClient
from core.preferences import MemoryBackend
from core.summary_writer import SummaryWriter

APP_PATH = os.path.join(os.path.dirname(__file__), "..", "app.py")


# ─── Mock data ────────────────────────────────────────────────────────────────

MOCK_REPOS = [
    {"name": "hello", "language": "Go", "size": 40, "stargazers_count": 7, "forks_count": 2,
     "description": "Hello service", "created_at": "2024-02-01T00:00:00Z",
     "updated_at": "2026-01-01T00:00:00Z"},
    {"name": "world", "language": "Rust", "size": 10, "stargazers_count": 1, "forks_count": 0,
     "description": None, "created_at": "2023-05-01T00:00:00Z",
     "updated_at": "2024-01-01T00:00:00Z"},
]

MOCK_EVENTS = [
    {"type": "PushEvent", "repo": {"name": "someone/hello"}, "created_at": "2026-01-02T00:00:00Z"},
    {"type": "WatchEvent", "repo": {"name": "someone/world"}, "created_at": "2026-01-03T00:00:00Z"},
]

MOCK_SUMMARY = {
    "headline": "Go developer",
    "summary": "Builds small services.",
    "strengths": ["Go"],
    "growth_areas": ["Documentation"],
}


def fake_fetch_all(self, username: str) -> dict:
    return {
        "profile":    {"login": username, "name": username.title(), "followers": 12, "public_repos": 2},
        "repos":      MOCK_REPOS,
        "events":     MOCK_EVENTS,
        "rate_limit": {"limit": 5000, "remaining": 4999, "reset_timestamp": 0},
    }


@pytest.fixture
def app(monkeypatch):
    st.cache_data.clear()
    st.cache_resource.clear()
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("core.cache.get_cached_data", lambda *args, **kwargs: None)
    monkeypatch.setattr("core.cache.set_cached_data", lambda *args, **kwargs: None)
    monkeypatch.setattr("core.preferences.JsonFileBackend", lambda *args, **kwargs: MemoryBackend())
    monkeypatch.setattr(GitHubClient, "fetch_all", fake_fetch_all)
    monkeypatch.setattr(GitHubClient, "search_users", lambda self, query: [])
    return AppTest.from_file(APP_PATH, default_timeout=30)


def load(app: AppTest, login: str = "octocat") -> AppTest:
    return app.button(key=f"quick-{login}").click().run()


# ─── Tests ────────────────────────────────────────────────────────────────────

class TestSuggestions:
    def test_network_failure_leaves_no_suggestions(self, app, monkeypatch):
        def offline(self, query):
            raise requests.ConnectionError("network unreachable")

        monkeypatch.setattr(GitHubClient, "search_users", offline)
        app.run()
        app.text_input[0].input("octocat").run()

        assert not app.exception
        assert app.session_state["suggestions"] == []


class TestDashboard:
    def test_loads_profile(self, app):
        app.run()
        load(app)
        assert not app.exception
        assert app.session_state["app_state"].has_profile is True

    def test_assessment_requested_once_per_profile(self, app, monkeypatch):
        calls = []

        def fake_call(self, prompt):
            calls.append(prompt)
            return dict(MOCK_SUMMARY)

        monkeypatch.setattr(SummaryWriter, "_call_openai", fake_call)
        app.secrets["OPENAI_API_KEY"] = "sk-test"
        app.run()
        load(app)
        app.radio(key="chart_kind_widget").set_value("bar").run()
        app.run()

        assert not app.exception
        assert len(calls) == 1
        assert app.session_state["summary"] == (MOCK_SUMMARY, False)

    def test_new_profile_clears_repository_search(self, app):
        app.run()
        load(app)
        app.text_input(key="dashboard-query").input("hello").run()
        assert app.session_state["app_state"].query == "hello"

        load(app, "torvalds")
        assert not app.exception
        assert app.session_state["app_state"].query == ""
        assert app.text_input(key="dashboard-query").value == ""


class TestAnalyticsView:
    def test_built_once_and_reused_across_reruns(self, app, monkeypatch):
        heatmap = MagicMock(wraps=core.aggregator.activity_heatmap)
        monkeypatch.setattr("core.aggregator.activity_heatmap", heatmap)
        app.run()
        load(app)
        app.radio(key="nav_widget").set_value("analytics").run()
        app.run()
        app.run()

        assert not app.exception
        assert heatmap.call_count == 1


class TestProfilesView:
    def test_bookmark_can_be_removed(self, app):
        app.run()
        load(app)
        next(b for b in app.button if b.label == "🔖 Bookmark").click().run()
        assert [b["login"] for b in app.session_state["store"].bookmarks] == ["octocat"]

        app.radio(key="nav_widget").set_value("profiles").run()
        app.button(key="unbookmark").click().run()

        assert not app.exception
        assert app.session_state["store"].bookmarks == []
