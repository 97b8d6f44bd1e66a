"""
preferences.py — Search history, bookmarks and user preferences.

Each named list is loaded once when the store is created and written back to
the key-value backend right after every mutation, so the backend always holds
the latest in-memory value.

Backends only need two methods:
    load(key) -> str | None
    save(key, text) -> None
"""

import json
import logging
import os
import time
from datetime import datetime, timezone

from config import HISTORY_LIMIT, PREFERENCES_DIR, STORAGE_KEYS
from core.aggregator import language_size_stats, total_forks, total_stars

logger = logging.getLogger(__name__)


# ─── Backends ─────────────────────────────────────────────────────────────────

class MemoryBackend:
    """Dict-backed store, lives as long as the process (or Streamlit session)."""

    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self.data.get(key)

    def save(self, key: str, text: str) -> None:
        self.data[key] = text


class JsonFileBackend:
    """One `<key>.json` file per list inside `directory`."""

    def __init__(self, directory: str = PREFERENCES_DIR):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key: str) -> str | None:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, encoding="utf-8") as f:
            return f.read()

    def save(self, key: str, text: str) -> None:
        with open(self._path(key), "w", encoding="utf-8") as f:
            f.write(text)


# ─── Store ────────────────────────────────────────────────────────────────────

def _now_ms() -> int:
    return int(time.time() * 1000)


def _profile_entry(profile: dict) -> dict:
    return {
        "login":      profile.get("login"),
        "name":       profile.get("name"),
        "avatar_url": profile.get("avatar_url"),
    }


class PreferenceStore:
    """
    Named, JSON-serialisable lists with insertion-order semantics.

    Usage:
        store = PreferenceStore(JsonFileBackend())
        store.add_to_history(profile)
        store.add_bookmark(profile)
    """

    def __init__(self, backend, history_limit: int = HISTORY_LIMIT):
        self.backend = backend
        self.history_limit = history_limit
        self.history: list[dict] = self._load("history", [])
        self.bookmarks: list[dict] = self._load("bookmarks", [])
        self.preferences: dict = self._load("preferences", {})

    def _load(self, name: str, default):
        key = STORAGE_KEYS[name]
        raw = self.backend.load(key)
        if not raw:
            return default
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(f"Discarding unreadable {name} data: {exc}")
            return default
        if not isinstance(value, type(default)):
            logger.warning(f"Discarding {name} data of unexpected type {type(value).__name__}")
            return default
        return value

    def _save(self, name: str) -> None:
        self.backend.save(STORAGE_KEYS[name], json.dumps(getattr(self, name)))

    # ── History ───────────────────────────────────────────────────────────────

    def add_to_history(self, profile: dict, now_ms: int | None = None) -> list[dict]:
        """Move (or insert) the profile to the front, then trim to the bound."""
        entry = {**_profile_entry(profile), "timestamp": now_ms if now_ms is not None else _now_ms()}
        remaining = [h for h in self.history if h.get("login") != entry["login"]]
        self.history = [entry, *remaining][: self.history_limit]
        self._save("history")
        return self.history

    def recent_profiles(self, limit: int) -> list[dict]:
        return self.history[:limit]

    # ── Bookmarks ─────────────────────────────────────────────────────────────

    def is_bookmarked(self, login: str) -> bool:
        return any(b.get("login") == login for b in self.bookmarks)

    def add_bookmark(self, profile: dict, now_ms: int | None = None) -> bool:
        """Append a bookmark. Returns False, changing nothing, if it already exists."""
        if self.is_bookmarked(profile.get("login")):
            logger.info(f"Profile already bookmarked: {profile.get('login')}")
            return False
        entry = {**_profile_entry(profile), "bookmarked_at": now_ms if now_ms is not None else _now_ms()}
        self.bookmarks = [*self.bookmarks, entry]
        self._save("bookmarks")
        return True

    def remove_bookmark(self, login: str) -> bool:
        kept = [b for b in self.bookmarks if b.get("login") != login]
        if len(kept) == len(self.bookmarks):
            return False
        self.bookmarks = kept
        self._save("bookmarks")
        return True

    # ── Preferences ───────────────────────────────────────────────────────────

    def get_preference(self, key: str, default=None):
        return self.preferences.get(key, default)

    def set_preference(self, key: str, value) -> None:
        self.preferences = {**self.preferences, key: value}
        self._save("preferences")

    # ── Export ────────────────────────────────────────────────────────────────

    def export_bundle(self, kind: str, exported_at: str | None = None) -> dict:
        """
        Build a downloadable backup.

        kind: "history" | "bookmarks" | "settings" | "all"
        """
        exported_at = exported_at or datetime.now(timezone.utc).isoformat()
        settings = {
            "userPreferences": self.preferences,
            "theme": self.preferences.get("theme"),
        }

        if kind == "history":
            data = {"searchHistory": self.history, "type": "search_history"}
        elif kind == "bookmarks":
            data = {"bookmarkedProfiles": self.bookmarks, "type": "bookmarks"}
        elif kind == "settings":
            data = {**settings, "type": "settings"}
        elif kind == "all":
            data = {
                "searchHistory": self.history,
                "bookmarkedProfiles": self.bookmarks,
                **settings,
                "type": "complete_backup",
            }
        else:
            raise ValueError(f"Unknown export type: {kind}")

        data["exported_at"] = exported_at
        return data


EXPORT_FILENAMES = {
    "history":   "github-search-history.json",
    "bookmarks": "github-bookmarks.json",
    "settings":  "github-dashboard-settings.json",
    "all":       "github-dashboard-backup.json",
}


def export_profile_report(
    profile: dict,
    repos: list[dict],
    events: list[dict],
    exported_at: str | None = None,
) -> dict:
    """Full analysis export for the currently loaded profile."""
    return {
        "user": profile,
        "repositories": repos,
        "activities": events,
        "insights": {
            "totalStars": total_stars(repos),
            "totalForks": total_forks(repos),
            "languages": dict(language_size_stats(repos, limit=None)),
            "topRepositories": repos[:10],
        },
        "exported_at": exported_at or datetime.now(timezone.utc).isoformat(),
        "exported_by": "GitHub Analytics Dashboard",
    }


def resolve_dark_mode(saved_theme: str | None, system_prefers_dark: bool = False) -> bool:
    """Saved preference wins, then the system setting, otherwise light."""
    if saved_theme in ("dark", "light"):
        return saved_theme == "dark"
    return system_prefers_dark
