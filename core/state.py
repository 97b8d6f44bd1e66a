"""
state.py — Dashboard selection state and its transition function.

transition(state, event) -> state' is pure: app.py keeps the current AppState
in st.session_state and feeds every widget interaction through it, so the
navigation rules can be tested without Streamlit.

Events are (name, payload) tuples, e.g. ("switch_view", "analytics") or
("set_page", {"page": 3, "total_pages": 4}).
"""

import logging
from dataclasses import dataclass, field, replace

from config import (
    ACTIVITY_FILTERS,
    COMPARISON_LIMIT,
    DEFAULT_SORT_KEY,
    DEFAULT_TIME_WINDOW,
    SORT_KEYS,
    TIME_WINDOWS,
)
from core.pipeline import navigate

logger = logging.getLogger(__name__)

VIEWS = ("dashboard", "profiles", "repositories", "analytics")
CHART_KINDS = ("pie", "bar")

VIEW_CONTAINERS = {
    "profiles":     "profilesView",
    "repositories": "repositoriesView",
    "analytics":    "analyticsView",
}


@dataclass(frozen=True)
class AppState:
    view: str = "dashboard"
    has_profile: bool = False
    sort_key: str = DEFAULT_SORT_KEY
    activity_filter: str = "all"
    chart_kind: str = "pie"
    time_window: str = DEFAULT_TIME_WINDOW
    query: str = ""
    page: int = 1
    dark_mode: bool = False
    constructed_views: frozenset = field(default_factory=frozenset)
    suggestion_generation: int = 0
    profile_generation: int = 0
    compare_profiles: tuple = ()


# ─── Transitions ──────────────────────────────────────────────────────────────

def _switch_view(state: AppState, view) -> AppState:
    if view not in VIEWS:
        logger.warning(f"Ignoring unknown view: {view}")
        return state
    constructed = state.constructed_views
    if view != "dashboard":
        # Secondary views are built on first visit and reused afterwards
        constructed = constructed | {view}
    return replace(state, view=view, constructed_views=constructed)


def _choose(state: AppState, attr: str, value, allowed) -> AppState:
    if value not in allowed:
        return state
    return replace(state, **{attr: value})


def _set_page(state: AppState, payload: dict) -> AppState:
    page = navigate(state.page, payload.get("page", state.page), payload.get("total_pages", 0))
    return replace(state, page=page)


def _add_comparison(state: AppState, login) -> AppState:
    if not login or login in state.compare_profiles:
        return state
    if len(state.compare_profiles) >= COMPARISON_LIMIT:
        logger.info(f"Comparison full, not adding {login}")
        return state
    return replace(state, compare_profiles=(*state.compare_profiles, login))


def transition(state: AppState, event: tuple) -> AppState:
    """Apply one UI event. Unknown events and invalid values leave the state unchanged."""
    name, payload = event

    if name == "switch_view":
        return _switch_view(state, payload)
    if name == "profile_loaded":
        # Fresh data: first page of an unfiltered table, secondary views rebuilt
        return replace(
            state,
            has_profile=True,
            query="",
            page=1,
            constructed_views=frozenset({state.view}) - {"dashboard"},
            profile_generation=state.profile_generation + 1,
        )
    if name == "set_query":
        return replace(state, query=payload or "", page=1)
    if name == "set_sort":
        return _choose(state, "sort_key", payload, SORT_KEYS)
    if name == "set_page":
        return _set_page(state, payload)
    if name == "set_activity_filter":
        return _choose(state, "activity_filter", payload, ACTIVITY_FILTERS)
    if name == "set_chart_kind":
        return _choose(state, "chart_kind", payload, CHART_KINDS)
    if name == "set_time_window":
        return _choose(state, "time_window", payload, TIME_WINDOWS)
    if name == "toggle_theme":
        return replace(state, dark_mode=not state.dark_mode)
    if name == "set_theme":
        return replace(state, dark_mode=bool(payload))
    if name == "suggestion_requested":
        return replace(state, suggestion_generation=state.suggestion_generation + 1)
    if name == "add_comparison":
        return _add_comparison(state, payload)

    logger.warning(f"Ignoring unknown event: {name}")
    return state


# ─── Queries ──────────────────────────────────────────────────────────────────

def visible_container(state: AppState) -> str:
    """The single container shown for the current view."""
    if state.view == "dashboard":
        return "dashboardContent" if state.has_profile else "searchSection"
    return VIEW_CONTAINERS[state.view]


def accepts_suggestions(state: AppState, generation: int) -> bool:
    """Only the response to the most recently issued suggestion request may be applied."""
    return generation == state.suggestion_generation


# ─── Secondary view data ──────────────────────────────────────────────────────

class ViewCache:
    """
    Derived data behind the secondary views.

    An entry is built the first time a constructed view is rendered and reused
    on every later render until a new profile is loaded.

    Usage:
        cache = ViewCache()
        data = cache.get(state, "analytics", build_analytics)
    """

    def __init__(self):
        self._entries: dict[tuple[str, int], object] = {}

    def get(self, state: AppState, view: str, build):
        if view not in state.constructed_views:
            return build()
        key = (view, state.profile_generation)
        if key not in self._entries:
            logger.info(f"Constructing {view} view")
            self._entries = {
                k: v for k, v in self._entries.items() if k[1] == state.profile_generation
            }
            self._entries[key] = build()
        return self._entries[key]
