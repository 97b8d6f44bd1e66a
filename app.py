"""
app.py — GitHub Analytics Dashboard
Streamlit entry point.

Flow:
  1. Restore session: AppState, preference store, last fetch result
  2. Sidebar: navigation, theme, recent profiles, bookmarks
  3. User searches a GitHub username (suggestions as they type)
  4. Fetch GitHub data (with disk cache) → build report
  5. Render the selected view from the current AppState
"""

import os
import json
import logging
import datetime

import requests
import streamlit as st
from dotenv import load_dotenv

from config import APP_ICON, APP_TITLE

# ─── Load secrets ─────────────────────────────────────────────────────────────
load_dotenv()  # local .env
try:
    OPENAI_API_KEY = st.secrets.get("OPENAI_API_KEY", os.getenv("OPENAI_API_KEY", ""))
    GITHUB_TOKEN = st.secrets.get("GITHUB_TOKEN", os.getenv("GITHUB_TOKEN", ""))
except FileNotFoundError:
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")

# ─── Page config (must be first Streamlit call) ───────────────────────────────
st.set_page_config(
    page_title=APP_TITLE,
    page_icon=APP_ICON,
    layout="wide",
)

# ─── Imports (after set_page_config) ─────────────────────────────────────────
from config import (
    CACHE_TTL_SECONDS,
    RECENT_PROFILES_SHOWN,
    SORT_KEYS,
    SUGGESTION_MIN_QUERY_LENGTH,
    TIME_WINDOWS,
    ACTIVITY_FILTERS,
)
from core.aggregator import activity_by_day, activity_heatmap, window_days_for
from core.cache import get_cached_data, set_cached_data
from core.charts import resolve_theme
from core.github_client import (
    GitHubAPIError,
    GitHubClient,
    GitHubRateLimitError,
    describe_error,
)
from core.pipeline import apply, page_window, timeline, unique_by_name
from core.preferences import (
    EXPORT_FILENAMES,
    JsonFileBackend,
    PreferenceStore,
    export_profile_report,
    resolve_dark_mode,
)
from core.report import build_report
from core.state import (
    CHART_KINDS,
    VIEWS,
    AppState,
    ViewCache,
    accepts_suggestions,
    transition,
    visible_container,
)
from core.summary_writer import SummaryWriter, fallback_summary
from ui import components
from utils.utils import validate_github_username

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

QUICK_PROFILES = ("octocat", "torvalds", "gaearon")


# ─── Session ──────────────────────────────────────────────────────────────────
def _init_session():
    if "app_state" in st.session_state:
        return
    store = PreferenceStore(JsonFileBackend())
    st.session_state.store = store
    st.session_state.app_state = AppState(dark_mode=resolve_dark_mode(store.get_preference("theme")))
    st.session_state.raw = None
    st.session_state.summary = None
    st.session_state.view_cache = ViewCache()
    st.session_state.suggestions = []
    st.session_state.suggestion_query = ""


def dispatch(event: tuple) -> AppState:
    st.session_state.app_state = transition(st.session_state.app_state, event)
    return st.session_state.app_state


_init_session()


# ─── Cached GitHub calls (st.cache_data = in-memory) ─────────────────────────
@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner=False)
def _fetch_github_data(username: str, token: str | None) -> dict:
    client = GitHubClient(token=token or None)
    return client.fetch_all(username)


@st.cache_data(ttl=300, show_spinner=False)
def _search_users(query: str, token: str | None) -> list[dict]:
    client = GitHubClient(token=token or None)
    return client.search_users(query)


@st.cache_resource(show_spinner=False)
def _summary_writer(api_key: str) -> SummaryWriter:
    # Shared by every session and rerun
    return SummaryWriter(api_key=api_key)


def _write_summary(raw_data: dict) -> tuple[dict, bool]:
    report = build_report(raw_data)
    if not OPENAI_API_KEY:
        return fallback_summary(report), True
    with st.spinner("✨ Writing assessment..."):
        return _summary_writer(OPENAI_API_KEY).generate(report)


# ─── Loading ──────────────────────────────────────────────────────────────────
def load_profile(username: str) -> bool:
    """Fetch (or restore) a profile and make it the current one."""
    is_valid, err_msg = validate_github_username(username)
    if not is_valid:
        st.warning(err_msg)
        return False

    raw_data = get_cached_data(username)
    if raw_data is None:
        with st.spinner("🔍 Fetching GitHub data..."):
            try:
                raw_data = _fetch_github_data(username, GITHUB_TOKEN)
            except GitHubRateLimitError as exc:
                reset_str = ""
                if exc.reset_timestamp:
                    reset_dt = datetime.datetime.fromtimestamp(exc.reset_timestamp)
                    reset_str = f" Rate limit resets at **{reset_dt.strftime('%H:%M:%S')}**."
                st.error(f"⏱️ {describe_error(exc)}{reset_str}")
                return False
            except GitHubAPIError as exc:
                st.error(f"❌ {describe_error(exc)}")
                return False
            except Exception as exc:
                st.error(f"⚠️ {describe_error(exc)}")
                logger.exception("Unexpected fetch error")
                return False
        set_cached_data(username, raw_data)

    raw_data = {**raw_data, "repos": unique_by_name(raw_data.get("repos") or [])}
    st.session_state.raw = raw_data
    st.session_state.summary = _write_summary(raw_data)
    st.session_state.store.add_to_history(raw_data["profile"])
    dispatch(("profile_loaded", None))
    st.toast("Profile analyzed successfully!")
    return True


def _update_suggestions(query: str):
    """Fetch username suggestions, applying only the newest request's response."""
    query = query.strip()
    if query == st.session_state.suggestion_query:
        return
    st.session_state.suggestion_query = query
    if len(query) < SUGGESTION_MIN_QUERY_LENGTH:
        st.session_state.suggestions = []
        return

    generation = dispatch(("suggestion_requested", None)).suggestion_generation
    try:
        items = _search_users(query, GITHUB_TOKEN)
    except (GitHubAPIError, requests.RequestException) as exc:
        logger.warning(f"Failed to fetch suggestions: {exc}")
        st.session_state.suggestions = []
        return
    if accepts_suggestions(st.session_state.app_state, generation):
        st.session_state.suggestions = items


# ─── Sidebar ──────────────────────────────────────────────────────────────────
def render_sidebar(state: AppState):
    store = st.session_state.store
    # Keep the radio in step with views switched from elsewhere
    st.session_state.nav_widget = state.view
    with st.sidebar:
        st.radio(
            "Navigate",
            VIEWS,
            format_func=str.capitalize,
            key="nav_widget",
            on_change=lambda: dispatch(("switch_view", st.session_state.nav_widget)),
        )

        if st.toggle("Dark charts", value=state.dark_mode, key="theme_widget") != state.dark_mode:
            new_state = dispatch(("toggle_theme", None))
            store.set_preference("theme", "dark" if new_state.dark_mode else "light")

        st.markdown("#### Recent Profiles")
        clicked = components.render_profile_list(
            store.recent_profiles(RECENT_PROFILES_SHOWN), "No recent profiles", "recent"
        )
        if clicked and load_profile(clicked):
            st.rerun()


# ─── Search ───────────────────────────────────────────────────────────────────
def render_search():
    col_input, col_btn = st.columns([5, 1])
    with col_input:
        username = st.text_input(
            "GitHub Username",
            placeholder="e.g. octocat",
            help="Enter any public GitHub username.",
        )
    with col_btn:
        st.markdown("<br>", unsafe_allow_html=True)  # vertical align
        submitted = st.button("Analyze", use_container_width=True)

    if submitted:
        if load_profile(username.strip()):
            st.rerun()
        return

    _update_suggestions(username)
    if st.session_state.suggestions:
        cols = st.columns(len(st.session_state.suggestions))
        for col, user in zip(cols, st.session_state.suggestions):
            if col.button(user["login"], key=f"suggest-{user['login']}") and load_profile(user["login"]):
                st.rerun()

    cols = st.columns(len(QUICK_PROFILES))
    for col, login in zip(cols, QUICK_PROFILES):
        if col.button(f"Try {login}", key=f"quick-{login}") and load_profile(login):
            st.rerun()


# ─── Views ────────────────────────────────────────────────────────────────────
def render_repository_table(state: AppState, repos: list[dict], key_prefix: str):
    # Widgets mirror AppState, which a newly loaded profile resets
    st.session_state[f"{key_prefix}-query"] = state.query
    st.session_state[f"{key_prefix}-sort"] = state.sort_key
    col_query, col_sort = st.columns([3, 1])
    with col_query:
        st.text_input(
            "Search repositories",
            key=f"{key_prefix}-query",
            on_change=lambda: dispatch(("set_query", st.session_state[f"{key_prefix}-query"])),
        )
    with col_sort:
        st.selectbox(
            "Sort by",
            SORT_KEYS,
            key=f"{key_prefix}-sort",
            on_change=lambda: dispatch(("set_sort", st.session_state[f"{key_prefix}-sort"])),
        )

    result = apply(repos, state.query, state.sort_key, state.page)
    components.render_repository_table(result)

    def goto(page: int):
        dispatch(("set_page", {"page": page, "total_pages": result.total_pages}))

    pages = page_window(result.page, result.total_pages)
    cols = st.columns(len(pages) + 2)
    cols[0].button("‹ Prev", key=f"{key_prefix}-prev", disabled=result.page <= 1,
                   on_click=goto, args=(result.page - 1,))
    for col, page in zip(cols[1:-1], pages):
        col.button(str(page), key=f"{key_prefix}-page-{page}", disabled=page == result.page,
                   on_click=goto, args=(page,))
    cols[-1].button("Next ›", key=f"{key_prefix}-next", disabled=result.page >= result.total_pages,
                    on_click=goto, args=(result.page + 1,))


def render_dashboard(state: AppState):
    raw = st.session_state.raw
    report = build_report(raw)
    profile, repos, events = raw["profile"], raw["repos"], raw["events"]
    theme = resolve_theme(state.dark_mode)
    store = st.session_state.store

    components.render_rate_limit_warning(raw.get("rate_limit", {}))
    components.render_profile_card(profile)

    col_bookmark, col_compare, col_export = st.columns(3)
    if col_bookmark.button("🔖 Bookmark"):
        if store.add_bookmark(profile):
            st.toast("Profile bookmarked!")
        else:
            st.toast("Profile already bookmarked")
    if col_compare.button("⚖️ Add to comparison"):
        before = st.session_state.app_state.compare_profiles
        if dispatch(("add_comparison", profile["login"])).compare_profiles == before:
            st.toast("Maximum 3 profiles can be compared")
    col_export.download_button(
        "⬇️ Export JSON",
        data=json.dumps(export_profile_report(profile, repos, events), indent=2),
        file_name=f"{profile['login']}-github-analysis.json",
        mime="application/json",
    )

    components.render_metrics(report["metrics"])

    col_lang, col_activity = st.columns(2)
    with col_lang:
        st.radio(
            "Chart", CHART_KINDS, index=CHART_KINDS.index(state.chart_kind), horizontal=True,
            key="chart_kind_widget",
            on_change=lambda: dispatch(("set_chart_kind", st.session_state.chart_kind_widget)),
        )
        components.render_language_chart_card(report["languages"], state.chart_kind, theme)
    with col_activity:
        windows = tuple(TIME_WINDOWS)
        st.radio(
            "Window", windows, index=windows.index(state.time_window), horizontal=True,
            key="time_window_widget",
            on_change=lambda: dispatch(("set_time_window", st.session_state.time_window_widget)),
        )
        buckets = activity_by_day(events, window_days_for(state.time_window))
        components.render_activity_chart_card(buckets, theme, no_data=not events)

    st.markdown("#### Repositories")
    render_repository_table(state, repos, "dashboard")

    st.markdown("#### Recent Activity")
    filters = tuple(ACTIVITY_FILTERS)
    st.radio(
        "Activity", filters, index=filters.index(state.activity_filter), horizontal=True,
        key="activity_filter_widget",
        on_change=lambda: dispatch(("set_activity_filter", st.session_state.activity_filter_widget)),
    )
    components.render_timeline(timeline(events, state.activity_filter))

    st.markdown("#### Insights")
    components.render_insights(report["insights"])

    col_score, col_recs = st.columns(2)
    with col_score:
        components.render_score(report)
    with col_recs:
        components.render_recommendations(report["recommendations"])

    st.markdown("#### Assessment")
    if st.session_state.summary is None:
        st.session_state.summary = _write_summary(raw)
    summary, is_fallback = st.session_state.summary
    components.render_summary(summary, is_fallback=is_fallback)


def render_profiles_view(state: AppState):
    store = st.session_state.store
    st.markdown("## Profiles")

    col_history, col_bookmarks = st.columns(2)
    with col_history:
        st.markdown("#### Search History")
        clicked = components.render_profile_list(store.history, "No recent profiles", "history")
    with col_bookmarks:
        st.markdown("#### Bookmarks")
        clicked = components.render_profile_list(store.bookmarks, "No bookmarked profiles", "bookmark") or clicked
        if store.bookmarks:
            removed = st.selectbox("Remove bookmark", [b["login"] for b in store.bookmarks], key="unbookmark-login")
            if st.button("🗑️ Remove", key="unbookmark") and store.remove_bookmark(removed):
                st.toast(f"Removed {removed} from bookmarks")
                st.rerun()
    if clicked:
        if load_profile(clicked):
            dispatch(("switch_view", "dashboard"))
            st.rerun()

    if state.compare_profiles:
        st.markdown("#### Comparison")
        st.write(", ".join(state.compare_profiles))

    st.markdown("#### Export")
    cols = st.columns(len(EXPORT_FILENAMES))
    for col, (kind, filename) in zip(cols, EXPORT_FILENAMES.items()):
        col.download_button(
            kind.capitalize(),
            data=json.dumps(store.export_bundle(kind), indent=2),
            file_name=filename,
            mime="application/json",
        )


def render_repositories_view(state: AppState):
    st.markdown("## Repositories")
    if not state.has_profile:
        st.info("Analyze a profile to browse its repositories.")
        return
    render_repository_table(state, st.session_state.raw["repos"], "repositories")


def render_analytics_view(state: AppState):
    st.markdown("## Advanced Analytics")
    if not state.has_profile:
        st.info("Analyze a profile to see advanced analytics.")
        return

    raw = st.session_state.raw

    def build() -> dict:
        report = build_report(raw)
        return {
            "languages": report["languages"],
            "heatmap":   activity_heatmap(raw["events"]),
            "growth":    report["growth"],
            "quality":   report["code_quality"],
        }

    data = st.session_state.view_cache.get(state, "analytics", build)
    components.render_analytics(
        data["languages"], data["heatmap"], data["growth"], data["quality"],
        resolve_theme(state.dark_mode),
    )


# ─── UI Layout ────────────────────────────────────────────────────────────────
components.render_hero()
render_sidebar(st.session_state.app_state)

state = st.session_state.app_state
container = visible_container(state)
logger.debug(f"Rendering {container}")

if container == "searchSection":
    render_search()
    st.markdown(
        """
        <div style="text-align:center; padding: 3rem 1rem; color: #8888aa;">
            Enter a GitHub username above to analyze a profile.
        </div>
        """,
        unsafe_allow_html=True,
    )
elif container == "dashboardContent":
    with st.expander("🔍 Search another profile"):
        render_search()
    render_dashboard(st.session_state.app_state)
elif container == "profilesView":
    render_profiles_view(state)
elif container == "repositoriesView":
    render_repositories_view(state)
elif container == "analyticsView":
    render_analytics_view(state)
