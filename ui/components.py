"""
ui/components.py — Reusable Streamlit UI components for the analytics dashboard.
"""

import datetime

import streamlit as st

from config import APP_ICON, APP_SUBTITLE, APP_TITLE
from core.charts import (
    language_legend,
    render_activity_chart,
    render_heatmap,
    render_language_chart,
    render_language_trend_chart,
)
from core.scorer import term_fractions
from ui.canvas import to_png
from utils.utils import (
    event_description,
    format_date,
    format_number,
    millis_to_iso,
    time_ago,
)

_RARITY_BADGES = {"silver": "🥈", "gold": "🥇", "platinum": "💎"}


def render_hero():
    """Render the page title and subtitle."""
    st.markdown(f"# {APP_ICON} {APP_TITLE}")
    st.caption(APP_SUBTITLE)


def render_profile_card(profile: dict):
    col_avatar, col_info = st.columns([1, 4])
    with col_avatar:
        if profile.get("avatar_url"):
            st.image(profile["avatar_url"], width=96)
    with col_info:
        st.markdown(f"### {profile.get('name') or profile.get('login')}  \n`@{profile.get('login')}`")
        st.write(profile.get("bio") or "No bio available")
        st.caption(
            f"📍 {profile.get('location') or 'Not specified'} · "
            f"🏢 {profile.get('company') or 'Not specified'} · "
            f"📅 Joined {format_date(profile.get('created_at'))}"
        )
        if profile.get("html_url"):
            st.link_button("View on GitHub", profile["html_url"])


def render_metrics(metrics: dict):
    """Quick stats row below the profile card."""
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Followers",    format_number(metrics.get("followers", 0)))
    col2.metric("Repositories", format_number(metrics.get("public_repos", 0)))
    col3.metric("Total Stars",  format_number(metrics.get("total_stars", 0)))
    col4.metric("Total Forks",  format_number(metrics.get("total_forks", 0)))


def render_language_chart_card(languages: list, chart_kind: str, theme):
    st.markdown("#### Languages")
    if not languages:
        st.info("No language data available")
        return
    st.image(to_png(render_language_chart(languages, chart_kind, theme)))
    for entry in language_legend(languages):
        st.markdown(
            f"<span style='color:{entry['color']}'>●</span> "
            f"{entry['language']} ({entry['percentage']}%)",
            unsafe_allow_html=True,
        )


def render_activity_chart_card(buckets: list, theme, no_data: bool):
    st.markdown("#### Activity")
    st.image(to_png(render_activity_chart(buckets, theme, no_data=no_data)))


def render_repository_table(result):
    """One page of the filtered, sorted repository table."""
    if not result.items:
        st.info("No repositories match your search.")
    else:
        rows = [
            {
                "Repository":  f"{repo.get('name')}{' (fork)' if repo.get('fork') else ''}",
                "Description": repo.get("description") or "No description",
                "Language":    repo.get("language") or "-",
                "Stars":       format_number(repo.get("stargazers_count") or 0),
                "Forks":       format_number(repo.get("forks_count") or 0),
                "Updated":     format_date(repo.get("updated_at")),
                "Link":        repo.get("html_url"),
            }
            for repo in result.items
        ]
        st.dataframe(
            rows,
            hide_index=True,
            use_container_width=True,
            column_config={"Link": st.column_config.LinkColumn("Link", display_text="View")},
        )
    st.caption(result.label)


def render_timeline(events: list):
    if not events:
        st.info("No recent activity found")
        return
    for event in events:
        repo_name = (event.get("repo") or {}).get("name", "")
        st.markdown(
            f"**{event_description(event)}** "
            f"[{repo_name}](https://github.com/{repo_name})  \n"
            f"<small>{time_ago(event.get('created_at'))}</small>",
            unsafe_allow_html=True,
        )


def render_insights(insights: dict):
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Primary Language",    insights["primary_language"])
    col2.metric("Coding Frequency",    insights["coding_frequency"])
    col3.metric("Collaboration Level", insights["collaboration_level"])
    col4.metric("Project Diversity",   insights["project_diversity"])


def render_recommendations(recommendations: list):
    st.markdown("#### Recommendations")
    for rec in recommendations:
        st.markdown(f"**{rec['title']}**  \n{rec['description']}")


def render_score(report: dict):
    """Developer score, per-term bars and unlocked achievements."""
    st.metric("Developer Score", f"{report['score']}/100", report["tier"])
    fractions = term_fractions(report["score_breakdown"])
    for term, value in report["score_breakdown"].items():
        st.progress(min(fractions[term], 1.0), text=f"{term.capitalize()}: {value:.1f}")
    for achievement in report["achievements"]:
        badge = _RARITY_BADGES.get(achievement["rarity"], "🏅")
        st.markdown(f"{badge} **{achievement['title']}**: {achievement['description']}")


def render_summary(summary: dict, is_fallback: bool = False):
    if is_fallback:
        st.caption("AI summary unavailable, showing a generated overview.")
    st.markdown(f"#### {summary['headline']}")
    st.write(summary["summary"])
    col_strengths, col_growth = st.columns(2)
    with col_strengths:
        st.markdown("**Strengths**")
        for item in summary["strengths"]:
            st.markdown(f"- {item}")
    with col_growth:
        st.markdown("**Growth Areas**")
        for item in summary["growth_areas"]:
            st.markdown(f"- {item}")


def render_profile_list(entries: list, empty_text: str, key_prefix: str) -> str | None:
    """List saved profiles; returns the login whose button was clicked, if any."""
    if not entries:
        st.caption(empty_text)
        return None
    clicked = None
    for entry in entries:
        stamp = entry.get("timestamp") or entry.get("bookmarked_at")
        when = time_ago(millis_to_iso(stamp)) if stamp else ""
        if st.button(f"{entry['login']}  ·  {when}", key=f"{key_prefix}-{entry['login']}"):
            clicked = entry["login"]
    return clicked


def render_analytics(languages: list, heatmap_cells: list, growth: dict, quality: dict, theme):
    """Advanced analytics view: language trends, heatmap, growth and health."""
    col_trend, col_growth = st.columns(2)
    with col_trend:
        st.markdown("#### Language Trends")
        st.image(to_png(render_language_trend_chart(languages, theme)))
    with col_growth:
        st.markdown("#### Repository Growth")
        st.metric("This Month", f"+{growth['this_month']}")
        st.metric("This Year", f"+{growth['this_year']}")
        st.metric("Total", growth["total"])

    st.markdown("#### Activity Heatmap")
    st.image(to_png(render_heatmap(heatmap_cells, theme)))
    active_days = sum(1 for _, count, _ in heatmap_cells if count)
    st.caption(f"{active_days} active days in the last {len(heatmap_cells)} days")

    st.markdown("#### Repository Health")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Avg Size (KB)", f"{quality['avg_repo_size']:.0f}")
    col2.metric("Documented",    f"{quality['documentation_score']:.0f}%")
    col3.metric("Maintained",    f"{quality['maintenance_score']:.0f}%")
    col4.metric("Avg Stars",     f"{quality['popularity_score']:.1f}")


def render_rate_limit_warning(rate_limit: dict):
    """Show a warning if GitHub rate limit is low."""
    remaining = rate_limit.get("remaining", 999)
    if remaining < 10:
        reset_ts = rate_limit.get("reset_timestamp", 0)
        reset_dt = datetime.datetime.fromtimestamp(reset_ts).strftime("%H:%M:%S") if reset_ts else "soon"
        st.warning(
            f"⚠️ GitHub rate limit nearly exhausted ({remaining} requests remaining). "
            f"Resets at {reset_dt}. Add a GitHub PAT to avoid interruptions."
        )
