"""
config.py — Central configuration: constants, thresholds, palettes, prompt templates.
"""

# ─── GitHub API ───────────────────────────────────────────────────────────────
GITHUB_API_BASE = "https://api.github.com"
GITHUB_EVENTS_PAGES = 1        # 1 × 100 = 100 events max
GITHUB_EVENTS_PER_PAGE = 100
GITHUB_REPOS_PER_PAGE = 100
GITHUB_SUGGESTIONS_PER_PAGE = 5
GITHUB_REQUEST_TIMEOUT = 10    # seconds
SUGGESTION_MIN_QUERY_LENGTH = 3

# ─── Collection Pipeline ─────────────────────────────────────────────────────
ITEMS_PER_PAGE = 10
TIMELINE_LIMIT = 15
SORT_KEYS = ("stars", "forks", "updated", "created")
DEFAULT_SORT_KEY = "stars"

# Activity filter category → GitHub event type
ACTIVITY_FILTERS = {
    "all":    None,
    "push":   "PushEvent",
    "pr":     "PullRequestEvent",
    "issues": "IssuesEvent",
}

# ─── Time Windows ────────────────────────────────────────────────────────────
TIME_WINDOWS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_TIME_WINDOW = "30d"
HEATMAP_DAYS = 365
HEATMAP_MAX_LEVEL = 4

# ─── Aggregation Thresholds ──────────────────────────────────────────────────
LANGUAGE_CHART_LIMIT = 8
LANGUAGE_TREND_LIMIT = 5
RECENT_DAYS = 30               # "updated recently" for insights + recommendations
MAINTENANCE_MONTHS = 3
SCORE_ACTIVITY_MONTHS = 6
VISIBILITY_STAR_THRESHOLD = 50
MIN_PROJECT_COUNT = 5

# (label, strictly-greater-than threshold) pairs, checked in order
CODING_FREQUENCY_LEVELS = (("High", 5), ("Medium", 2))
COLLABORATION_LEVELS    = (("High", 100), ("Medium", 20))
DIVERSITY_LEVELS        = (("High", 5), ("Medium", 2))

# ─── Developer Score (term caps sum to 100) ──────────────────────────────────
SCORE_CAPS = {
    "followers": 25,
    "quality":   30,
    "activity":  20,
    "diversity": 15,
    "openness":  10,
}

SCORE_TIERS = (
    (80, "Elite"),
    (60, "Advanced"),
    (40, "Intermediate"),
    (0,  "Emerging"),
)

# ─── Preference Store ────────────────────────────────────────────────────────
HISTORY_LIMIT = 10
RECENT_PROFILES_SHOWN = 5
COMPARISON_LIMIT = 3
PREFERENCES_DIR = ".cache/github_analytics/preferences"
STORAGE_KEYS = {
    "history":     "github-search-history",
    "bookmarks":   "github-bookmarks",
    "preferences": "github-preferences",
}

# ─── Cache ───────────────────────────────────────────────────────────────────
CACHE_TTL_SECONDS  = 3600   # 1 hour for in-memory (st.cache_data)
DISK_CACHE_DIR     = ".cache/github_analytics"
DISK_CACHE_TTL     = 86400  # 24 hours

# ─── Charts ──────────────────────────────────────────────────────────────────
LANGUAGE_CANVAS_SIZE = (300, 300)
ACTIVITY_CANVAS_SIZE = (400, 200)
TREND_CANVAS_SIZE    = (300, 200)
PIE_RADIUS = 120
BAR_MARGIN = 10
ACTIVITY_BAR_GAP = 2
ACTIVITY_MAX_LABELS = 5
HEATMAP_CELL = 10
HEATMAP_GAP = 2

THEMES = {
    "light": {
        "background": "#ffffff",
        "text":       "#374151",
        "grid":       "#e5e7eb",
        "accent":     "#3b82f6",
    },
    "dark": {
        "background": "#1f2937",
        "text":       "#f9fafb",
        "grid":       "#374151",
        "accent":     "#60a5fa",
    },
}

# Stable brand colours, theme-independent
LANGUAGE_COLORS = {
    "JavaScript": "#f1e05a",
    "Python":     "#3572A5",
    "Java":       "#b07219",
    "TypeScript": "#2b7489",
    "C++":        "#f34b7d",
    "C":          "#555555",
    "C#":         "#239120",
    "PHP":        "#4F5D95",
    "Ruby":       "#701516",
    "Go":         "#00ADD8",
    "Rust":       "#dea584",
    "Swift":      "#ffac45",
    "HTML":       "#e34c26",
    "CSS":        "#1572B6",
    "Shell":      "#89e051",
    "Vue":        "#4FC08D",
    "Dart":       "#00B4AB",
    "Scala":      "#c22d40",
    "R":          "#198CE7",
    "Perl":       "#0298c3",
}
FALLBACK_COLORS = (
    "#3b82f6", "#ef4444", "#10b981", "#f59e0b",
    "#8b5cf6", "#06b6d4", "#f97316", "#84cc16",
)
LEGEND_FALLBACK_COLOR = "#6b7280"

# ─── OpenAI ──────────────────────────────────────────────────────────────────
OPENAI_MODEL       = "gpt-4o-mini"
OPENAI_MAX_TOKENS  = 500
OPENAI_TEMPERATURE = 0.6

# ─── Prompt Template ─────────────────────────────────────────────────────────
SUMMARY_PROMPT_TEMPLATE = """
You are a friendly engineering mentor reviewing a public GitHub profile.

Developer: {username}
Developer score: {score}/100 ({tier})
Followers: {followers}
Public repositories: {repo_count}
Total stars: {total_stars}
Primary language: {primary_language}
Coding frequency: {coding_frequency}
Collaboration level: {collaboration_level}
Project diversity: {project_diversity}
Achievements: {achievements}
Open recommendations: {recommendations}

Write a short, encouraging assessment grounded only in the data above.

Respond ONLY with valid JSON in this exact structure:
{{
  "headline": "One sentence, max 12 words",
  "summary": "60–90 word assessment",
  "strengths": ["short phrase", "short phrase"],
  "growth_areas": ["short phrase", "short phrase"]
}}
""".strip()

# ─── Username Validation ──────────────────────────────────────────────────────
GITHUB_USERNAME_REGEX = r"^[a-zA-Z0-9\-]{1,39}$"

# ─── UI ──────────────────────────────────────────────────────────────────────
APP_TITLE       = "GitHub Analytics Dashboard"
APP_SUBTITLE    = "Profiles, repositories and activity at a glance."
APP_ICON        = "📊"
