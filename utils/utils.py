"""
utils.py — Shared helpers: retry decorator, date math, formatting, input validators.
"""

import calendar
import re
import time
import logging
from datetime import date, datetime, timedelta, timezone
from functools import wraps

from config import GITHUB_USERNAME_REGEX

logger = logging.getLogger(__name__)


# ─── Retry Decorator ─────────────────────────────────────────────────────────

def retry(max_attempts: int = 2, delay: float = 1.5, exceptions=(Exception,)):
    """
    Decorator: retry a function up to `max_attempts` times on specified exceptions.
    Uses exponential backoff: delay, delay*2, delay*4, ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exc = None
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    last_exc = exc
                    if attempt < max_attempts:
                        sleep_time = delay * (2 ** (attempt - 1))
                        logger.warning(
                            f"[retry] {func.__name__} attempt {attempt} failed: {exc}. "
                            f"Retrying in {sleep_time:.1f}s..."
                        )
                        time.sleep(sleep_time)
                    else:
                        logger.error(
                            f"[retry] {func.__name__} failed after {max_attempts} attempts."
                        )
            raise last_exc
        return wrapper
    return decorator


# ─── Date Helpers ─────────────────────────────────────────────────────────────

def parse_github_date(date_str: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 date string to a timezone-aware datetime."""
    if not date_str or not isinstance(date_str, str):
        return None
    try:
        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_date(dt: datetime, tz=None) -> date:
    """Calendar day of `dt` as seen from `tz` (the machine's local zone when None)."""
    return dt.astimezone(tz).date()


def subtract_months(dt: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target month's length."""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def updated_since(repo: dict, cutoff: datetime) -> bool:
    """True when the repository's `updated_at` is strictly after `cutoff`."""
    updated = parse_github_date(repo.get("updated_at"))
    return updated is not None and updated > cutoff


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


# ─── Formatting ──────────────────────────────────────────────────────────────

def format_number(num: int | float) -> str:
    """Compact counter format: 999 → "999", 1500 → "1.5K", 2300000 → "2.3M"."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(int(num))


def format_date(date_str: str | None) -> str:
    """Render a GitHub timestamp as e.g. "Jan 5, 2024"; empty string when absent."""
    dt = parse_github_date(date_str)
    if dt is None:
        return ""
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def time_ago(date_str: str | None, now: datetime | None = None) -> str:
    dt = parse_github_date(date_str)
    if dt is None:
        return ""
    now = now or utc_now()
    seconds = int((now - dt).total_seconds())

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 2592000:
        return f"{seconds // 86400}d ago"
    return f"{seconds // 2592000}mo ago"


def millis_to_iso(timestamp_ms: int | float) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


_EVENT_DESCRIPTIONS = {
    "PushEvent":        "Pushed code to",
    "CreateEvent":      "Created",
    "WatchEvent":       "Starred",
    "ForkEvent":        "Forked",
    "IssuesEvent":      "Opened issue in",
    "PullRequestEvent": "Created pull request in",
    "ReleaseEvent":     "Published release in",
    "PublicEvent":      "Made public",
    "DeleteEvent":      "Deleted branch in",
}


def event_description(event: dict) -> str:
    """Human-readable verb phrase for a GitHub event type."""
    event_type = event.get("type") or "Unknown"
    return _EVENT_DESCRIPTIONS.get(event_type, event_type.replace("Event", ""))


# ─── Input Validation ────────────────────────────────────────────────────────

def validate_github_username(username: str) -> tuple[bool, str]:
    """
    Validate a GitHub username.
    Returns (is_valid: bool, error_message: str).
    """
    username = username.strip()
    if not username:
        return False, "Please enter a GitHub username."
    if not re.match(GITHUB_USERNAME_REGEX, username):
        return False, (
            "Invalid GitHub username. Must be 1–39 characters, "
            "letters, numbers, or hyphens only."
        )
    if username.startswith("-") or username.endswith("-"):
        return False, "GitHub username cannot start or end with a hyphen."
    return True, ""


# ─── Misc ────────────────────────────────────────────────────────────────────

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning `default` when denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator
