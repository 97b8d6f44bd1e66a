"""
charts.py — Hand-drawn chart geometry for language and activity statistics.

Every render_* function is a pure function of (aggregated data, theme) and
returns a Drawing: a canvas size plus an ordered list of primitive commands,
starting with a Clear. Nothing is retained between calls. ui/canvas.py turns
a Drawing into pixels.

Angles are radians, measured clockwise from the positive x-axis in screen
coordinates (y grows downward), so -π/2 is twelve o'clock.
"""

import math
from dataclasses import dataclass, field
from datetime import date

from config import (
    ACTIVITY_BAR_GAP,
    ACTIVITY_CANVAS_SIZE,
    ACTIVITY_MAX_LABELS,
    BAR_MARGIN,
    FALLBACK_COLORS,
    HEATMAP_CELL,
    HEATMAP_GAP,
    HEATMAP_MAX_LEVEL,
    LANGUAGE_CANVAS_SIZE,
    LANGUAGE_COLORS,
    LANGUAGE_TREND_LIMIT,
    LEGEND_FALLBACK_COLOR,
    PIE_RADIUS,
    THEMES,
    TREND_CANVAS_SIZE,
)
from utils.utils import safe_divide

PIE_START_ANGLE = -math.pi / 2
NO_ACTIVITY_MESSAGE = "No activity data available"


# ─── Theme ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Theme:
    background: str
    text: str
    grid: str
    accent: str


def resolve_theme(dark: bool) -> Theme:
    """Pick the light or dark chart palette."""
    return Theme(**THEMES["dark" if dark else "light"])


def language_color(language: str, index: int) -> str:
    """Brand colour for well-known languages, otherwise a stable fallback by position."""
    return LANGUAGE_COLORS.get(language) or FALLBACK_COLORS[index % len(FALLBACK_COLORS)]


# ─── Drawing Commands ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Clear:
    fill: str


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str


@dataclass(frozen=True)
class Wedge:
    cx: float
    cy: float
    radius: float
    start: float
    end: float
    fill: str
    outline: str
    line_width: int = 2


@dataclass(frozen=True)
class Text:
    x: float
    y: float            # baseline
    text: str
    fill: str
    size: int = 10
    align: str = "center"   # "center" | "right" | "left"


@dataclass(frozen=True)
class Drawing:
    width: int
    height: int
    commands: list = field(default_factory=list)

    def of_type(self, kind) -> list:
        return [c for c in self.commands if isinstance(c, kind)]


# ─── Pie ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Slice:
    language: str
    value: float
    start: float
    end: float
    color: str

    @property
    def span(self) -> float:
        return self.end - self.start


def pie_slices(languages: list[tuple[str, float]]) -> list[Slice]:
    """
    Lay out slices in input order, starting at twelve o'clock and going
    clockwise; each slice starts where the previous one ended.
    """
    total = sum(value for _, value in languages)
    if total <= 0:
        return []

    slices = []
    angle = PIE_START_ANGLE
    for index, (language, value) in enumerate(languages):
        span = value / total * 2 * math.pi
        slices.append(Slice(language, value, angle, angle + span, language_color(language, index)))
        angle += span
    return slices


def render_pie_chart(languages: list[tuple[str, float]], theme: Theme) -> Drawing:
    width, height = LANGUAGE_CANVAS_SIZE
    cx, cy = width / 2, height / 2

    commands = [Clear(theme.background)]
    for s in pie_slices(languages):
        # Background-coloured outline separates neighbouring slices
        commands.append(Wedge(cx, cy, PIE_RADIUS, s.start, s.end, s.color, theme.background))
    return Drawing(width, height, commands)


# ─── Bars ─────────────────────────────────────────────────────────────────────

def render_bar_chart(languages: list[tuple[str, float]], theme: Theme) -> Drawing:
    width, height = LANGUAGE_CANVAS_SIZE
    commands = [Clear(theme.background)]
    if not languages:
        return Drawing(width, height, commands)

    max_value = max(max(value for _, value in languages), 1)
    bar_width = width / len(languages) - BAR_MARGIN
    max_bar_height = height - 40

    for index, (language, value) in enumerate(languages):
        bar_height = value / max_value * max_bar_height
        x = index * (bar_width + BAR_MARGIN) + 5
        y = height - bar_height - 20
        commands.append(Rect(x, y, bar_width, bar_height, language_color(language, index)))
        commands.append(Text(x + bar_width / 2, height - 5, language[:3], theme.text, size=10))

    return Drawing(width, height, commands)


def render_language_chart(languages: list[tuple[str, float]], kind: str, theme: Theme) -> Drawing:
    """Dispatch on the selected chart kind; anything but "bar" draws a pie."""
    if kind == "bar":
        return render_bar_chart(languages, theme)
    return render_pie_chart(languages, theme)


def render_language_trend_chart(languages: list[tuple[str, float]], theme: Theme) -> Drawing:
    """Horizontal bars for the leading languages, label to the left of each bar."""
    width, height = TREND_CANVAS_SIZE
    commands = [Clear(theme.background)]
    top = languages[:LANGUAGE_TREND_LIMIT]
    if not top:
        return Drawing(width, height, commands)

    max_value = max(max(value for _, value in top), 1)
    max_width = width - 100

    for index, (language, value) in enumerate(top):
        y = 50 + index * 30
        commands.append(Rect(80, y, value / max_value * max_width, 20, language_color(language, index)))
        commands.append(Text(75, y + 15, language, theme.text, size=12, align="right"))

    return Drawing(width, height, commands)


# ─── Activity ─────────────────────────────────────────────────────────────────

def _short_date(iso_day: str) -> str:
    day = date.fromisoformat(iso_day)
    return f"{day.month}/{day.day}"


def label_stride(day_count: int) -> int:
    return max(1, math.ceil(day_count / ACTIVITY_MAX_LABELS))


def render_activity_chart(
    buckets: list[tuple[str, int]],
    theme: Theme,
    no_data: bool = False,
) -> Drawing:
    """
    One bar per day bucket. `no_data` signals that there were no events at
    all, in which case only a placeholder message is drawn.
    """
    width, height = ACTIVITY_CANVAS_SIZE
    commands = [Clear(theme.background)]

    if no_data or not buckets:
        commands.append(Text(width / 2, height / 2, NO_ACTIVITY_MESSAGE, theme.text, size=14))
        return Drawing(width, height, commands)

    max_value = max(max(count for _, count in buckets), 1)
    bar_width = width / len(buckets) - ACTIVITY_BAR_GAP
    max_bar_height = height - 40

    for index, (_, count) in enumerate(buckets):
        bar_height = count / max_value * max_bar_height
        x = index * (bar_width + ACTIVITY_BAR_GAP)
        y = height - bar_height - 20
        commands.append(Rect(x, y, bar_width, bar_height, theme.accent if count > 0 else theme.grid))
        if count > 0:
            commands.append(Text(x + bar_width / 2, y - 5, str(count), theme.text, size=10))

    stride = label_stride(len(buckets))
    for index, (day, _) in enumerate(buckets):
        if index % stride == 0:
            x = index * (bar_width + ACTIVITY_BAR_GAP) + bar_width / 2
            commands.append(Text(x, height - 5, _short_date(day), theme.text, size=8))

    return Drawing(width, height, commands)


# ─── Heatmap ──────────────────────────────────────────────────────────────────

def _blend(start_hex: str, end_hex: str, ratio: float) -> str:
    start = [int(start_hex[i:i + 2], 16) for i in (1, 3, 5)]
    end = [int(end_hex[i:i + 2], 16) for i in (1, 3, 5)]
    mixed = [round(a + (b - a) * ratio) for a, b in zip(start, end)]
    return "#" + "".join(f"{c:02x}" for c in mixed)


def heatmap_color(level: int, theme: Theme) -> str:
    """Level 0 uses the grid colour; higher levels move toward the accent."""
    return _blend(theme.grid, theme.accent, safe_divide(level, HEATMAP_MAX_LEVEL))


def render_heatmap(cells: list[tuple[str, int, int]], theme: Theme) -> Drawing:
    """Week-column grid (7 rows) of day cells, oldest day top-left."""
    step = HEATMAP_CELL + HEATMAP_GAP
    columns = max(1, math.ceil(len(cells) / 7))
    width, height = columns * step, 7 * step

    commands = [Clear(theme.background)]
    for index, (_, _, level) in enumerate(cells):
        column, row = divmod(index, 7)
        commands.append(Rect(column * step, row * step, HEATMAP_CELL, HEATMAP_CELL, heatmap_color(level, theme)))
    return Drawing(width, height, commands)


# ─── Legend ───────────────────────────────────────────────────────────────────

def language_legend(languages: list[tuple[str, float]]) -> list[dict]:
    """Percentage-annotated legend entries, in the same order as the chart."""
    total = sum(value for _, value in languages)
    return [
        {
            "language":   language,
            "color":      LANGUAGE_COLORS.get(language, LEGEND_FALLBACK_COLOR),
            "percentage": f"{safe_divide(value, total) * 100:.1f}",
        }
        for language, value in languages
    ]
