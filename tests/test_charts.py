"""
tests/test_charts.py — Unit tests for charts.py and the Pillow rasteriser
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import math
from datetime import date, timedelta

import pytest
from core.charts import (
    NO_ACTIVITY_MESSAGE,
    Clear,
    Rect,
    Text,
    Wedge,
    heatmap_color,
    label_stride,
    language_color,
    language_legend,
    pie_slices,
    render_activity_chart,
    render_bar_chart,
    render_heatmap,
    render_language_chart,
    render_language_trend_chart,
    render_pie_chart,
    resolve_theme,
)
from ui.canvas import rasterize, to_png


LIGHT = resolve_theme(False)
DARK = resolve_theme(True)
LANGUAGES = [("Go", 300), ("Rust", 100)]


def make_buckets(counts: list[int]) -> list[tuple[str, int]]:
    return [(f"2026-03-{day:02d}", count) for day, count in enumerate(counts, start=1)]


# ─── Theme & palette ─────────────────────────────────────────────────────────

class TestTheme:
    def test_light_and_dark(self):
        assert LIGHT.background == "#ffffff"
        assert LIGHT.accent == "#3b82f6"
        assert DARK.background == "#1f2937"
        assert DARK.grid == "#374151"

    def test_known_language_color(self):
        assert language_color("Python", 5) == "#3572A5"

    def test_fallback_color_keyed_by_index(self):
        assert language_color("Elm", 0) == "#3b82f6"
        assert language_color("Elm", 9) == "#ef4444"


# ─── Pie ──────────────────────────────────────────────────────────────────────

class TestPie:
    def test_angles_sum_to_full_circle(self):
        slices = pie_slices(LANGUAGES)
        assert sum(s.span for s in slices) == pytest.approx(2 * math.pi)

    def test_first_slice_starts_at_top(self):
        go, rust = pie_slices(LANGUAGES)
        assert go.start == pytest.approx(-math.pi / 2)
        assert math.degrees(go.span) == pytest.approx(270)
        assert rust.start == pytest.approx(go.end)
        assert rust.end == pytest.approx(3 * math.pi / 2)

    def test_keeps_input_order(self):
        slices = pie_slices([("Rust", 1), ("Go", 9)])
        assert [s.language for s in slices] == ["Rust", "Go"]

    def test_empty_and_zero_total(self):
        assert pie_slices([]) == []
        assert pie_slices([("Go", 0)]) == []

    def test_render_clears_then_strokes_in_background(self):
        drawing = render_pie_chart(LANGUAGES, DARK)
        assert (drawing.width, drawing.height) == (300, 300)
        assert drawing.commands[0] == Clear(DARK.background)
        wedges = drawing.of_type(Wedge)
        assert len(wedges) == 2
        assert all(w.outline == DARK.background for w in wedges)
        assert wedges[0].fill == "#00ADD8"
        assert (wedges[0].cx, wedges[0].cy, wedges[0].radius) == (150, 150, 120)


# ─── Language bars ───────────────────────────────────────────────────────────

class TestBarChart:
    def test_geometry(self):
        drawing = render_bar_chart(LANGUAGES, LIGHT)
        go, rust = drawing.of_type(Rect)
        assert go.width == pytest.approx(140)
        assert go.height == pytest.approx(260)
        assert go.x == 5
        assert go.y + go.height == pytest.approx(280)
        assert rust.height == pytest.approx(260 / 3)
        assert rust.x == pytest.approx(155)

    def test_labels_are_three_characters(self):
        labels = [t.text for t in render_bar_chart([("JavaScript", 1), ("Go", 1)], LIGHT).of_type(Text)]
        assert labels == ["Jav", "Go"]

    def test_empty(self):
        drawing = render_bar_chart([], LIGHT)
        assert drawing.commands == [Clear(LIGHT.background)]

    def test_dispatch_by_kind(self):
        assert render_language_chart(LANGUAGES, "bar", LIGHT).of_type(Rect)
        assert render_language_chart(LANGUAGES, "pie", LIGHT).of_type(Wedge)

    def test_trend_chart_limits_to_five(self):
        languages = [(f"L{i}", 10 - i) for i in range(8)]
        drawing = render_language_trend_chart(languages, LIGHT)
        assert len(drawing.of_type(Rect)) == 5
        assert all(t.align == "right" and t.fill == LIGHT.text for t in drawing.of_type(Text))


# ─── Activity ────────────────────────────────────────────────────────────────

class TestActivityChart:
    def test_all_zero_window_does_not_divide_by_zero(self):
        drawing = render_activity_chart(make_buckets([0] * 7), LIGHT)
        bars = drawing.of_type(Rect)
        assert len(bars) == 7
        assert all(b.height == 0 and b.fill == LIGHT.grid for b in bars)

    def test_non_zero_days_use_accent_and_count_label(self):
        drawing = render_activity_chart(make_buckets([0, 4, 2]), DARK)
        bars = drawing.of_type(Rect)
        assert [b.fill for b in bars] == [DARK.grid, DARK.accent, DARK.accent]
        assert bars[1].height == pytest.approx(160)
        assert bars[2].height == pytest.approx(80)
        counts = [t.text for t in drawing.of_type(Text) if t.size == 10]
        assert counts == ["4", "2"]

    def test_at_most_five_date_labels(self):
        for days in (7, 30, 90):
            start = date(2026, 1, 1)
            buckets = [((start + timedelta(days=i)).isoformat(), 1) for i in range(days)]
            drawing = render_activity_chart(buckets, LIGHT)
            date_labels = [t for t in drawing.of_type(Text) if t.size == 8]
            assert 1 <= len(date_labels) <= 5
            assert label_stride(days) == math.ceil(days / 5)

    def test_date_label_format(self):
        drawing = render_activity_chart(make_buckets([0, 0, 0]), LIGHT)
        labels = [t.text for t in drawing.of_type(Text) if t.size == 8]
        assert labels[0] == "3/1"

    def test_no_data_message(self):
        drawing = render_activity_chart(make_buckets([0] * 7), LIGHT, no_data=True)
        assert drawing.of_type(Rect) == []
        assert drawing.of_type(Text)[0].text == NO_ACTIVITY_MESSAGE


# ─── Heatmap ─────────────────────────────────────────────────────────────────

class TestHeatmap:
    def test_one_cell_per_day(self):
        cells = [(f"d{i}", 0, i % 5) for i in range(365)]
        drawing = render_heatmap(cells, LIGHT)
        assert len(drawing.of_type(Rect)) == 365

    def test_level_colors(self):
        assert heatmap_color(0, LIGHT) == LIGHT.grid
        assert heatmap_color(4, LIGHT) == LIGHT.accent


# ─── Legend ───────────────────────────────────────────────────────────────────

class TestLegend:
    def test_percentages_one_decimal(self):
        legend = language_legend([("Go", 2), ("Elm", 1)])
        assert legend == [
            {"language": "Go", "color": "#00ADD8", "percentage": "66.7"},
            {"language": "Elm", "color": "#6b7280", "percentage": "33.3"},
        ]

    def test_empty(self):
        assert language_legend([]) == []


# ─── Raster ──────────────────────────────────────────────────────────────────

class TestRasterize:
    def test_image_size_matches_drawing(self):
        image = rasterize(render_pie_chart(LANGUAGES, LIGHT))
        assert image.size == (300, 300)

    def test_background_cleared(self):
        image = rasterize(render_activity_chart(make_buckets([0] * 7), DARK))
        assert image.getpixel((399, 0)) == (0x1f, 0x29, 0x37)

    def test_pie_fills_first_slice_color(self):
        image = rasterize(render_pie_chart(LANGUAGES, LIGHT))
        # Six o'clock lies inside Go's 270° sweep (12 → 3 → 6 → 9 o'clock)
        assert image.getpixel((150, 250)) == (0x00, 0xAD, 0xD8)

    def test_png_bytes(self):
        assert to_png(render_bar_chart(LANGUAGES, LIGHT)).startswith(b"\x89PNG")
