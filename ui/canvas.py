"""
ui/canvas.py — Rasterise chart Drawings onto a Pillow image.
"""

import io
import logging
import math

from PIL import Image, ImageDraw, ImageFont

from core.charts import Clear, Drawing, Rect, Text, Wedge

logger = logging.getLogger(__name__)

_font_cache: dict[int, ImageFont.ImageFont] = {}


def _font(size: int):
    if size not in _font_cache:
        _font_cache[size] = ImageFont.load_default(size=size)
    return _font_cache[size]


def _draw_text(draw: ImageDraw.ImageDraw, cmd: Text) -> None:
    font = _font(cmd.size)
    left, top, right, bottom = draw.textbbox((0, 0), cmd.text, font=font)
    text_width = right - left

    if cmd.align == "center":
        x = cmd.x - text_width / 2
    elif cmd.align == "right":
        x = cmd.x - text_width
    else:
        x = cmd.x
    # Command y is the baseline; Pillow positions text from its top edge
    draw.text((x - left, cmd.y - bottom), cmd.text, fill=cmd.fill, font=font)


def rasterize(drawing: Drawing) -> Image.Image:
    """Replay every command of `drawing` onto a fresh RGB image."""
    image = Image.new("RGB", (drawing.width, drawing.height))
    draw = ImageDraw.Draw(image)

    for cmd in drawing.commands:
        if isinstance(cmd, Clear):
            draw.rectangle([0, 0, drawing.width, drawing.height], fill=cmd.fill)
        elif isinstance(cmd, Rect):
            if cmd.width <= 0 or cmd.height <= 0:
                continue
            draw.rectangle(
                [cmd.x, cmd.y, cmd.x + cmd.width, cmd.y + cmd.height],
                fill=cmd.fill,
            )
        elif isinstance(cmd, Wedge):
            box = [
                cmd.cx - cmd.radius, cmd.cy - cmd.radius,
                cmd.cx + cmd.radius, cmd.cy + cmd.radius,
            ]
            draw.pieslice(
                box,
                start=math.degrees(cmd.start),
                end=math.degrees(cmd.end),
                fill=cmd.fill,
                outline=cmd.outline,
                width=cmd.line_width,
            )
        elif isinstance(cmd, Text):
            _draw_text(draw, cmd)
        else:
            logger.warning(f"Skipping unknown drawing command: {cmd!r}")

    return image


def to_png(drawing: Drawing) -> bytes:
    buffer = io.BytesIO()
    rasterize(drawing).save(buffer, format="PNG")
    return buffer.getvalue()
