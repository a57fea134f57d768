from __future__ import annotations

import logging
import math
from typing import Any

from PIL import ImageDraw

from memeforge.render.typography import text_width

LOGGER = logging.getLogger("memeforge.render")

_DRAW_ERRORS = (OSError, ValueError, UnicodeError)


def stroke_radius(font_size: float) -> int:
    return max(1, int(math.floor(font_size / 6)))


def stroke_offsets(radius: int) -> list[tuple[int, int]]:
    return [
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx or dy
    ]


def _draw_run(draw: ImageDraw.ImageDraw, x: int, y: int, text: str, font: Any, fill: str) -> None:
    try:
        draw.text((x, y), text, font=font, fill=fill, anchor="ls")
        return
    except _DRAW_ERRORS as exc:
        LOGGER.debug("run %r failed (%s), drawing per character", text, exc)

    cursor = float(x)
    for ch in text:
        try:
            draw.text((int(round(cursor)), y), ch, font=font, fill=fill, anchor="ls")
        except _DRAW_ERRORS:
            LOGGER.debug("skipping undrawable character %r", ch)
        try:
            cursor += font.getlength(ch)
        except _DRAW_ERRORS:
            continue


def draw_outlined_line(
    draw: ImageDraw.ImageDraw,
    text: str,
    anchor_x: int,
    anchor_y: int,
    font: Any,
    *,
    stroke_fill: str = "#000000",
    fill: str = "#FFFFFF",
) -> None:
    """Draw one line centred on ``anchor_x`` with its baseline on ``anchor_y``.

    The outline is produced by stamping the glyphs in ``stroke_fill`` at every offset of a
    square of side ``2r + 1`` around the origin, then drawing the fill once on top.
    """
    if not text:
        return
    try:
        width = text_width(font, text)
    except _DRAW_ERRORS:
        width = 0
    draw_x = anchor_x - width // 2
    radius = stroke_radius(getattr(font, "size", 0))

    for dx, dy in stroke_offsets(radius):
        _draw_run(draw, draw_x + dx, anchor_y + dy, text, font, stroke_fill)
    _draw_run(draw, draw_x, anchor_y, text, font, fill)
