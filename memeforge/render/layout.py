from __future__ import annotations

from memeforge.constants import (
    ADDITIONAL_STEP_FACTOR,
    EDGE_OFFSET_FACTOR,
    FIXED_FIELD_COUNT,
    RENDER_FONT_DIVISOR,
    RENDER_FONT_MAX,
    RENDER_FONT_MIN,
)
from memeforge.models import Anchor, RenderRequest, Template


def render_font_size(image_width: int) -> float:
    size = image_width / RENDER_FONT_DIVISOR
    return float(max(RENDER_FONT_MIN, min(RENDER_FONT_MAX, size)))


def line_height(font_size: float, line_spacing: float) -> int:
    return int(round(font_size * line_spacing))


def additional_field_limit(template: Template) -> int:
    return max(0, template.text_field_count - FIXED_FIELD_COUNT)


def anchors_for(
    template: Template,
    request: RenderRequest,
    image_width: int,
    image_height: int,
    font_size: float,
) -> list[Anchor]:
    center_x = image_width // 2
    edge_offset = int(round(font_size * EDGE_OFFSET_FACTOR))
    anchors: list[Anchor] = []

    if request.top_text:
        anchors.append(Anchor("top", 0, request.top_text, center_x, edge_offset))
    if request.bottom_text:
        anchors.append(Anchor("bottom", 0, request.bottom_text, center_x, image_height - edge_offset))

    step = int(round(font_size * ADDITIONAL_STEP_FACTOR))
    limit = additional_field_limit(template)
    for index, text in enumerate(request.additional_text[:limit]):
        if not text:
            continue
        y = image_height // 2 + (index - 1) * step
        anchors.append(Anchor("additional", index, text, center_x, y))
    return anchors


def block_line_positions(anchor_y: int, line_count: int, spacing: int) -> list[int]:
    """Baselines for ``line_count`` lines vertically centred around ``anchor_y``."""
    if line_count <= 0:
        return []
    start_y = anchor_y - (line_count - 1) * spacing // 2
    return [start_y + index * spacing for index in range(line_count)]
