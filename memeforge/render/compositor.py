from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw

from memeforge.decoders.image_decoder import decode_image_bytes, encode_image, resolve_output_format
from memeforge.errors import MemeError, TemplateNotFound
from memeforge.models import Anchor, Line, RenderRequest, RenderResult, RenderSettings, Template
from memeforge.render.glyphs import draw_outlined_line
from memeforge.render.layout import anchors_for, block_line_positions, line_height, render_font_size
from memeforge.render.typography import FontProgram, make_measure, wrap_lines

LOGGER = logging.getLogger("memeforge.render")


@dataclass(frozen=True, slots=True)
class FieldLayout:
    anchor: Anchor
    lines: list[Line]
    baselines: list[int]


def measurement_font_size(settings: RenderSettings, font_size: float) -> float:
    # Wrap width and line spacing use the configured size unless both sizes are unified.
    if settings.unified_font_size:
        return font_size
    return settings.font_size


def layout_fields(
    template: Template,
    request: RenderRequest,
    size: tuple[int, int],
    font: FontProgram,
    settings: RenderSettings,
) -> list[FieldLayout]:
    width, height = size
    font_size = render_font_size(width)
    layout_size = measurement_font_size(settings, font_size)
    measure = make_measure(font.at_size(layout_size))
    spacing = line_height(layout_size, settings.line_spacing)

    layouts: list[FieldLayout] = []
    for anchor in anchors_for(template, request, width, height, font_size):
        lines = wrap_lines(anchor.text, width, measure)
        baselines = block_line_positions(anchor.y, len(lines), spacing)
        layouts.append(FieldLayout(anchor=anchor, lines=lines, baselines=baselines))
    return layouts


def compose(
    template: Template,
    request: RenderRequest,
    base_image_bytes: bytes,
    font: FontProgram,
    settings: RenderSettings,
) -> Image.Image:
    base = decode_image_bytes(base_image_bytes)
    canvas = Image.new("RGB", base.size)
    canvas.paste(base, (0, 0))

    font_size = render_font_size(canvas.width)
    render_font = font.at_size(font_size)
    draw = ImageDraw.Draw(canvas)
    for layout in layout_fields(template, request, canvas.size, font, settings):
        for line, baseline in zip(layout.lines, layout.baselines):
            draw_outlined_line(
                draw,
                line.text,
                layout.anchor.x,
                baseline,
                render_font,
                stroke_fill=settings.stroke_color,
                fill=settings.fill_color,
            )
    return canvas


def render(
    template: Template | None,
    request: RenderRequest,
    base_image_bytes: bytes,
    font: FontProgram,
    settings: RenderSettings,
) -> RenderResult:
    """Composite the request's text onto the template image and encode it.

    Domain failures come back as ``RenderResult.failure``; they are never raised.
    """
    try:
        if template is None:
            raise TemplateNotFound(request.template_id)
        pil_format, mime_type = resolve_output_format(settings.output_format)
        canvas = compose(template, request, base_image_bytes, font, settings)
        data = encode_image(canvas, pil_format, settings.quality)
    except (MemeError, ValueError) as exc:
        LOGGER.warning("render of %r failed: %s", request.template_id, exc)
        return RenderResult.failure(str(exc))
    LOGGER.debug("rendered %r: %d bytes %s", template.template_id, len(data), mime_type)
    return RenderResult.success(data, mime_type)
