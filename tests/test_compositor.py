import io

from PIL import Image

from memeforge.models import RenderRequest, RenderSettings, Template
from memeforge.render.compositor import layout_fields, render
from memeforge.render.typography import FontProgram, make_measure, wrap_lines


def test_render_top_and_bottom_end_to_end(template: Template, font: FontProgram, make_image_bytes) -> None:
    request = RenderRequest("test-template", top_text="HELLO", bottom_text="WORLD")
    settings = RenderSettings()

    layouts = layout_fields(template, request, (600, 400), font, settings)
    result = render(template, request, make_image_bytes((600, 400)), font, settings)

    assert [(l.anchor.x, l.anchor.y) for l in layouts] == [(300, 72), (300, 328)]
    assert [[line.text for line in l.lines] for l in layouts] == [["HELLO"], ["WORLD"]]
    assert [l.baselines for l in layouts] == [[72], [328]]
    assert result.ok
    assert result.error_message == ""
    assert result.mime_type == "image/jpeg"
    assert result.image_bytes
    with Image.open(io.BytesIO(result.image_bytes)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.size == (600, 400)


def test_render_draws_outlined_text_near_anchor(template: Template, font: FontProgram, make_image_bytes) -> None:
    request = RenderRequest("test-template", top_text="HELLO")
    settings = RenderSettings(output_format="png")

    result = render(template, request, make_image_bytes((600, 400), fmt="PNG"), font, settings)

    assert result.mime_type == "image/png"
    with Image.open(io.BytesIO(result.image_bytes)) as decoded:
        top_band = decoded.convert("RGB").crop((150, 20, 450, 90))
        bottom_band = decoded.convert("RGB").crop((150, 300, 450, 380))
        top_pixels = list(top_band.getdata())
        assert any(min(p) >= 250 for p in top_pixels)
        assert any(max(p) <= 5 for p in top_pixels)
        assert set(bottom_band.getdata()) == {(128, 128, 128)}


def test_render_unknown_template_reports_id(font: FontProgram, make_image_bytes) -> None:
    request = RenderRequest("no-such-meme", top_text="HI")

    result = render(None, request, make_image_bytes(), font, RenderSettings())

    assert not result.ok
    assert result.image_bytes == b""
    assert "no-such-meme" in result.error_message


def test_render_undecodable_image_is_a_result_not_an_exception(template: Template, font: FontProgram) -> None:
    result = render(template, RenderRequest("test-template", top_text="HI"), b"not an image", font, RenderSettings())

    assert not result.ok
    assert result.image_bytes == b""
    assert "failed to decode template image" in result.error_message


def test_render_unsupported_output_format(template: Template, font: FontProgram, make_image_bytes) -> None:
    result = render(
        template,
        RenderRequest("test-template", top_text="HI"),
        make_image_bytes(),
        font,
        RenderSettings(output_format="tiff"),
    )

    assert not result.ok
    assert "output format" in result.error_message


def test_wrap_is_measured_at_configured_size_not_render_size(font: FontProgram) -> None:
    # A 240px wide image draws at 20px, but wrapping is measured at the configured 36px
    # unless both sizes are unified.
    template = Template("t", "T", 2, "classic", "t.jpg")
    request = RenderRequest("t", top_text=" ".join(["ha"] * 30))

    split = layout_fields(template, request, (240, 240), font, RenderSettings(font_size=36))
    unified = layout_fields(template, request, (240, 240), font, RenderSettings(font_size=36, unified_font_size=True))

    assert split[0].lines == wrap_lines(request.top_text, 240, make_measure(font.at_size(36)))
    assert unified[0].lines == wrap_lines(request.top_text, 240, make_measure(font.at_size(20)))
    assert len(split[0].lines) > len(unified[0].lines)
    # line spacing follows the same size as wrapping: round(36 * 1.5) vs round(20 * 1.5)
    assert split[0].baselines[1] - split[0].baselines[0] == 54
    assert unified[0].baselines[1] - unified[0].baselines[0] == 30


def test_render_oversized_image_is_a_load_failure(
    template: Template, font: FontProgram, make_image_bytes, monkeypatch
) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    result = render(template, RenderRequest("test-template", top_text="HI"), make_image_bytes((600, 400)), font, RenderSettings())

    assert not result.ok
    assert result.image_bytes == b""
    assert "failed to decode template image" in result.error_message
