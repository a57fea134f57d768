from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from memeforge.assets import AssetLoader
from memeforge.captions import StaticCaptionProvider
from memeforge.models import Template
from memeforge.render.typography import FontProgram
from memeforge.service import MemeService
from memeforge.template_loader import TemplateRegistry


def image_bytes(size: tuple[int, int] = (600, 400), color: str = "#808080", fmt: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(scope="session")
def font() -> FontProgram:
    return FontProgram.builtin()


@pytest.fixture
def template() -> Template:
    return Template(
        template_id="test-template",
        name="Test Template",
        text_field_count=2,
        category="test",
        filename="test-template.jpg",
    )


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    root.mkdir()
    (root / "test-template.jpg").write_bytes(image_bytes())
    return root


@pytest.fixture
def service(template: Template, template_dir: Path, font: FontProgram) -> MemeService:
    return MemeService(
        TemplateRegistry([template]),
        AssetLoader(template_dir),
        captions=StaticCaptionProvider(),
        font=font,
    )


@pytest.fixture
def make_image_bytes():
    return image_bytes
