from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    template_id: str
    name: str
    text_field_count: int
    category: str
    filename: str

    @property
    def preview_url(self) -> str:
        return f"/templates/{self.filename}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.template_id,
            "name": self.name,
            "text_field_count": self.text_field_count,
            "category": self.category,
            "preview_url": self.preview_url,
        }


@dataclass(slots=True)
class RenderRequest:
    template_id: str
    top_text: str = ""
    bottom_text: str = ""
    additional_text: list[str] = field(default_factory=list)
    use_generated_caption: bool = False


@dataclass(slots=True)
class RenderResult:
    image_bytes: bytes = b""
    mime_type: str = ""
    error_message: str = ""
    generated_captions: list[str] = field(default_factory=list)

    @classmethod
    def success(cls, image_bytes: bytes, mime_type: str) -> RenderResult:
        return cls(image_bytes=image_bytes, mime_type=mime_type)

    @classmethod
    def failure(cls, message: str) -> RenderResult:
        return cls(error_message=message or "unknown error")

    @property
    def ok(self) -> bool:
        return not self.error_message


@dataclass(frozen=True, slots=True)
class Line:
    text: str
    width: int


@dataclass(frozen=True, slots=True)
class Anchor:
    field: str
    index: int
    text: str
    x: int
    y: int


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output_format: str = "jpeg"
    quality: int = 90
    # Size used to measure word wrap; drawing uses the size derived from the image width.
    font_size: float = 36.0
    line_spacing: float = 1.5
    stroke_color: str = "#000000"
    fill_color: str = "#FFFFFF"
    unified_font_size: bool = False
