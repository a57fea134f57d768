from __future__ import annotations

import logging
from typing import Callable, Protocol

from memeforge.constants import CAPTION_PROVIDERS, STATIC_CAPTION_FORMAT
from memeforge.models import Template

LOGGER = logging.getLogger("memeforge.captions")


class CaptionProvider(Protocol):
    id: str

    def captions(self, template: Template) -> list[str]: ...


class NoCaptionProvider:
    id = "none"

    def captions(self, template: Template) -> list[str]:
        return []


class StaticCaptionProvider:
    """Placeholder generator producing one caption from the template's display name."""

    id = "static"

    def __init__(self, caption_format: str = STATIC_CAPTION_FORMAT) -> None:
        self.caption_format = caption_format

    def captions(self, template: Template) -> list[str]:
        return [self.caption_format.format(name=template.name)]


class ExternalCaptionProvider:
    id = "external"

    def __init__(self, generate: Callable[[str], list[str]]) -> None:
        self._generate = generate

    def captions(self, template: Template) -> list[str]:
        result = self._generate(template.name) or []
        return [str(item) for item in result if str(item).strip()]


def build_caption_provider(kind: str | None) -> CaptionProvider:
    key = str(kind or "none").strip().lower()
    if key not in CAPTION_PROVIDERS:
        raise ValueError(f"unknown caption provider: {kind!r}")
    if key == "static":
        return StaticCaptionProvider()
    return NoCaptionProvider()
