from __future__ import annotations

import dataclasses
import logging
import threading
import time
from pathlib import Path
from typing import Any, Mapping, Protocol

from memeforge.assets import AssetLoader
from memeforge.captions import CaptionProvider, NoCaptionProvider, build_caption_provider
from memeforge.config import caption_provider_name, settings_from_config
from memeforge.errors import MemeError, RenderCancelled
from memeforge.models import RenderRequest, RenderResult, RenderSettings, Template
from memeforge.render.compositor import render
from memeforge.render.typography import FontProgram
from memeforge.template_loader import TemplateRegistry, load_registry

LOGGER = logging.getLogger("memeforge")


class MemeBackend(Protocol):
    def generate(self, request: RenderRequest) -> RenderResult: ...

    def list_templates(self, category: str | None = None) -> list[Template]: ...


class MemeService:
    """Resolves templates and assets for a request and hands them to the compositor.

    The registry, settings and parsed font are read-only once set up, so one service
    instance can serve concurrent requests from several threads.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        assets: AssetLoader,
        *,
        settings: RenderSettings | None = None,
        captions: CaptionProvider | None = None,
        font: FontProgram | None = None,
        font_path: Path | None = None,
    ) -> None:
        self.registry = registry
        self.assets = assets
        self.settings = settings or RenderSettings()
        self.captions = captions or NoCaptionProvider()
        self.font_path = font_path
        self._font = font
        self._font_lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> MemeService:
        templates_file = str(cfg.get("templates_file") or "")
        font_file = str(cfg.get("font_file") or "")
        return cls(
            load_registry(Path(templates_file) if templates_file else None),
            AssetLoader(Path(str(cfg.get("template_dir") or "./templates"))),
            settings=settings_from_config(cfg),
            captions=build_caption_provider(caption_provider_name(cfg)),
            font_path=Path(font_file) if font_file else None,
        )

    def font(self) -> FontProgram:
        if self._font is None:
            with self._font_lock:
                if self._font is None:
                    self._font = self.assets.load_font(self.font_path)
                    LOGGER.info("font loaded: %s", self._font.source)
        return self._font

    def list_templates(self, category: str | None = None) -> list[Template]:
        LOGGER.info("listing templates, category filter: %r", category or "")
        return self.registry.list(category)

    def generate(
        self,
        request: RenderRequest,
        *,
        cancel: threading.Event | None = None,
        deadline: float | None = None,
    ) -> RenderResult:
        """Render ``request``; ``deadline`` is a ``time.monotonic()`` timestamp."""
        LOGGER.info("processing meme generation for template: %r", request.template_id)
        if not request.template_id:
            return RenderResult.failure("template_id is required")

        template = self.registry.get(request.template_id)
        if template is None:
            return RenderResult.failure(f"Template '{request.template_id}' not found")

        try:
            _check_not_cancelled(cancel, deadline)
        except RenderCancelled as exc:
            LOGGER.info("template %r: %s", request.template_id, exc)
            return RenderResult.failure(f"Failed to generate meme: {exc}")

        generated: list[str] = []
        if request.use_generated_caption:
            generated = self._generate_captions(template)
            if not request.top_text and generated:
                request = dataclasses.replace(request, top_text=generated[0])

        try:
            base_image = self.assets.read_template_image(template.filename)
            font = self.font()
        except MemeError as exc:
            LOGGER.error("error generating meme: %s", exc)
            return RenderResult.failure(f"Failed to generate meme: {exc}")

        result = render(template, request, base_image, font, self.settings)
        if not result.ok:
            return RenderResult.failure(f"Failed to generate meme: {result.error_message}")
        result.generated_captions = generated
        return result

    def _generate_captions(self, template: Template) -> list[str]:
        # Captions are optional; a failing backend degrades to "no captions".
        try:
            return list(self.captions.captions(template))
        except Exception as exc:
            LOGGER.warning("caption provider %s failed for %r: %s", self.captions.id, template.template_id, exc)
            return []


def _check_not_cancelled(cancel: threading.Event | None, deadline: float | None) -> None:
    if cancel is not None and cancel.is_set():
        raise RenderCancelled("render cancelled before it started")
    if deadline is not None and time.monotonic() >= deadline:
        raise RenderCancelled("render cancelled before it started: deadline passed")
