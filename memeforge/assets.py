from __future__ import annotations

import logging
from pathlib import Path

from memeforge.errors import FontLoadFailure, ImageLoadFailure
from memeforge.render.typography import FontProgram, find_system_font

LOGGER = logging.getLogger("memeforge.assets")


class AssetLoader:
    """Reads template images from ``template_dir`` and font programs from disk."""

    def __init__(self, template_dir: Path) -> None:
        self.template_dir = Path(template_dir)

    def template_path(self, filename: str) -> Path:
        root = self.template_dir.resolve(strict=False)
        path = (root / filename).resolve(strict=False)
        if path != root and root not in path.parents:
            raise ImageLoadFailure(f"template file escapes template directory: {filename}")
        return path

    def read_template_image(self, filename: str) -> bytes:
        path = self.template_path(filename)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ImageLoadFailure(f"failed to open template image: {exc}") from exc

    def read_font(self, font_path: Path) -> bytes:
        try:
            return Path(font_path).read_bytes()
        except OSError as exc:
            raise FontLoadFailure(f"failed to load font: {exc}") from exc

    def load_font(self, font_path: Path | None) -> FontProgram:
        """Parse the configured font, a system candidate, or Pillow's bundled default."""
        if font_path:
            return FontProgram.from_bytes(self.read_font(font_path), source=str(font_path))
        candidate = find_system_font()
        if candidate is not None:
            try:
                return FontProgram.from_bytes(self.read_font(candidate), source=str(candidate))
            except FontLoadFailure as exc:
                LOGGER.warning("system font %s unusable: %s", candidate, exc)
        LOGGER.info("no font file configured, using Pillow's default font")
        return FontProgram.builtin()
