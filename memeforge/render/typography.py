from __future__ import annotations

import io
import math
import platform
from pathlib import Path
from typing import Callable

from PIL import ImageFont

from memeforge.constants import WRAP_MARGIN_PX
from memeforge.errors import FontLoadFailure
from memeforge.models import Line

MeasureFn = Callable[[str], int]


def _system_font_candidates() -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        return [
            Path(r"C:\Windows\Fonts\impact.ttf"),
            Path(r"C:\Windows\Fonts\arialbd.ttf"),
            Path(r"C:\Windows\Fonts\arial.ttf"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Supplemental/Impact.ttf"),
            Path("/Library/Fonts/Impact.ttf"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/msttcorefonts/Impact.ttf"),
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    ]


class FontProgram:
    """A parsed font shared read-only across renders; sized fonts are cached."""

    def __init__(self, data: bytes | None, source: str = "<bytes>") -> None:
        self.data = data
        self.source = source
        self._sizes: dict[float, ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        # Parse once up front so a broken font fails at load time, not mid-render.
        self.at_size(12)

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "<bytes>") -> FontProgram:
        if not data:
            raise FontLoadFailure(f"failed to parse font: {source} is empty")
        return cls(data, source=source)

    @classmethod
    def builtin(cls) -> FontProgram:
        return cls(None, source="<pillow default>")

    def at_size(self, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        key = float(size)
        font = self._sizes.get(key)
        if font is None:
            font = self._sizes.setdefault(key, self._load(key))
        return font

    def _load(self, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if self.data is None:
            return ImageFont.load_default(size=size)
        try:
            return ImageFont.truetype(io.BytesIO(self.data), size=size)
        except (OSError, ValueError) as exc:
            raise FontLoadFailure(f"failed to parse font: {self.source}: {exc}") from exc


def find_system_font() -> Path | None:
    """Return the first system font candidate that exists."""
    for candidate in _system_font_candidates():
        if candidate.exists():
            return candidate
    return None


def text_width(font: ImageFont.FreeTypeFont | ImageFont.ImageFont, text: str) -> int:
    """Advance width of ``text`` rounded up to whole pixels."""
    if not text:
        return 0
    return int(math.ceil(font.getlength(text)))


def make_measure(font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> MeasureFn:
    def measure(text: str) -> int:
        return text_width(font, text)

    return measure


def wrap_lines(
    text: str,
    max_width: int,
    measure: MeasureFn,
    margin: int = WRAP_MARGIN_PX,
) -> list[Line]:
    """Greedily pack whitespace-separated words into lines narrower than ``max_width - margin``.

    A word that is wider than the budget on its own is never split; it gets a line to itself.
    """
    tokens = (text or "").split()
    if not tokens:
        return []

    budget = max_width - margin
    lines: list[Line] = []
    current = ""
    current_width = 0
    for token in tokens:
        candidate = f"{current} {token}" if current else token
        width = measure(candidate)
        if width < budget:
            current = candidate
            current_width = width
            continue
        if current:
            lines.append(Line(current, current_width))
        current = token
        current_width = measure(token)
    if current:
        lines.append(Line(current, current_width))
    return lines
