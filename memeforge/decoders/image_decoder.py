from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from memeforge.constants import OUTPUT_FORMATS
from memeforge.errors import EncodingFailure, ImageLoadFailure


def resolve_output_format(fmt: str) -> tuple[str, str]:
    """Map a configured format name to ``(pil_format, mime_type)``."""
    key = (fmt or "").strip().lower()
    if key not in OUTPUT_FORMATS:
        raise ValueError(f"output format must be jpeg/jpg or png, got: {fmt!r}")
    return OUTPUT_FORMATS[key]


def decode_image_bytes(data: bytes) -> Image.Image:
    if not data:
        raise ImageLoadFailure("failed to decode template image: no data")
    try:
        with Image.open(io.BytesIO(data)) as image:
            return ImageOps.exif_transpose(image).convert("RGB").copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageLoadFailure(f"failed to decode template image: {exc}") from exc


def encode_image(image: Image.Image, pil_format: str, quality: int) -> bytes:
    buffer = io.BytesIO()
    try:
        if pil_format == "JPEG":
            image.convert("RGB").save(buffer, format="JPEG", quality=max(1, min(100, quality)), optimize=True)
        else:
            image.save(buffer, format=pil_format, optimize=True)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodingFailure(f"failed to encode image: {exc}") from exc
    return buffer.getvalue()
