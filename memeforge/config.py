from __future__ import annotations

import copy
import logging
import os
import platform
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml
from PIL import ImageColor

from memeforge.constants import CAPTION_PROVIDERS, OUTPUT_FORMATS
from memeforge.models import RenderSettings

LOGGER = logging.getLogger("memeforge.config")

DEFAULT_CONFIG: dict[str, Any] = {
    "template_dir": "./templates",
    "templates_file": "",
    "font_file": "",
    "output_format": "jpeg",
    "quality": 90,
    "font_size": 36.0,
    "line_spacing": 1.5,
    "stroke_color": "#000000",
    "fill_color": "#FFFFFF",
    "unified_font_size": False,
    "enable_ai_caption": True,
    "caption_provider": "static",
}

_TRUE_VALUES = {"1", "t", "true", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "MEMEFORGE_TEMPLATE_DIR": ("template_dir", str),
    "MEMEFORGE_TEMPLATES_FILE": ("templates_file", str),
    "MEMEFORGE_FONT_FILE": ("font_file", str),
    "MEMEFORGE_OUTPUT_FORMAT": ("output_format", str),
    "MEMEFORGE_IMAGE_QUALITY": ("quality", int),
    "MEMEFORGE_FONT_SIZE": ("font_size", float),
    "MEMEFORGE_LINE_SPACING": ("line_spacing", float),
    "MEMEFORGE_UNIFIED_FONT_SIZE": ("unified_font_size", _parse_bool),
    "MEMEFORGE_ENABLE_AI_CAPTION": ("enable_ai_caption", _parse_bool),
    "MEMEFORGE_CAPTION_PROVIDER": ("caption_provider", str),
}


def get_user_data_dir() -> Path:
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "memeforge"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "memeforge"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "memeforge"
    return Path.home() / ".config" / "memeforge"


def get_config_path() -> Path:
    return get_user_data_dir() / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(cfg: dict[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    merged = dict(cfg)
    for env_key, (cfg_key, parse) in ENV_OVERRIDES.items():
        raw = env.get(env_key, "")
        if raw == "":
            continue
        try:
            merged[cfg_key] = parse(raw)
        except ValueError:
            LOGGER.warning("Invalid value for %s, using %r", env_key, merged.get(cfg_key))
    return merged


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if cfg_path.exists():
        loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
        if not isinstance(loaded, dict):
            LOGGER.warning("config file %s is not a mapping, ignoring it", cfg_path)
            loaded = {}
        cfg = _deep_merge(cfg, loaded)
    cfg = apply_env_overrides(cfg, environ)
    LOGGER.debug(
        "config loaded: template_dir=%s font_file=%s ai_caption=%s",
        cfg["template_dir"],
        cfg["font_file"] or "<auto>",
        cfg["enable_ai_caption"],
    )
    return cfg


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def _clamp_int(value: Any, minimum: int, maximum: int, fallback: int) -> int:
    try:
        parsed = int(float(value))
    except (TypeError, ValueError):
        parsed = fallback
    return max(minimum, min(maximum, parsed))


def _clamp_float(value: Any, minimum: float, maximum: float, fallback: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = fallback
    return max(minimum, min(maximum, parsed))


def _safe_color(value: Any, default: str) -> str:
    text = str(value or "").strip()
    if not text:
        return default
    try:
        ImageColor.getrgb(text)
    except ValueError:
        LOGGER.warning("invalid color %r, using %s", text, default)
        return default
    return text


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        try:
            return _parse_bool(value)
        except ValueError:
            return False
    return bool(value)


def settings_from_config(cfg: Mapping[str, Any]) -> RenderSettings:
    output_format = str(cfg.get("output_format") or "jpeg").lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"output format must be jpeg/jpg or png, got: {output_format!r}")
    return RenderSettings(
        output_format=output_format,
        quality=_clamp_int(cfg.get("quality"), 1, 100, 90),
        font_size=_clamp_float(cfg.get("font_size"), 4.0, 512.0, 36.0),
        line_spacing=_clamp_float(cfg.get("line_spacing"), 0.5, 5.0, 1.5),
        stroke_color=_safe_color(cfg.get("stroke_color"), "#000000"),
        fill_color=_safe_color(cfg.get("fill_color"), "#FFFFFF"),
        unified_font_size=_as_bool(cfg.get("unified_font_size", False)),
    )


def caption_provider_name(cfg: Mapping[str, Any]) -> str:
    if not _as_bool(cfg.get("enable_ai_caption", False)):
        return "none"
    name = str(cfg.get("caption_provider") or "static").lower()
    return name if name in CAPTION_PROVIDERS else "none"
