import logging
from pathlib import Path

import pytest

from memeforge.config import (
    DEFAULT_CONFIG,
    caption_provider_name,
    load_config,
    settings_from_config,
    write_default_config,
)


def test_load_config_defaults_when_file_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.yaml", environ={})

    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_load_config_merges_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("quality: 75\nfont_file: fonts/impact.ttf\n", encoding="utf-8")

    cfg = load_config(path, environ={})

    assert cfg["quality"] == 75
    assert cfg["font_file"] == "fonts/impact.ttf"
    assert cfg["line_spacing"] == DEFAULT_CONFIG["line_spacing"]


def test_env_overrides_file_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("quality: 75\n", encoding="utf-8")

    cfg = load_config(
        path,
        environ={
            "MEMEFORGE_IMAGE_QUALITY": "60",
            "MEMEFORGE_FONT_SIZE": "24.5",
            "MEMEFORGE_UNIFIED_FONT_SIZE": "true",
            "MEMEFORGE_TEMPLATE_DIR": "/srv/templates",
        },
    )

    assert cfg["quality"] == 60
    assert cfg["font_size"] == 24.5
    assert cfg["unified_font_size"] is True
    assert cfg["template_dir"] == "/srv/templates"


def test_invalid_env_value_keeps_previous(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="memeforge.config"):
        cfg = load_config(tmp_path / "missing.yaml", environ={"MEMEFORGE_IMAGE_QUALITY": "high"})

    assert cfg["quality"] == DEFAULT_CONFIG["quality"]
    assert "MEMEFORGE_IMAGE_QUALITY" in caplog.text


def test_settings_from_config_clamps_values() -> None:
    settings = settings_from_config(
        {"quality": 500, "font_size": "huge", "line_spacing": 0.1, "stroke_color": "not-a-color"}
    )

    assert settings.quality == 100
    assert settings.font_size == 36.0
    assert settings.line_spacing == 0.5
    assert settings.stroke_color == "#000000"
    assert settings.output_format == "jpeg"
    assert settings_from_config({"quality": 0}).quality == 1


def test_settings_from_config_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        settings_from_config({"output_format": "gif"})


def test_caption_provider_name_respects_feature_flag() -> None:
    assert caption_provider_name({"enable_ai_caption": False, "caption_provider": "static"}) == "none"
    assert caption_provider_name({"enable_ai_caption": True, "caption_provider": "static"}) == "static"
    assert caption_provider_name({"enable_ai_caption": "yes", "caption_provider": "other"}) == "none"


def test_write_default_config_respects_force(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.yaml"

    assert write_default_config(path) == path
    path.write_text("quality: 10\n", encoding="utf-8")
    write_default_config(path)
    assert load_config(path, environ={})["quality"] == 10

    write_default_config(path, force=True)
    assert load_config(path, environ={})["quality"] == DEFAULT_CONFIG["quality"]
