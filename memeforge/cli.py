from __future__ import annotations

import base64
import json
import logging
import time
from pathlib import Path

import typer

from memeforge.config import load_config, write_default_config
from memeforge.models import RenderRequest
from memeforge.service import MemeBackend, MemeService

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Meme composition CLI.")
LOGGER = logging.getLogger("memeforge")

_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png"}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_service(config_path: Path | None, output_format: str | None, quality: int | None) -> MemeBackend:
    cfg = load_config(config_path)
    if output_format:
        cfg["output_format"] = output_format
    if quality is not None:
        cfg["quality"] = quality
    try:
        return MemeService.from_config(cfg)
    except (OSError, ValueError) as exc:
        typer.secho(f"Configuration error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def render(
    template_id: str = typer.Argument(..., help="Template id, see `memeforge templates`."),
    top: str = typer.Option("", "--top", help="Top text."),
    bottom: str = typer.Option("", "--bottom", help="Bottom text."),
    text: list[str] = typer.Option([], "--text", help="Additional text field (repeatable)."),
    caption: bool = typer.Option(False, "--caption/--no-caption", help="Fill empty top text with a generated caption."),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: <template>.<ext>)."),
    as_base64: bool = typer.Option(False, "--base64", help="Print the image as base64 instead of writing a file."),
    output_format: str | None = typer.Option(None, "--format", help="Output format: jpeg|png"),
    quality: int | None = typer.Option(None, "--quality", min=1, max=100),
    config: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config YAML file."),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Render a meme from a template and caller text."""
    _setup_logging(log_level)
    service = _build_service(config, output_format, quality)
    request = RenderRequest(
        template_id=template_id,
        top_text=top,
        bottom_text=bottom,
        additional_text=list(text),
        use_generated_caption=caption,
    )

    t0 = time.perf_counter()
    result = service.generate(request)
    if not result.ok:
        typer.secho(result.error_message, err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    for generated in result.generated_captions:
        LOGGER.info("generated caption: %s", generated)
    if as_base64:
        typer.echo(base64.b64encode(result.image_bytes).decode("ascii"))
        return

    target = out or Path(f"{template_id}.{_EXTENSIONS.get(result.mime_type, 'img')}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.image_bytes)
    LOGGER.info("OK   %s -> %s  (%.2fs)", template_id, target, time.perf_counter() - t0)
    typer.echo(str(target))


@app.command("templates")
def list_templates(
    category: str = typer.Option("", "--category", help="Only list templates of this category."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON."),
    config: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config YAML file."),
) -> None:
    service = _build_service(config, None, None)
    templates = sorted(service.list_templates(category), key=lambda tpl: tpl.template_id)
    if as_json:
        typer.echo(json.dumps([tpl.to_dict() for tpl in templates], ensure_ascii=False, indent=2))
        return
    for tpl in templates:
        typer.echo(f"{tpl.template_id}\t{tpl.category}\t{tpl.text_field_count}\t{tpl.name}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
    path: Path | None = typer.Option(None, "--path", help="Config file location."),
) -> None:
    written = write_default_config(path, force=force)
    typer.echo(f"Config initialized: {written}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
