from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

import yaml

from memeforge.errors import TemplateNotFound
from memeforge.models import Template

BUILTIN_TEMPLATES_RESOURCE = "builtin.yaml"


class TemplateRegistry:
    """Read-only id -> Template table, built once and shared by every render."""

    def __init__(self, templates: Iterable[Template] | Mapping[str, Template]) -> None:
        if isinstance(templates, Mapping):
            table = dict(templates)
        else:
            table = {}
            for template in templates:
                if template.template_id in table:
                    raise ValueError(f"duplicate template id: {template.template_id}")
                table[template.template_id] = template
        self._templates: Mapping[str, Template] = MappingProxyType(table)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def get(self, template_id: str) -> Template | None:
        return self._templates.get(template_id)

    def lookup(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        return template

    def list(self, category: str | None = None) -> list[Template]:
        # Callers must not rely on the order.
        if not category:
            return list(self._templates.values())
        return [tpl for tpl in self._templates.values() if tpl.category == category]


def _parse_text(text: str, suffix: str) -> Any:
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _load_file(path: Path) -> dict[str, Any]:
    data = _parse_text(path.read_text(encoding="utf-8"), path.suffix.lower())
    if not isinstance(data, dict):
        raise ValueError(f"template file is not a dict: {path}")
    return data


def _load_builtin() -> dict[str, Any]:
    resource = resources.files("memeforge.templates") / BUILTIN_TEMPLATES_RESOURCE
    data = yaml.safe_load(resource.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("built-in template table is not a dict")
    return data


def normalize_template_dict(data: dict[str, Any]) -> Template:
    template_id = str(data.get("id") or data.get("template_id") or "").strip()
    if not template_id:
        raise ValueError(f"template entry has no id: {data!r}")
    try:
        count = int(data.get("text_field_count") or 0)
    except (TypeError, ValueError):
        count = 0
    name = str(data.get("name") or template_id.replace("-", " ").title())
    category = str(data.get("category") or "classic")
    filename = str(data.get("filename") or f"{template_id}.jpg")
    return Template(
        template_id=template_id,
        name=name,
        text_field_count=max(0, count),
        category=category,
        filename=filename,
    )


def _templates_from_payload(payload: dict[str, Any]) -> list[Template]:
    entries = payload.get("templates") or []
    if not isinstance(entries, list):
        raise ValueError("'templates' must be a list")
    return [normalize_template_dict(entry) for entry in entries if isinstance(entry, dict)]


def load_registry(path: Path | None = None) -> TemplateRegistry:
    """Build the registry from ``path`` (YAML or JSON) or from the built-in table."""
    raw = _load_file(path) if path is not None else _load_builtin()
    return TemplateRegistry(_templates_from_payload(raw))
