"""Reporting utilities for run settings."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Tuple

from jinja2 import Environment
from rich.table import Table

from .config import Settings

_SETTINGS_TEMPLATE = "{% for name, value in rows %}{{ name }} = {{ value }}\n{% endfor %}"


def _environment() -> Environment:
    return Environment(autoescape=False)


def format_value(value: Any) -> str:
    """Render one settings value as its token form."""

    if value is None:
        return "none"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(item) for item in value)
    return str(value)


def settings_rows(settings: Settings) -> List[Tuple[str, str]]:
    """Return ``(name, value)`` pairs in field declaration order."""

    return [(name, format_value(getattr(settings, name))) for name in settings.field_names]


def render_settings(settings: Settings) -> str:
    """Render one ``name = value`` line per field."""

    template = _environment().from_string(_SETTINGS_TEMPLATE)
    return template.render(rows=settings_rows(settings))


def settings_table(settings: Settings) -> Table:
    table = Table(title="Run settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings_rows(settings):
        table.add_row(name, value)
    return table


__all__ = ["format_value", "settings_rows", "render_settings", "settings_table"]
