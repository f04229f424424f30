"""Render registers carried through a Jinja2 context."""

from collections.abc import Collection
from typing import Any, Optional

from jinja2 import Template
from jinja2.runtime import Context

# Render variable that holds the registers mapping
REGISTERS_VAR = "_registers"

# Register holding the prefixed tag classes allowed to render
ENABLED_TAGS_REGISTER = "enabled_plugin_tags"


def get_registers(context: Context) -> dict[str, Any]:
    """Return the registers of a render context.

    A fresh empty dict is returned when the render was started without
    registers, so callers may read from it freely.
    """
    registers = context.get(REGISTERS_VAR)
    if registers is None:
        return {}
    return registers


def enabled_tags(context: Context) -> Optional[Collection[type]]:
    """Return the enabled tag set, or None if nothing is enabled."""
    return get_registers(context).get(ENABLED_TAGS_REGISTER)


def render_with_registers(template: Template, registers: Optional[dict] = None, **variables: Any) -> str:
    """Render a template with the given registers attached to its context."""
    variables[REGISTERS_VAR] = registers if registers is not None else {}
    return template.render(**variables)
