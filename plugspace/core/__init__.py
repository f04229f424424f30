"""Core prefixing functionality."""

from plugspace.core.filters import (
    FilterPassthrough,
    PrefixedFilterModule,
    compose_filter_modules,
    prefixed_filter_module,
)
from plugspace.core.naming import prefixed_name, validate_prefix
from plugspace.core.registers import (
    ENABLED_TAGS_REGISTER,
    REGISTERS_VAR,
    get_registers,
    render_with_registers,
)
from plugspace.core.tags import PluginTag, TagSubclassMethods, prefixed_tag, prefixed_tags

__all__ = [
    "FilterPassthrough",
    "PrefixedFilterModule",
    "compose_filter_modules",
    "prefixed_filter_module",
    "prefixed_name",
    "validate_prefix",
    "ENABLED_TAGS_REGISTER",
    "REGISTERS_VAR",
    "get_registers",
    "render_with_registers",
    "PluginTag",
    "TagSubclassMethods",
    "prefixed_tag",
    "prefixed_tags",
]
