"""Plugspace - prefixed namespaces for Jinja2 template plugins."""

__version__ = "0.1.0"
__author__ = "plugspace"

from plugspace.config import Config
from plugspace.core.filters import prefixed_filter_module
from plugspace.core.tags import PluginTag, prefixed_tags
from plugspace.plugins.base import Plugin, PluginRegistry

__all__ = [
    "__version__",
    "Config",
    "prefixed_filter_module",
    "PluginTag",
    "prefixed_tags",
    "Plugin",
    "PluginRegistry",
]
