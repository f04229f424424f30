"""Plugin system for plugspace."""

from plugspace.plugins.base import MountedPlugin, Plugin, PluginRegistry, load_plugin
from plugspace.plugins.text import TextPlugin

__all__ = ["MountedPlugin", "Plugin", "PluginRegistry", "load_plugin", "TextPlugin"]
