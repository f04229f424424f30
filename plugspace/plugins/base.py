"""Base plugin interface."""

import importlib
import logging
from types import ModuleType
from typing import Any, Iterable, Optional, Union

from jinja2 import BaseLoader, Environment, FileSystemLoader, StrictUndefined, Undefined

from plugspace.config import Config
from plugspace.core.filters import PrefixedFilterModule, compose_filter_modules, prefixed_filter_module
from plugspace.core.naming import validate_prefix
from plugspace.core.registers import ENABLED_TAGS_REGISTER, render_with_registers
from plugspace.core.tags import PluginTag, prefixed_tags

logger = logging.getLogger(__name__)


class Plugin:
    """Base class for plugins providing template filters and tags."""

    name: str = "base_plugin"
    description: str = "Base plugin class"

    def __init__(self, config: Optional[dict[str, Any]] = None):
        self.config = config or {}

    @classmethod
    def filter_modules(cls) -> Union[None, type, ModuleType, Iterable[Union[type, ModuleType]]]:
        """Filter modules of this plugin: None, one module, or several."""
        return None

    @classmethod
    def tags(cls) -> dict[str, type[PluginTag]]:
        """Tag classes of this plugin, keyed by unprefixed tag name."""
        return {}

    def prefixed_filter_module(self, prefix: str) -> type[PrefixedFilterModule]:
        """Return a namespace exposing this plugin's filters as ``<prefix>_<filter>``."""
        return prefixed_filter_module(self.filter_modules(), prefix)

    @classmethod
    def prefixed_tags(cls, prefix: str) -> dict[str, type[PluginTag]]:
        """Return ``<prefix>_<tag>`` mapped to prefixed subclasses of this plugin's tags."""
        return prefixed_tags(cls.tags(), prefix)


class MountedPlugin:
    """A plugin mounted under a prefix, with its generated filters and tags."""

    def __init__(self, plugin: Plugin, prefix: str):
        self.plugin = plugin
        self.prefix = prefix
        self.filter_module = plugin.prefixed_filter_module(prefix)
        self.tags = plugin.prefixed_tags(prefix)


class PluginRegistry:
    """Mounts plugins under prefixes and installs them into Jinja2 environments."""

    def __init__(self):
        self.mounts: dict[str, MountedPlugin] = {}

    def mount(self, plugin: Plugin, prefix: str) -> "PluginRegistry":
        """Mount a plugin under a prefix.

        Args:
            plugin: Plugin instance to mount
            prefix: Prefix for its filters and tags

        Returns:
            Self for chaining

        Raises:
            ValueError: If the prefix is invalid or already used
        """
        validate_prefix(prefix)
        if prefix in self.mounts:
            raise ValueError(f"Prefix {prefix!r} is already mounted ({self.mounts[prefix].plugin.name})")
        self.mounts[prefix] = MountedPlugin(plugin, prefix)
        logger.debug("Mounted plugin %s under prefix %s", plugin.name, prefix)
        return self

    @property
    def prefixes(self) -> list[str]:
        return list(self.mounts)

    def strainer(self) -> PrefixedFilterModule:
        """Compose the filter namespaces of every mounted plugin."""
        return compose_filter_modules(*(mounted.filter_module for mounted in self.mounts.values()))

    def tag_classes(self) -> dict[str, type[PluginTag]]:
        """All prefixed tags of every mounted plugin."""
        tags: dict[str, type[PluginTag]] = {}
        for mounted in self.mounts.values():
            tags.update(mounted.tags)
        return tags

    def install(self, environment: Environment) -> Environment:
        """Register all prefixed filters and tags on an environment.

        Raises:
            ValueError: If two mounted plugins produce the same prefixed name
        """
        self._check_name_clashes()
        filters = self.strainer().filters()
        tag_classes = self.tag_classes()
        environment.filters.update(filters)
        for tag_class in tag_classes.values():
            environment.add_extension(tag_class)
        logger.debug(
            "Installed %d filters and %d tags from %d plugins",
            len(filters),
            len(tag_classes),
            len(self.mounts),
        )
        return environment

    def _check_name_clashes(self) -> None:
        # Prefix "a" with filter "b_c" and prefix "a_b" with filter "c" both give "a_b_c"
        filter_owners: dict[str, str] = {}
        tag_owners: dict[str, str] = {}
        for prefix, mounted in self.mounts.items():
            for owners, names in (
                (filter_owners, mounted.filter_module.filter_names()),
                (tag_owners, mounted.tags),
            ):
                for name in names:
                    if name in owners:
                        raise ValueError(
                            f"{name!r} is produced by both prefix {owners[name]!r} and prefix {prefix!r}"
                        )
                    owners[name] = prefix

    def enabled_tag_classes(self, prefixes: Iterable[str]) -> set[type[PluginTag]]:
        """Return the prefixed tag classes of the given plugins.

        Raises:
            KeyError: If a prefix is not mounted
        """
        enabled: set[type[PluginTag]] = set()
        for prefix in prefixes:
            if prefix not in self.mounts:
                raise KeyError(f"No plugin mounted under prefix {prefix!r}")
            enabled.update(self.mounts[prefix].tags.values())
        return enabled

    def registers(self, enabled: Optional[Iterable[str]] = None) -> dict[str, Any]:
        """Build render registers enabling the tags of the given prefixes.

        Every mounted plugin is enabled when enabled is None.
        """
        prefixes = self.prefixes if enabled is None else list(enabled)
        return {ENABLED_TAGS_REGISTER: self.enabled_tag_classes(prefixes)}

    def create_environment(self, config: Optional[Config] = None) -> Environment:
        """Create a Jinja2 environment from config with every plugin installed."""
        config = config or Config()
        loader: Optional[BaseLoader] = None
        if config.template_dir is not None:
            loader = FileSystemLoader(str(config.template_dir))
        environment = Environment(
            loader=loader,
            autoescape=config.autoescape,
            undefined=StrictUndefined if config.strict_undefined else Undefined,
            trim_blocks=config.trim_blocks,
        )
        return self.install(environment)

    def render(
        self,
        environment: Environment,
        source: str,
        enabled: Optional[Iterable[str]] = None,
        **variables: Any,
    ) -> str:
        """Render template source with the tags of the enabled plugins turned on."""
        template = environment.from_string(source)
        return render_with_registers(template, self.registers(enabled), **variables)

    def __or__(self, other: "PluginRegistry") -> "PluginRegistry":
        """Combine two registries."""
        clashes = set(self.mounts) & set(other.mounts)
        if clashes:
            raise ValueError(f"Prefixes mounted in both registries: {', '.join(sorted(clashes))}")
        combined = PluginRegistry()
        combined.mounts = {**self.mounts, **other.mounts}
        return combined


def load_plugin(reference: str, config: Optional[dict[str, Any]] = None) -> Plugin:
    """Instantiate a plugin from a ``package.module:ClassName`` reference.

    Raises:
        ValueError: If the reference is malformed or not a Plugin subclass
        ImportError: If the module cannot be imported
        AttributeError: If the class does not exist
    """
    module_name, sep, class_name = reference.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Plugin reference must look like 'module:ClassName', got {reference!r}")

    module = importlib.import_module(module_name)
    plugin_class = getattr(module, class_name)
    if not (isinstance(plugin_class, type) and issubclass(plugin_class, Plugin)):
        raise ValueError(f"{reference} is not a Plugin subclass")
    return plugin_class(config)
