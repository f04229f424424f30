"""Plugin tags and their prefixed, gated subclasses."""

import logging
from typing import Any, Callable, Optional

from jinja2 import nodes
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context
from markupsafe import Markup

from plugspace.core.naming import prefixed_name, validate_prefix
from plugspace.core.registers import enabled_tags

logger = logging.getLogger(__name__)

Caller = Optional[Callable[[], str]]


class PluginTag(Extension):
    """Base class for tags defined by plugins.

    Subclasses implement ``render`` and may implement ``render_disabled``.
    Block tags (``block = True``) have a body closed by ``end<name>``; the
    body is rendered by calling ``caller()``. Inline tags get ``caller=None``.
    Arguments are comma separated expressions following the tag name.
    """

    tags: set[str] = set()
    block: bool = False

    def parse(self, parser: Parser) -> nodes.Node:
        token = next(parser.stream)
        name = token.value
        lineno = token.lineno

        arguments: list[nodes.Expr] = []
        while parser.stream.current.type != "block_end":
            if arguments:
                parser.stream.expect("comma")
            arguments.append(parser.parse_expression())

        call = self.call_method(
            "_render_tag",
            [nodes.ContextReference(), nodes.List(arguments)],
            lineno=lineno,
        )
        if self.block:
            body = parser.parse_statements((f"name:end{name}",), drop_needle=True)
            return nodes.CallBlock(call, [], [], body).set_lineno(lineno)
        return nodes.Output([call]).set_lineno(lineno)

    def _render_tag(self, context: Context, arguments: list[Any], caller: Caller = None) -> Markup:
        return Markup(self.render(context, arguments, caller))

    def render(self, context: Context, arguments: list[Any], caller: Caller) -> str:
        """Render the tag.

        Args:
            context: Current Jinja2 context
            arguments: Evaluated tag arguments
            caller: Renders the tag body (None for inline tags)

        Returns:
            Tag output
        """
        raise NotImplementedError


class TagSubclassMethods:
    """Mixed into every prefixed tag subclass."""

    prefix: str = ""
    tag_name: str = ""

    def _render_tag(self, context: Context, arguments: list[Any], caller: Caller = None) -> Markup:
        enabled_set = enabled_tags(context)
        enabled = enabled_set is not None and type(self) in enabled_set

        def render() -> str:
            if enabled:
                return self.render(context, arguments, caller)
            render_disabled = getattr(self, "render_disabled", None)
            if render_disabled is None:
                return ""
            return render_disabled(context, arguments, caller)

        if not enabled:
            logger.debug("Tag %s rendered disabled", prefixed_name(self.prefix, self.tag_name))
        return Markup(self.rendering_tag(self.prefix, enabled, context, render))

    def rendering_tag(self, prefix: str, enabled: bool, context: Context, render: Callable[[], str]) -> str:
        """Hook run around every prefixed tag render.

        Args:
            prefix: Prefix the tag was generated under
            enabled: Whether the tag is in the enabled tag set
            context: Current Jinja2 context
            render: Performs the enabled or disabled render

        Returns:
            Tag output
        """
        return render()


def prefixed_tag(tag_class: type[PluginTag], prefix: str, name: str) -> type[PluginTag]:
    """Generate the prefixed subclass of a tag class.

    The subclass is registered with Jinja2 under ``<prefix>_<name>``.

    Raises:
        TypeError: If tag_class is not a PluginTag subclass
        ValueError: If prefix or name is not an identifier
    """
    if not (isinstance(tag_class, type) and issubclass(tag_class, PluginTag)):
        raise TypeError(f"Tag class must subclass PluginTag, got {tag_class!r}")
    prefix = validate_prefix(prefix)
    if not isinstance(name, str) or not name.isidentifier():
        raise ValueError(f"Invalid tag name: {name!r}")

    subclass = type(
        f"{tag_class.__name__}__{prefixed_name(prefix, name)}",
        (TagSubclassMethods, tag_class),
        {
            "__module__": tag_class.__module__,
            "__doc__": tag_class.__doc__,
            "tags": {prefixed_name(prefix, name)},
            "prefix": prefix,
            "tag_name": name,
        },
    )
    logger.debug("Generated tag %s from %s", prefixed_name(prefix, name), tag_class.__name__)
    return subclass


def prefixed_tags(tags: Optional[dict[str, type[PluginTag]]], prefix: str) -> dict[str, type[PluginTag]]:
    """Map ``<prefix>_<name>`` to a prefixed subclass for every tag."""
    return {
        prefixed_name(prefix, name): prefixed_tag(tag_class, prefix, name)
        for name, tag_class in (tags or {}).items()
    }
