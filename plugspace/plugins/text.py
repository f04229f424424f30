"""Text plugin with link and markup helpers."""

from typing import Any

from jinja2.runtime import Context
from markupsafe import escape

from plugspace.core.tags import Caller, PluginTag
from plugspace.plugins.base import Plugin


class LinkFilters:
    """Filters for URL-ish strings."""

    def add_http(self, input: str) -> str:
        if input.startswith("http://"):
            return input
        return f"http://{input}"

    def remove_http(self, input: str) -> str:
        return input.removeprefix("http://")


class LineFilters:
    """Filters for line handling."""

    def add_newline(self, input: str) -> str:
        return f"{input}\n"


class Paragraph(PluginTag):
    """Wrap the body in a paragraph; renders the bare body when disabled."""

    tags = {"paragraph"}
    block = True

    def render(self, context: Context, arguments: list[Any], caller: Caller) -> str:
        body = caller()
        if arguments:
            return f'<p class="{escape(arguments[0])}">{body}</p>'
        return f"<p>{body}</p>"

    def render_disabled(self, context: Context, arguments: list[Any], caller: Caller) -> str:
        return caller()


class Newline(PluginTag):
    """Emit a line break."""

    tags = {"newline"}

    def render(self, context: Context, arguments: list[Any], caller: Caller) -> str:
        return "<br />"


class TextPlugin(Plugin):
    """Plugin bundling link filters and paragraph/newline tags."""

    name = "text"
    description = "Link filters and simple markup tags"

    @classmethod
    def filter_modules(cls):
        return [LinkFilters, LineFilters]

    @classmethod
    def tags(cls):
        return {"paragraph": Paragraph, "newline": Newline}
