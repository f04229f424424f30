"""Pytest configuration and fixtures."""

from types import ModuleType

import pytest
from jinja2 import Environment

from plugspace.core.tags import PluginTag
from plugspace.plugins.base import Plugin


class HttpFilters:
    def add_http(self, input):
        if input.startswith("http://"):
            return input
        return f"http://{input}"


class NewlineFilters:
    def add_newline(self, input):
        return f"{input}\n"


class StripFilters:
    def remove_http(self, input):
        return input.replace("http://", "")


class ContextFilters:
    def greet(self, input):
        return f"{self.context.get('greeting', 'Hello')}, {input}"


def _build_shout_module() -> ModuleType:
    module = ModuleType("shout_filters")

    def shout(input):
        return input.upper()

    def _whisper(input):
        return input.lower()

    shout.__module__ = module.__name__
    _whisper.__module__ = module.__name__
    module.shout = shout
    module._whisper = _whisper
    return module


shout_filters = _build_shout_module()


class Paragraph(PluginTag):
    tags = {"paragraph"}
    block = True

    def render(self, context, arguments, caller):
        return f"<p>{caller()}</p>"

    def render_disabled(self, context, arguments, caller):
        return caller()


class Newline(PluginTag):
    tags = {"newline"}

    def render(self, context, arguments, caller):
        return "<br />"


class PluginWithFilter(Plugin):
    name = "with_filter"

    @classmethod
    def filter_modules(cls):
        return HttpFilters


class PluginWithManyFilterModules(Plugin):
    name = "with_many_filter_modules"

    @classmethod
    def filter_modules(cls):
        return [NewlineFilters, StripFilters]


class PluginWithContextFilter(Plugin):
    name = "with_context_filter"

    @classmethod
    def filter_modules(cls):
        return (ContextFilters, shout_filters)


class PluginWithTags(Plugin):
    name = "with_tags"

    @classmethod
    def tags(cls):
        return {"paragraph": Paragraph, "newline": Newline}


@pytest.fixture
def environment() -> Environment:
    """Return a plain Jinja2 environment."""
    return Environment()


@pytest.fixture
def plugin_with_filter() -> PluginWithFilter:
    return PluginWithFilter({})


@pytest.fixture
def plugin_with_many_filter_modules() -> PluginWithManyFilterModules:
    return PluginWithManyFilterModules({})


@pytest.fixture
def plugin_with_context_filter() -> PluginWithContextFilter:
    return PluginWithContextFilter()


@pytest.fixture
def plugin_with_tags() -> type[PluginWithTags]:
    return PluginWithTags


@pytest.fixture
def tag_template_source() -> str:
    """Return a template using one block and one inline prefixed tag."""
    return (
        "{% prefix_paragraph %}Some Text{% endprefix_paragraph %}\n"
        "Some Text{% prefix_newline %}"
    )
