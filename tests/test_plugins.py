"""Tests for the plugin base class, registry and bundled plugin."""

import pytest
from jinja2 import Environment

from plugspace.config import Config
from plugspace.core.registers import ENABLED_TAGS_REGISTER
from plugspace.plugins import Plugin, PluginRegistry, TextPlugin, load_plugin
from plugspace.plugins.text import Newline, Paragraph


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry().mount(TextPlugin(), "a").mount(TextPlugin(), "b")


class TestPlugin:
    """Tests for Plugin defaults."""

    def test_defaults(self):
        plugin = Plugin()

        assert plugin.config == {}
        assert plugin.prefixed_filter_module("p").filter_names() == []
        assert Plugin.prefixed_tags("p") == {}

    def test_keeps_config(self):
        assert Plugin({"key": "value"}).config == {"key": "value"}

    def test_text_plugin_prefixing(self):
        """TextPlugin exposes its filters and tags under the prefix."""
        namespace = TextPlugin().prefixed_filter_module("txt")
        tags = TextPlugin.prefixed_tags("txt")

        assert sorted(namespace.filter_names()) == ["txt_add_http", "txt_add_newline", "txt_remove_http"]
        assert issubclass(tags["txt_paragraph"], Paragraph)
        assert issubclass(tags["txt_newline"], Newline)


class TestPluginRegistry:
    """Tests for PluginRegistry."""

    def test_mount_rejects_duplicate_prefix(self, registry):
        with pytest.raises(ValueError):
            registry.mount(TextPlugin(), "a")

    def test_mount_rejects_invalid_prefix(self):
        with pytest.raises(ValueError):
            PluginRegistry().mount(TextPlugin(), "not valid")

    def test_install_registers_filters_and_tags(self, registry):
        environment = registry.install(Environment())

        assert "a_add_http" in environment.filters
        assert "b_remove_http" in environment.filters
        assert "add_http" not in environment.filters
        assert len(environment.extensions) == 4

    def test_registers_default_to_all_mounted(self, registry):
        registers = registry.registers()

        assert registers[ENABLED_TAGS_REGISTER] == set(registry.tag_classes().values())

    def test_enabled_unknown_prefix(self, registry):
        with pytest.raises(KeyError):
            registry.registers(["missing"])

    def test_render_enables_only_selected_plugins(self, registry):
        """Tags of plugins that are not enabled render their disabled fallback."""
        environment = registry.create_environment()
        source = (
            "{% a_paragraph %}{{ 'x.com' | a_add_http }}{% enda_paragraph %}"
            "{% b_paragraph %}{{ 'http://y.com' | b_remove_http }}{% endb_paragraph %}"
            "{% a_newline %}{% b_newline %}"
        )

        output = registry.render(environment, source, enabled=["a"])

        assert output == "<p>http://x.com</p>y.com<br />"

    def test_render_tag_argument(self, registry):
        environment = registry.create_environment()

        output = registry.render(environment, '{% a_paragraph "lead" %}Hi{% enda_paragraph %}')

        assert output == '<p class="lead">Hi</p>'

    def test_tag_argument_is_escaped(self, registry):
        """A tag argument cannot break out of the class attribute."""
        environment = registry.create_environment(Config(autoescape=True))

        output = registry.render(
            environment,
            "{% a_paragraph cls %}x{% enda_paragraph %}",
            cls='"><script>alert(1)</script>',
        )

        assert "<script>" not in output
        assert output == '<p class="&#34;&gt;&lt;script&gt;alert(1)&lt;/script&gt;">x</p>'

    def test_install_rejects_clashing_prefixed_names(self):
        """Two prefixes producing the same filter name cannot be installed together."""
        class Short:
            def b_c(self, input):
                return "short"

        class Long:
            def c(self, input):
                return "long"

        class ShortPlugin(Plugin):
            @classmethod
            def filter_modules(cls):
                return Short

        class LongPlugin(Plugin):
            @classmethod
            def filter_modules(cls):
                return Long

        registry = PluginRegistry().mount(ShortPlugin(), "a").mount(LongPlugin(), "a_b")

        with pytest.raises(ValueError, match="a_b_c"):
            registry.install(Environment())

    def test_render_with_variables(self, registry):
        environment = registry.create_environment()

        output = registry.render(environment, "{{ site | a_add_http }}", enabled=[], site="example.org")

        assert output == "http://example.org"

    def test_create_environment_uses_config(self, registry, tmp_path):
        (tmp_path / "page.html").write_text("{% a_newline %}", encoding="utf-8")
        config = Config(template_dir=tmp_path, autoescape=True, strict_undefined=True)

        environment = registry.create_environment(config)

        assert environment.autoescape is True
        assert environment.get_template("page.html").render(
            _registers=registry.registers(),
        ) == "<br />"

    def test_combine_registries(self, registry):
        other = PluginRegistry().mount(TextPlugin(), "c")

        combined = registry | other

        assert combined.prefixes == ["a", "b", "c"]
        assert registry.prefixes == ["a", "b"]

    def test_combine_rejects_clashing_prefixes(self, registry):
        with pytest.raises(ValueError):
            registry | PluginRegistry().mount(TextPlugin(), "b")


class TestLoadPlugin:
    """Tests for load_plugin."""

    def test_loads_plugin(self):
        plugin = load_plugin("plugspace.plugins.text:TextPlugin", {"x": 1})

        assert isinstance(plugin, TextPlugin)
        assert plugin.config == {"x": 1}

    @pytest.mark.parametrize("reference", ["plugspace.plugins.text", ":TextPlugin", "plugspace.plugins.text:"])
    def test_malformed_reference(self, reference):
        with pytest.raises(ValueError):
            load_plugin(reference)

    def test_not_a_plugin(self):
        with pytest.raises(ValueError):
            load_plugin("plugspace.config:Config")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_plugin("plugspace.does_not_exist:Plugin")

    def test_missing_class(self):
        with pytest.raises(AttributeError):
            load_plugin("plugspace.plugins.text:Missing")
