"""Tests for configuration."""

import pytest
from pydantic import ValidationError

from plugspace.config import Config


class TestConfig:
    """Tests for Config settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PLUGSPACE_PLUGINS", raising=False)
        monkeypatch.delenv("PLUGSPACE_ENABLED", raising=False)

        config = Config()

        assert config.autoescape is False
        assert config.plugins == {}
        assert config.enabled is None

    def test_reads_environment(self, monkeypatch):
        """Settings should be read from PLUGSPACE_ variables."""
        monkeypatch.setenv("PLUGSPACE_AUTOESCAPE", "true")
        monkeypatch.setenv("PLUGSPACE_PLUGINS", '{"txt": "plugspace.plugins.text:TextPlugin"}')
        monkeypatch.setenv("PLUGSPACE_ENABLED", '["txt"]')

        config = Config()

        assert config.autoescape is True
        assert config.plugins == {"txt": "plugspace.plugins.text:TextPlugin"}
        assert config.enabled == ["txt"]

    def test_rejects_invalid_plugin_prefix(self):
        with pytest.raises(ValidationError):
            Config(plugins={"bad prefix": "plugspace.plugins.text:TextPlugin"})

    def test_rejects_malformed_plugin_reference(self):
        with pytest.raises(ValidationError):
            Config(plugins={"txt": "plugspace.plugins.text.TextPlugin"})

    def test_rejects_invalid_enabled_prefix(self):
        with pytest.raises(ValidationError):
            Config(enabled=["ok", "1bad"])
