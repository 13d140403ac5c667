"""Tests for configuration system.

Tests the ConfigBuilder class and configuration loading mechanism,
including optional YAML loading, defaults, environment variable resolution,
and nested access.
"""

import pytest

from flyouts.base.errors import ConfigurationError
from flyouts.registry import FlyoutConfig
from flyouts.utils.config import ConfigBuilder, get_config_value, load_config, reset_config


class TestConfigBuilder:
    """Test ConfigBuilder class."""

    def test_defaults_without_file(self):
        """Test that built-in defaults apply when no flyouts.yml exists."""
        builder = ConfigBuilder()

        assert builder.config_path is None
        assert builder.get("flyouts.default_capability") == "manage_options"
        assert builder.get("flyouts.search.page_size") == 20

    def test_file_merges_over_defaults(self, tmp_path):
        """Test that a settings file overrides only the keys it names."""
        config_file = tmp_path / "settings.yml"
        config_file.write_text(
            """
flyouts:
  default_width: large
  search:
    page_size: 50
"""
        )

        builder = ConfigBuilder(str(config_file))

        assert builder.get("flyouts.default_width") == "large"
        assert builder.get("flyouts.search.page_size") == 50
        assert builder.get("flyouts.default_capability") == "manage_options"
        assert builder.get("logging.logging_colors.registry") == "cyan"

    def test_environment_variable_resolution(self, tmp_path, monkeypatch):
        """Test that environment variables are resolved in config."""
        monkeypatch.setenv("SHOP_CAPABILITY", "edit_shop")
        monkeypatch.delenv("MISSING_WIDTH", raising=False)

        config_file = tmp_path / "settings.yml"
        config_file.write_text(
            """
flyouts:
  default_capability: ${SHOP_CAPABILITY}
  default_width: ${MISSING_WIDTH:-small}
"""
        )

        builder = ConfigBuilder(str(config_file))

        assert builder.get("flyouts.default_capability") == "edit_shop"
        assert builder.get("flyouts.default_width") == "small"

    def test_missing_path_uses_default(self):
        """Test that missing nested keys return the default."""
        builder = ConfigBuilder()
        assert builder.get("flyouts.nope.deeper", "fallback") == "fallback"

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigBuilder(str(tmp_path / "missing.yml"))

    def test_non_mapping_file_raises(self, tmp_path):
        config_file = tmp_path / "settings.yml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="dictionary"):
            ConfigBuilder(str(config_file))

    def test_invalid_yaml_raises(self, tmp_path):
        config_file = tmp_path / "settings.yml"
        config_file.write_text("flyouts: [unclosed\n")
        with pytest.raises(ConfigurationError, match="parsing YAML"):
            ConfigBuilder(str(config_file))

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yml"
        config_file.write_text("")
        assert ConfigBuilder(str(config_file)).get("flyouts.default_width") == "medium"


class TestGlobalAccess:
    """Test get_config_value and the cached default configuration."""

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("flyouts:\n  triggers:\n    button_text: Manage\n")
        monkeypatch.setenv("FLYOUTS_CONFIG", str(config_file))
        reset_config()

        assert get_config_value("flyouts.triggers.button_text") == "Manage"

    def test_cwd_file_is_picked_up(self, tmp_path):
        (tmp_path / "flyouts.yml").write_text("flyouts:\n  default_width: full\n")
        reset_config()

        assert get_config_value("flyouts.default_width") == "full"
        assert FlyoutConfig(fields={}).width == "full"

    def test_explicit_config_path(self, tmp_path):
        config_file = tmp_path / "other.yml"
        config_file.write_text("flyouts:\n  default_capability: edit_posts\n")

        assert get_config_value("flyouts.default_capability", config_path=str(config_file)) == "edit_posts"
        assert get_config_value("flyouts.default_capability") == "manage_options"

    def test_empty_path_raises(self):
        with pytest.raises(ValueError):
            get_config_value("")

    def test_load_config_returns_a_copy(self):
        config = load_config()
        config["flyouts"]["default_width"] = "tiny"
        assert get_config_value("flyouts.default_width") == "medium"
