"""
Configuration System

YAML-backed settings for the flyout registry. Features:
- Optional single-file YAML loading (``FLYOUTS_CONFIG`` or ``./flyouts.yml``)
- Built-in defaults merged underneath whatever the file provides
- Environment variable resolution (``${VAR}``, ``${VAR:-default}``, ``$VAR``)
- Dot-path access via get_config_value()

Unlike a service configuration, flyout settings are all optional: a host that
never writes a config file gets the defaults below.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from flyouts.base.errors import ConfigurationError

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

DEFAULT_CONFIG_FILENAME = "flyouts.yml"
CONFIG_ENV_VAR = "FLYOUTS_CONFIG"

DEFAULTS: dict[str, Any] = {
    "flyouts": {
        "default_capability": "manage_options",
        "default_width": "medium",
        "search": {
            "page_size": 20,
        },
        "triggers": {
            "button_text": "Open",
        },
    },
    "logging": {
        "rich_tracebacks": True,
        "show_traceback_locals": False,
        "show_full_paths": False,
        "logging_colors": {
            "registry": "cyan",
            "manager": "blue",
            "functions": "magenta",
            "search": "green",
            "endpoints": "yellow",
        },
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into mappings."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigBuilder:
    """
    Configuration builder for flyout settings.

    Features:
    - Optional YAML loading with validation and error handling
    - Environment variable resolution
    - Defaults always present so lookups never need to guard against
      a missing file
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to a YAML settings file. If None, looks for
                ``flyouts.yml`` in the current directory and falls back to
                built-in defaults when it is absent.

        Raises:
            ConfigurationError: If an explicit config_path does not exist or
                the file is not a mapping.
        """
        if config_path is None:
            cwd_config = Path.cwd() / DEFAULT_CONFIG_FILENAME
            self.config_path = cwd_config if cwd_config.exists() else None
        else:
            self.config_path = Path(config_path)
            if not self.config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        self.raw_config = self._load_config()

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)

            if config is None:
                logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            if not isinstance(config, dict):
                error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)

            logger.debug(f"Loaded configuration from {file_path}")
            return config
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data.

        Supports both simple and bash-style default value syntax:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default_value} - with default value
        - $VAR_NAME - simple substitution without braces
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.info(f"Environment variable '{var_name}' not found, keeping original value")
                    return match.group(0)
                return env_value

            pattern = r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)"
            return re.sub(pattern, replace_env_var, data)
        else:
            return data

    def _load_config(self) -> dict[str, Any]:
        """Load the file (if any) on top of the built-in defaults."""
        if self.config_path is None:
            logger.debug("No flyouts.yml found, using built-in defaults")
            return copy.deepcopy(DEFAULTS)

        config = self._resolve_env_vars(self._load_yaml_file(self.config_path))
        logger.info(f"Loaded configuration from {self.config_path}")
        return _deep_merge(DEFAULTS, config)

    def get(self, path: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated path."""
        value = self.raw_config
        for key in path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value


# =============================================================================
# GLOBAL ACCESS
# =============================================================================

_default_config: ConfigBuilder | None = None

# Per-path config cache for explicit config paths
_config_cache: dict[str, ConfigBuilder] = {}


def _get_config(config_path: str | None = None) -> ConfigBuilder:
    """Get configuration instance (singleton with optional explicit path)."""
    global _default_config

    if config_path is None:
        if _default_config is None:
            _default_config = ConfigBuilder(os.environ.get(CONFIG_ENV_VAR) or None)
            logger.debug("Initialized default configuration system")
        return _default_config

    resolved_path = str(Path(config_path).resolve())
    if resolved_path not in _config_cache:
        logger.info(f"Loading configuration from explicit path: {resolved_path}")
        _config_cache[resolved_path] = ConfigBuilder(resolved_path)

    return _config_cache[resolved_path]


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Return the full merged configuration as a dictionary."""
    return copy.deepcopy(_get_config(config_path).raw_config)


def get_config_value(path: str, default: Any = None, config_path: str | None = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "flyouts.search.page_size")
        default: Default value to return if path is not found
        config_path: Optional explicit path to configuration file

    Returns:
        The configuration value at the specified path, or default if not found

    Raises:
        ValueError: If path is empty or None

    Examples:
        >>> page_size = get_config_value("flyouts.search.page_size", 20)
        >>> capability = get_config_value("flyouts.default_capability")
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    return _get_config(config_path).get(path, default)


def reset_config() -> None:
    """Drop cached configuration so the next lookup reloads from disk."""
    global _default_config
    _default_config = None
    _config_cache.clear()
