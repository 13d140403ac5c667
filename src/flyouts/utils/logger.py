"""
Component Logger

Provides colored logging for flyout components with:
- One API for the registry, managers, façade functions, and endpoints
- Rich terminal output with component-specific colors
- Graceful fallbacks when configuration is unavailable

Usage:
    logger = get_logger("registry")
    logger.info("Created manager")
    logger.debug("Detailed trace")
    logger.success("Flyout registered")
    logger.warning("Something to note")
    logger.error("Something went wrong")

    # Custom loggers with explicit parameters
    logger = get_logger(name="custom_component", color="blue")
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from flyouts.utils.config import get_config_value


class ComponentLogger:
    """
    Rich-formatted logger for flyout components with color coding.

    Message Types:
    - key_info: Important operational information
    - info: Normal operational messages
    - debug: Detailed tracing information
    - warning: Warning messages
    - error: Error messages
    - success: Success messages
    """

    def __init__(self, base_logger: logging.Logger, component_name: str, color: str = "white"):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'registry', 'search')
            color: Rich color name for this component
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self.color = color

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix."""
        prefix = f"{emoji}{self.component_name.title()}: "
        if style:
            return f"[{style}]{prefix}{message}[/{style}]"
        return f"{prefix}{message}"

    def key_info(self, message: str) -> None:
        """Important operational information."""
        style = f"bold {self.color}" if self.color != "white" else "bold white"
        self.base_logger.info(self._format_message(message, style))

    def info(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, self.color))

    def debug(self, message: str) -> None:
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def warning(self, message: str) -> None:
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def error(self, message: str, exc_info: bool = False) -> None:
        """Error message, optionally with the active exception's traceback."""
        self.base_logger.error(self._format_message(message, "bold red", "❌ "), exc_info=exc_info)

    def success(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))

    # Compatibility methods - delegate to base logger
    def exception(self, message: str, *args, **kwargs) -> None:
        self.base_logger.exception(self._format_message(message, "bold red", "❌ "), *args, **kwargs)

    def log(self, level: int, message: str, *args, **kwargs) -> None:
        self.base_logger.log(level, message, *args, **kwargs)

    @property
    def level(self) -> int:
        return self.base_logger.level

    @property
    def name(self) -> str:
        return self.base_logger.name

    def setLevel(self, level: int) -> None:
        self.base_logger.setLevel(level)

    def isEnabledFor(self, level: int) -> bool:
        return self.base_logger.isEnabledFor(level)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


def _setup_rich_logging(level: int = logging.INFO) -> None:
    """Attach a RichHandler to the ``flyouts`` logger tree (called once)."""
    package_logger = logging.getLogger("flyouts")

    for handler in package_logger.handlers:
        if isinstance(handler, RichHandler):
            return

    package_logger.setLevel(level)

    try:
        rich_tracebacks = _as_bool(get_config_value("logging.rich_tracebacks", True))
        show_traceback_locals = _as_bool(get_config_value("logging.show_traceback_locals", False))
        show_full_paths = _as_bool(get_config_value("logging.show_full_paths", False))
    except Exception:
        # Secure defaults when the settings file is unusable
        rich_tracebacks = True
        show_traceback_locals = False
        show_full_paths = False

    console = Console(stderr=True, width=120)

    handler = RichHandler(
        console=console,
        rich_tracebacks=rich_tracebacks,
        markup=True,
        show_path=show_full_paths,
        show_time=True,
        show_level=True,
        tracebacks_show_locals=show_traceback_locals,
    )

    package_logger.addHandler(handler)


def get_logger(
    component_name: str | None = None,
    level: int = logging.INFO,
    *,
    name: str | None = None,
    color: str | None = None,
) -> ComponentLogger:
    """
    Get a component logger.

    Primary API:
        component_name: Component name (e.g., 'registry', 'manager')
        level: Logging level

    Explicit API (for custom loggers or tests):
        name: Direct logger name (keyword-only)
        color: Direct color specification (keyword-only)

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("registry")
        logger.info("Created manager for prefix 'shop'")

        logger = get_logger(name="test_logger", color="blue")
    """
    _setup_rich_logging(level)

    if name is not None:
        return ComponentLogger(logging.getLogger(name), name, color or "white")

    if component_name is None:
        raise ValueError(
            "Component name is required. Usage: get_logger('component_name') or "
            "get_logger(name='custom_name', color='blue')"
        )

    # Child of the package logger so the RichHandler above applies
    base_logger = logging.getLogger(f"flyouts.{component_name}")

    try:
        color = get_config_value(f"logging.logging_colors.{component_name}") or "white"
    except Exception:
        color = "white"

    return ComponentLogger(base_logger, component_name, color)
