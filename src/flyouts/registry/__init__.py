"""
Flyout Registry System

Namespace-prefix dispatch for flyouts: composite id parsing, the registry that
maps prefixes to managers, the managers that own flyout configurations, and
the configuration models they store.
"""

from .base import ActionSpec, FlyoutConfig, TabSpec
from .identifiers import FlyoutIdentifier, parse_flyout_id, try_parse_flyout_id
from .manager import FlyoutManager, resolve_value
from .registry import FlyoutRegistry, get_registry, reset_registry, set_registry

__all__ = [
    # Registry
    "FlyoutRegistry",
    "get_registry",
    "set_registry",
    "reset_registry",
    # Managers
    "FlyoutManager",
    "resolve_value",
    # Identifiers
    "FlyoutIdentifier",
    "parse_flyout_id",
    "try_parse_flyout_id",
    # Configuration
    "FlyoutConfig",
    "TabSpec",
    "ActionSpec",
]
