"""Flyouts.

Declarative registration of slide-out admin edit panels ("flyouts"):
namespaced managers, typed form fields, unified search callbacks, trigger
markup, and the request handlers behind the client script.

This package contains:
- Composite id parsing and the prefix -> manager registry
- Typed field specifications, derivative field resolution, and sanitization
- The unified search callback adapter and built-in content searches
- Endpoint handlers for load, save, delete, search and action requests
- Global convenience functions that log failures instead of raising
"""

# Version information
__version__ = "1.0.0"

from flyouts.endpoints import FlyoutEndpoints
from flyouts.functions import (
    get_flyout_button,
    get_flyout_link,
    register_flyout,
    render_flyout_button,
    render_flyout_link,
)
from flyouts.registry import FlyoutManager, FlyoutRegistry, get_registry, reset_registry

__all__ = [
    "__version__",
    "FlyoutEndpoints",
    "FlyoutManager",
    "FlyoutRegistry",
    "get_registry",
    "reset_registry",
    "register_flyout",
    "get_flyout_button",
    "get_flyout_link",
    "render_flyout_button",
    "render_flyout_link",
]
