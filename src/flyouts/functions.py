"""Global convenience functions.

Simplified entry points that take a composite flyout id such as
``"shop_edit_customer"``, route it to the manager for its prefix, and
delegate. They never raise: any failure is logged with the flyout id and the
reason, and a safe default is returned instead (``None`` from registration,
``""`` from the markup helpers), so a broken flyout cannot take down the page
that renders it.

Every function takes an optional ``registry``; the process-wide default
registry is used when it is omitted.

Examples:
    >>> register_flyout("shop_edit_customer", {
    ...     "title": "Edit Customer",
    ...     "fields": {"name": {"type": "text", "label": "Name"}},
    ...     "load": load_customer,
    ...     "save": save_customer,
    ... })
    FlyoutManager(prefix='shop', flyouts=['edit_customer'])
    >>> get_flyout_button("shop_edit_customer", {"id": 5, "text": "Edit", "icon": "edit"})
    '<button type="button" class="wp-flyout-trigger button" data-flyout-manager="shop" ...'
"""

import sys
from collections.abc import Mapping
from typing import Any, TextIO

from flyouts.base.results import Err, Ok
from flyouts.registry.identifiers import try_parse_flyout_id
from flyouts.registry.manager import FlyoutManager
from flyouts.registry.registry import FlyoutRegistry, get_registry
from flyouts.utils.logger import get_logger

logger = get_logger("functions")

BUTTON_ARG_KEYS = ("text", "class", "icon")
LINK_ARG_KEYS = ("class", "target")


def _split_args(
    args: Mapping[str, Any] | None,
    keys: tuple[str, ...],
    data: Mapping[str, Any] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate trigger options from the keys that become data attributes.

    Entries in ``data`` are always attributes, even when named like an option.
    """
    options: dict[str, Any] = {}
    attributes: dict[str, Any] = {}
    for key, value in (args or {}).items():
        if key in keys:
            options[key] = value
        else:
            attributes[key] = value
    attributes.update(data or {})
    return options, attributes


def register_flyout(
    flyout_id: str,
    config: Mapping[str, Any] | None = None,
    *,
    registry: FlyoutRegistry | None = None,
) -> FlyoutManager | None:
    """Register a flyout under the manager named by its prefix.

    :param flyout_id: Composite id, ``"<prefix>_<flyout>"``
    :param config: Flyout configuration (see :class:`flyouts.registry.base.FlyoutConfig`)
    :param registry: Registry to register into; the default registry if omitted
    :return: The manager holding the flyout, or ``None`` if registration failed
    """
    registry = registry if registry is not None else get_registry()

    match try_parse_flyout_id(flyout_id):
        case Err(error):
            logger.error(f'Failed to register flyout "{flyout_id}" - {error}')
            return None
        case Ok(identifier):
            try:
                manager = registry.get_manager(identifier.prefix)
                return manager.register_flyout(identifier.flyout_id, config or {})
            except Exception as e:
                logger.error(f'Failed to register flyout "{flyout_id}" - {e}')
                return None


def get_flyout_button(
    flyout_id: str,
    args: Mapping[str, Any] | None = None,
    *,
    data: Mapping[str, Any] | None = None,
    registry: FlyoutRegistry | None = None,
) -> str:
    """Button markup for a registered flyout, or ``""``.

    ``text``, ``class`` and ``icon`` configure the button; every other key in
    ``args`` becomes a ``data-*`` attribute (``id``, ``title``, ...). Keys in
    ``data`` always become attributes, so ``data={"text": ...}`` renders
    ``data-text``.
    """
    registry = registry if registry is not None else get_registry()

    match registry.resolve(flyout_id):
        case Err(error):
            logger.error(f'Failed to get button for flyout "{flyout_id}" - {error}')
            return ""
        case Ok((manager, local_id)):
            button_args, attributes = _split_args(args, BUTTON_ARG_KEYS, data)
            try:
                return manager.get_button(local_id, attributes, button_args)
            except Exception as e:
                logger.error(f'Failed to get button for flyout "{flyout_id}" - {e}')
                return ""


def render_flyout_button(
    flyout_id: str,
    args: Mapping[str, Any] | None = None,
    *,
    data: Mapping[str, Any] | None = None,
    registry: FlyoutRegistry | None = None,
    file: TextIO | None = None,
) -> None:
    """Write :func:`get_flyout_button` markup to ``file`` (stdout by default)."""
    (file or sys.stdout).write(get_flyout_button(flyout_id, args, data=data, registry=registry))


def get_flyout_link(
    flyout_id: str,
    args: Mapping[str, Any] | None = None,
    *,
    data: Mapping[str, Any] | None = None,
    registry: FlyoutRegistry | None = None,
) -> str:
    """Link markup for a registered flyout, or ``""``.

    ``args`` must carry non-empty ``text``; ``class`` and ``target`` configure
    the link and the remaining keys become ``data-*`` attributes, as does
    every key in ``data``.
    """
    args = dict(args or {})
    text = args.pop("text", "")
    if not text:
        logger.error(f'Failed to get link for flyout "{flyout_id}" - link text is required')
        return ""

    registry = registry if registry is not None else get_registry()

    match registry.resolve(flyout_id):
        case Err(error):
            logger.error(f'Failed to get link for flyout "{flyout_id}" - {error}')
            return ""
        case Ok((manager, local_id)):
            link_args, attributes = _split_args(args, LINK_ARG_KEYS, data)
            try:
                return manager.link(local_id, str(text), attributes, link_args)
            except Exception as e:
                logger.error(f'Failed to get link for flyout "{flyout_id}" - {e}')
                return ""


def render_flyout_link(
    flyout_id: str,
    args: Mapping[str, Any] | None = None,
    *,
    data: Mapping[str, Any] | None = None,
    registry: FlyoutRegistry | None = None,
    file: TextIO | None = None,
) -> None:
    """Write :func:`get_flyout_link` markup to ``file`` (stdout by default)."""
    (file or sys.stdout).write(get_flyout_link(flyout_id, args, data=data, registry=registry))
