"""Flyout Manager - Per-Namespace Flyout Ownership.

A :class:`FlyoutManager` owns every flyout registered under one namespace
prefix. It validates and stores configurations, renders trigger markup, and
prepares form payloads for the endpoint layer.

Manager Responsibilities:
    - **Registration**: Validate config mappings into :class:`FlyoutConfig`,
      resolving ``post``/``taxonomy``/``user`` fields to ``ajax_select``
      exactly once. Re-registering an id replaces the previous config
    - **Triggers**: Button and link markup for registered flyouts the
      current user may open; empty string otherwise
    - **Forms**: Field payloads with values resolved from loaded data and
      ajax options hydrated through the search adapter
    - **Lookup**: ``has`` / ``get`` accessors and field/action resolution

Managers are normally obtained through
:meth:`flyouts.registry.registry.FlyoutRegistry.get_manager`, which creates
one per prefix and hands it the registry's content store and permission
checker.

.. note::
   The config map is guarded by a lock so a long-lived host process can
   register and look up flyouts from several request threads.

Examples:
    >>> manager = FlyoutManager("shop")
    >>> manager.register_flyout("edit_customer", {
    ...     "title": "Edit Customer",
    ...     "fields": {"name": {"type": "text"}},
    ... })
    >>> manager.has("edit_customer")
    True
    >>> manager.get_button("edit_customer", {"id": 5})
    '<button type="button" class="wp-flyout-trigger button" ...>Open</button>'
"""

import threading
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from flyouts.base.errors import (
    CallbackFailure,
    ConfigurationError,
    MissingRequiredConfig,
    UnknownFlyout,
)
from flyouts.fields.models import AjaxSelectField, BaseField, ComponentField
from flyouts.fields.resolve import resolve_fields
from flyouts.fields.sanitizer import Sanitizer
from flyouts.registry.base import FlyoutConfig
from flyouts.search.adapter import SearchCallbackAdapter, to_choices
from flyouts.search.stores import ContentStore
from flyouts.triggers import render_button, render_link
from flyouts.utils.config import get_config_value
from flyouts.utils.logger import get_logger

logger = get_logger("manager")

PermissionChecker = Callable[[str], bool]

REQUIRED_CONFIG_KEYS = ("fields",)

# Config values that are host callbacks and never leave the process
_CALLBACK_KEYS = {"callback", "sanitize_callback", "data_callback", "add_callback", "delete_callback"}


def check_capability(checker: PermissionChecker | None, capability: str) -> bool:
    """Run the host permission check; no checker allows everything."""
    if checker is None:
        return True
    try:
        return bool(checker(capability))
    except Exception as e:
        raise CallbackFailure("permission_checker", str(e)) from e


def resolve_value(key: str, data: Any) -> Any:
    """Look ``key`` up in loaded data (mapping key or object attribute)."""
    if data is None or not key:
        return None
    if isinstance(data, Mapping):
        return data.get(key)
    return getattr(data, key, None)


def _strip_callables(value: Any) -> Any:
    """Drop host callables from a dumped field so it is JSON-ready."""
    if isinstance(value, Mapping):
        return {
            key: _strip_callables(item)
            for key, item in value.items()
            if key not in _CALLBACK_KEYS and not callable(item)
        }
    if isinstance(value, (list, tuple)):
        return [_strip_callables(item) for item in value if not callable(item)]
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return value


class FlyoutManager:
    """Owner of all flyout configurations in one namespace.

    :param prefix: Namespace prefix this manager serves
    :type prefix: str
    :param content_store: Store used by built-in post/term/user search callbacks
    :param permission_checker: ``checker(capability) -> bool``; ``None`` allows all
    :param sanitizer: Sanitizer used for submitted form data
    """

    def __init__(
        self,
        prefix: str,
        *,
        content_store: ContentStore | None = None,
        permission_checker: PermissionChecker | None = None,
        sanitizer: Sanitizer | None = None,
    ):
        self._prefix = prefix
        self._flyouts: dict[str, FlyoutConfig] = {}
        self._lock = threading.RLock()
        self.content_store = content_store
        self.permission_checker = permission_checker
        self.sanitizer = sanitizer or Sanitizer()

    def __repr__(self) -> str:
        return f"FlyoutManager(prefix={self._prefix!r}, flyouts={list(self._flyouts)!r})"

    @property
    def prefix(self) -> str:
        return self._prefix

    def get_prefix(self) -> str:
        return self._prefix

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register_flyout(self, flyout_id: str, config: Mapping[str, Any] | FlyoutConfig) -> "FlyoutManager":
        """Validate and store a flyout configuration.

        Registering an existing ``flyout_id`` replaces its configuration.

        :param flyout_id: Flyout id local to this namespace
        :param config: Raw configuration mapping or a prebuilt FlyoutConfig
        :return: This manager, for chaining
        :raises MissingRequiredConfig: If ``fields`` is absent
        :raises ConfigurationError: If the configuration does not validate
        """
        if not flyout_id:
            raise ConfigurationError("Flyout id must be a non-empty string")

        if isinstance(config, FlyoutConfig):
            built = config
        else:
            if not isinstance(config, Mapping):
                raise ConfigurationError(
                    f'Config for flyout "{flyout_id}" must be a mapping, got {type(config).__name__}'
                )
            for key in REQUIRED_CONFIG_KEYS:
                if key not in config:
                    raise MissingRequiredConfig(key, flyout_id)
            try:
                built = FlyoutConfig.model_validate(dict(config))
            except ValidationError as e:
                raise ConfigurationError(f'Invalid config for flyout "{flyout_id}": {e}') from e

        # The store is looked up when a built-in callback runs, not now
        resolved = built.model_copy(update={"fields": resolve_fields(built.fields, self._current_store)})

        with self._lock:
            replaced = flyout_id in self._flyouts
            self._flyouts[flyout_id] = resolved

        logger.debug(
            f"{'Replaced' if replaced else 'Registered'} flyout '{flyout_id}' "
            f"in '{self._prefix}' ({len(resolved.fields)} fields)"
        )
        return self

    def _current_store(self) -> ContentStore | None:
        return self.content_store

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def has(self, flyout_id: str) -> bool:
        with self._lock:
            return flyout_id in self._flyouts

    has_flyout = has

    def get(self, flyout_id: str) -> FlyoutConfig | None:
        with self._lock:
            return self._flyouts.get(flyout_id)

    get_flyout = get

    def require(self, flyout_id: str) -> FlyoutConfig:
        """Like :meth:`get` but raises :class:`UnknownFlyout` on a miss."""
        config = self.get(flyout_id)
        if config is None:
            raise UnknownFlyout(self._prefix, flyout_id)
        return config

    def get_flyouts(self) -> dict[str, FlyoutConfig]:
        with self._lock:
            return dict(self._flyouts)

    def remove(self, flyout_id: str) -> bool:
        with self._lock:
            return self._flyouts.pop(flyout_id, None) is not None

    @property
    def admin_pages(self) -> frozenset[str]:
        """Union of the admin pages declared by every flyout."""
        with self._lock:
            pages: set[str] = set()
            for config in self._flyouts.values():
                pages |= config.admin_pages
            return frozenset(pages)

    def __len__(self) -> int:
        return len(self._flyouts)

    def __contains__(self, flyout_id: object) -> bool:
        return isinstance(flyout_id, str) and self.has(flyout_id)

    # =========================================================================
    # PERMISSIONS
    # =========================================================================

    def is_allowed(self, capability: str) -> bool:
        return check_capability(self.permission_checker, capability)

    def can_access(self, flyout_id: str) -> bool:
        """True when the flyout exists and its capability check passes."""
        config = self.get(flyout_id)
        return config is not None and self.is_allowed(config.capability)

    # =========================================================================
    # TRIGGERS
    # =========================================================================

    def get_button(
        self,
        flyout_id: str,
        data: Mapping[str, Any] | None = None,
        button_args: Mapping[str, Any] | None = None,
    ) -> str:
        """Button trigger markup, or ``""`` for unknown or forbidden flyouts.

        ``button_args`` accepts ``text``, ``class`` and ``icon`` (a dashicon
        name without the ``dashicons-`` prefix).
        """
        if not self.can_access(flyout_id):
            return ""

        args = button_args or {}
        return render_button(
            self._prefix,
            flyout_id,
            data,
            text=args.get("text") or get_config_value("flyouts.triggers.button_text", "Open"),
            extra_class=args.get("class", ""),
            icon=args.get("icon", ""),
        )

    def link(
        self,
        flyout_id: str,
        text: str,
        data: Mapping[str, Any] | None = None,
        link_args: Mapping[str, Any] | None = None,
    ) -> str:
        """Link trigger markup, or ``""`` for unknown/forbidden flyouts or empty text."""
        if not text or not self.can_access(flyout_id):
            return ""

        args = link_args or {}
        return render_link(
            self._prefix,
            flyout_id,
            text,
            data,
            extra_class=args.get("class", ""),
            target=args.get("target", ""),
        )

    # =========================================================================
    # FORMS & SEARCH
    # =========================================================================

    def find_flyout_for_field(self, field_key: str) -> str:
        """Return the id of the first flyout declaring ``field_key``, or ``""``."""
        for flyout_id, config in self.get_flyouts().items():
            if config.find_field(field_key) is not None:
                return flyout_id
        return ""

    def search_adapter(self, flyout_id: str, field_key: str) -> SearchCallbackAdapter | None:
        """Adapter for an ajax field's callback, or ``None`` when it has none."""
        field = self.require(flyout_id).find_field(field_key)
        if not isinstance(field, AjaxSelectField) or field.callback is None:
            return None
        return SearchCallbackAdapter(
            field.callback,
            page_size=field.page_size,
            tags=field.tags,
            name=f"{self._prefix}_{flyout_id}.{field.data_key}",
        )

    def prepare_field(self, flyout_id: str, key: str, field: BaseField, data: Any = None) -> dict[str, Any]:
        """Serialize one field with its value and client-side attributes."""
        value = field.value
        if field.data_callback is not None:
            try:
                value = field.data_callback()
            except Exception as e:
                raise CallbackFailure(f"{key}.data_callback", str(e)) from e
        elif value is None:
            value = resolve_value(field.data_key or key, data)

        payload = field.model_dump(by_alias=True, exclude={"depends"})
        payload["value"] = value

        dependency = field.dependency_attribute()
        if dependency is not None:
            payload["depends"] = dependency

        if isinstance(field, AjaxSelectField):
            payload["ajax_params"] = {
                "manager": self._prefix,
                "flyout": flyout_id,
                "field_key": field.data_key or key,
            }
            options = dict(field.options)
            if value not in (None, "", []) and not options and field.callback is not None:
                ids = list(value) if isinstance(value, (list, tuple)) else [value]
                adapter = self.search_adapter(flyout_id, key)
                options = {choice.id: choice.label for choice in to_choices(adapter.hydrate(ids))}
            payload["options"] = options

        return _strip_callables(payload)

    def build_form(self, flyout_id: str, data: Any = None, item_id: Any = None) -> dict[str, Any]:
        """Form payload for a flyout: header, fields (grouped by tab), actions."""
        config = self.require(flyout_id)

        form: dict[str, Any] = {
            "manager": self._prefix,
            "flyout": flyout_id,
            "title": config.title,
            "subtitle": config.subtitle,
            "width": config.width,
            "item_id": item_id or None,
            "actions": [
                _strip_callables(action.model_dump(by_alias=True)) for action in config.get_actions()
            ],
        }

        if config.tabs:
            grouped = config.fields_by_tab()
            form["tabs"] = [
                {
                    "id": tab_id,
                    "label": tab.label,
                    "active": index == 0,
                    "fields": [
                        self.prepare_field(flyout_id, key, field, data)
                        for key, field in grouped.get(tab_id, {}).items()
                    ],
                }
                for index, (tab_id, tab) in enumerate(config.tabs.items())
            ]
        else:
            form["fields"] = [
                self.prepare_field(flyout_id, key, field, data) for key, field in config.fields.items()
            ]

        return form

    def find_action_callback(self, flyout_id: str, action_key: str) -> Callable[[dict[str, Any]], Any] | None:
        """Find the host callback behind an action key.

        Searches footer actions, ``action_buttons``/``action_menu`` items, and
        the add/delete callbacks of ``notes`` components.
        """
        config = self.require(flyout_id)

        for action in config.actions:
            if action.action == action_key and action.callback is not None:
                return action.callback

        for field in config.fields.values():
            if not isinstance(field, ComponentField):
                continue
            extras = field.extras

            if field.type == "notes":
                if action_key == extras.get("add_action", "add_note") and callable(extras.get("add_callback")):
                    return extras["add_callback"]
                if action_key == extras.get("delete_action", "delete_note") and callable(
                    extras.get("delete_callback")
                ):
                    return extras["delete_callback"]
                continue

            if field.type == "action_buttons":
                items = extras.get("buttons", [])
            elif field.type == "action_menu":
                items = extras.get("items", [])
            else:
                continue

            for item in items:
                if not isinstance(item, Mapping) or item.get("type") == "separator":
                    continue
                if item.get("action") == action_key and callable(item.get("callback")):
                    return item["callback"]

        return None
