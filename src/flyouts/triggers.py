"""Trigger markup for opening flyouts.

Buttons and links carry the manager prefix and flyout id as data attributes;
the client script reads them to open the flyout and request its form. Any
extra data (record id, title override, ...) becomes further ``data-*``
attributes.

Markup is produced from small Jinja2 templates with autoescaping on, so host
text and data values are always escaped.
"""

import re
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, select_autoescape

TRIGGER_CLASS = "wp-flyout-trigger"

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))

_BUTTON_TEMPLATE = _env.from_string(
    '<button type="button"{{ attrs|xmlattr }}>'
    '{% if icon %}<span class="dashicons dashicons-{{ icon }}"></span> {% endif %}'
    "{{ text }}</button>"
)

_LINK_TEMPLATE = _env.from_string("<a{{ attrs|xmlattr }}>{{ text }}</a>")


def _data_key(key: Any) -> str:
    """Attribute-safe form of a data key (``Record ID`` -> ``record-id``)."""
    return re.sub(r"[^a-z0-9_\-]+", "-", str(key).strip().lower()).strip("-")


def _join_classes(*classes: str) -> str:
    seen: list[str] = []
    for group in classes:
        for name in (group or "").split():
            if name not in seen:
                seen.append(name)
    return " ".join(seen)


def build_trigger_attributes(
    prefix: str, flyout_id: str, data: Mapping[str, Any] | None = None, extra_class: str = ""
) -> dict[str, str]:
    """Attributes shared by button and link triggers."""
    attrs = {
        "class": _join_classes(TRIGGER_CLASS, extra_class),
        "data-flyout-manager": prefix,
        "data-flyout": flyout_id,
    }
    for key, value in (data or {}).items():
        name = _data_key(key)
        if name and value is not None:
            attrs[f"data-{name}"] = str(value)
    return attrs


def render_button(
    prefix: str,
    flyout_id: str,
    data: Mapping[str, Any] | None = None,
    *,
    text: str = "Open",
    extra_class: str = "",
    icon: str = "",
) -> str:
    """``<button>`` trigger with an optional dashicon."""
    attrs = build_trigger_attributes(prefix, flyout_id, data, _join_classes("button", extra_class))
    return str(_BUTTON_TEMPLATE.render(attrs=attrs, text=text, icon=icon))


def render_link(
    prefix: str,
    flyout_id: str,
    text: str,
    data: Mapping[str, Any] | None = None,
    *,
    extra_class: str = "",
    target: str = "",
) -> str:
    """``<a href="#">`` trigger."""
    attrs = build_trigger_attributes(prefix, flyout_id, data, extra_class)
    if target:
        attrs["target"] = target
    attrs["href"] = "#"
    return str(_LINK_TEMPLATE.render(attrs=attrs, text=text))
