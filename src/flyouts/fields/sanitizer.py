"""Form data sanitization on save.

Submitted form data is cleaned field by field before the flyout's ``save``
callback sees it. Lookup order for each field:

1. the field's own ``sanitize_callback``
2. a component sanitizer for data-bearing components (line items, tags, ...)
3. a field sanitizer for the field's input type
4. text sanitization (or per-item text sanitization for lists)

Keys present in the submission but not configured as fields (for example the
hidden ``id``) are kept and sanitized as text.
"""

import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from markupsafe import Markup

from flyouts.base.errors import CallbackFailure
from flyouts.fields.models import BaseField

SanitizeFunc = Callable[[Any], Any]

_TAG_PATTERN = re.compile(r"<[^>]*>")
_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+\-']+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
_HEX_COLOR_PATTERN = re.compile(r"^#(?:[A-Fa-f0-9]{3}){1,2}$")
_ALLOWED_URL_SCHEMES = {"http", "https", "ftp", "ftps", "mailto", "tel", "sms"}
_FALSE_STRINGS = {"", "0", "false", "off", "no"}


def sanitize_text_field(value: Any) -> str:
    """Strip tags, collapse whitespace, and trim."""
    if value is None:
        return ""
    return Markup(str(value)).striptags()


def sanitize_textarea_field(value: Any) -> str:
    """Strip tags but keep line breaks."""
    if value is None:
        return ""
    text = _TAG_PATTERN.sub("", str(value))
    return "\n".join(line.rstrip() for line in text.strip().splitlines())


def sanitize_key(value: Any) -> str:
    """Lowercase and keep only ``a-z``, ``0-9``, ``_`` and ``-``."""
    return re.sub(r"[^a-z0-9_\-]", "", str(value or "").lower())


def sanitize_email(value: Any) -> str:
    email = str(value or "").strip()
    return email if _EMAIL_PATTERN.match(email) else ""


def sanitize_url(value: Any) -> str:
    """Keep URLs with an allowed scheme; scheme-less hosts get ``http://``."""
    url = re.sub(r"\s", "", str(value or ""))
    if not url:
        return ""

    scheme = urlsplit(url).scheme.lower()
    if scheme:
        return url if scheme in _ALLOWED_URL_SCHEMES else ""
    if url.startswith(("/", "#", "?")):
        return url
    return f"http://{url}"


def sanitize_password(value: Any) -> str:
    return str(value or "").strip()


def sanitize_number(value: Any) -> int | float:
    text = str(value).strip() if value is not None else ""
    try:
        return float(text) if "." in text else int(text)
    except ValueError:
        return 0


def sanitize_date(value: Any) -> str:
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").strftime("%Y-%m-%d")
    except ValueError:
        return ""


def sanitize_toggle(value: Any) -> str:
    if isinstance(value, str):
        return "0" if value.strip().lower() in _FALSE_STRINGS else "1"
    return "1" if value else "0"


def sanitize_hex_color(value: Any) -> str:
    color = str(value or "").strip()
    return color if _HEX_COLOR_PATTERN.match(color) else ""


def sanitize_array(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [sanitize_text_field(item) for item in value]


def sanitize_choice(value: Any) -> str | list[str]:
    """Single or multiple choice (select, radio, ajax_select, card_choice)."""
    if isinstance(value, (list, tuple)):
        return sanitize_array(value)
    return sanitize_text_field(value)


def _absint(value: Any) -> int:
    try:
        return abs(int(value))
    except (TypeError, ValueError):
        return 0


def sanitize_line_items(items: Any) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []

    sanitized = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        item_id = _absint(item.get("id", 0))
        if item_id <= 0:
            continue
        sanitized.append(
            {
                "id": item_id,
                "name": sanitize_text_field(item.get("name", "")),
                "quantity": max(1, _absint(item.get("quantity", 1))),
                "price": _absint(item.get("price", 0)),
            }
        )
    return sanitized


def sanitize_files(files: Any) -> list[dict[str, Any]]:
    if not isinstance(files, list):
        return []

    sanitized = []
    for file in files:
        if not isinstance(file, Mapping):
            continue
        url = sanitize_url(file.get("url", ""))
        attachment_id = _absint(file.get("attachment_id", 0))
        if not url and attachment_id <= 0:
            continue
        sanitized.append(
            {
                "name": sanitize_text_field(file.get("name", "")),
                "url": url,
                "attachment_id": attachment_id,
                "lookup_key": sanitize_key(file.get("lookup_key", "")),
            }
        )
    return sanitized


def sanitize_key_value_list(data: Any) -> list[dict[str, str]]:
    if not isinstance(data, list):
        return []

    sanitized = []
    for item in data:
        if not isinstance(item, Mapping):
            continue
        key = sanitize_key(item.get("key", ""))
        if not key:
            continue
        sanitized.append({"key": key, "value": sanitize_text_field(item.get("value", ""))})
    return sanitized


def sanitize_feature_list(data: Any) -> list[str]:
    if not isinstance(data, list):
        return []

    sanitized = []
    for item in data:
        if isinstance(item, Mapping):
            item = item.get("value") or item.get("text") or ""
        value = sanitize_text_field(str(item).strip())
        if value:
            sanitized.append(value)
    return sanitized


DEFAULT_FIELD_SANITIZERS: dict[str, SanitizeFunc] = {
    "text": sanitize_text_field,
    "textarea": sanitize_textarea_field,
    "email": sanitize_email,
    "url": sanitize_url,
    "tel": sanitize_text_field,
    "password": sanitize_password,
    "number": sanitize_number,
    "date": sanitize_date,
    "select": sanitize_choice,
    "ajax_select": sanitize_choice,
    "radio": sanitize_text_field,
    "toggle": sanitize_toggle,
    "color": sanitize_hex_color,
    "hidden": sanitize_text_field,
}

DEFAULT_COMPONENT_SANITIZERS: dict[str, SanitizeFunc] = {
    "line_items": sanitize_line_items,
    "files": sanitize_files,
    "tags": sanitize_array,
    "card_choice": sanitize_choice,
    "feature_list": sanitize_feature_list,
    "key_value_list": sanitize_key_value_list,
}


class Sanitizer:
    """Per-type sanitizer tables with registration hooks."""

    def __init__(self):
        self.field_sanitizers: dict[str, SanitizeFunc] = dict(DEFAULT_FIELD_SANITIZERS)
        self.component_sanitizers: dict[str, SanitizeFunc] = dict(DEFAULT_COMPONENT_SANITIZERS)

    def register_field_sanitizer(self, field_type: str, sanitizer: SanitizeFunc) -> None:
        self.field_sanitizers[field_type] = sanitizer

    def register_component_sanitizer(self, component_type: str, sanitizer: SanitizeFunc) -> None:
        self.component_sanitizers[component_type] = sanitizer

    def unregister_field_sanitizer(self, field_type: str) -> bool:
        return self.field_sanitizers.pop(field_type, None) is not None

    def unregister_component_sanitizer(self, component_type: str) -> bool:
        return self.component_sanitizers.pop(component_type, None) is not None

    def sanitize_field(self, value: Any, field: BaseField, key: str = "") -> Any:
        if field.sanitize_callback is not None:
            try:
                return field.sanitize_callback(value)
            except CallbackFailure:
                raise
            except Exception as e:
                raise CallbackFailure(f"{key or field.name or field.type}.sanitize_callback", str(e)) from e

        if field.type in self.component_sanitizers:
            return self.component_sanitizers[field.type](value)

        if field.type in self.field_sanitizers:
            return self.field_sanitizers[field.type](value)

        return sanitize_array(value) if isinstance(value, list) else sanitize_text_field(value)

    def sanitize_form_data(self, raw_data: Mapping[str, Any], fields: Mapping[str, BaseField]) -> dict[str, Any]:
        """Sanitize a whole submission against the flyout's fields."""
        sanitized: dict[str, Any] = {}

        for key, field in fields.items():
            name = field.name or key
            if name in raw_data:
                sanitized[name] = self.sanitize_field(raw_data[name], field, name)

        for key, value in raw_data.items():
            if key not in sanitized:
                sanitized[key] = sanitize_array(value) if isinstance(value, list) else sanitize_text_field(value)

        return sanitized
