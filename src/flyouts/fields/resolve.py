"""Derivative field resolution.

``post``, ``taxonomy`` and ``user`` fields are shorthands for an
``ajax_select`` field wired to a built-in search callback. Resolution runs
once, when a flyout is registered, and returns new field objects; the input
fields are left untouched.
"""

from collections.abc import Mapping

from flyouts.fields.models import (
    AjaxSelectField,
    BaseField,
    PostField,
    TaxonomyField,
    UserField,
    _DerivativeField,
)
from flyouts.search.callbacks import StoreSource, search_posts, search_terms, search_users

# Attributes that only configure the built-in callback, not the select itself
_CALLBACK_ONLY = {"type", "post_type", "taxonomy", "role", "query_args"}


def resolve_field(field: BaseField, store: StoreSource = None) -> BaseField:
    """Return the canonical variant for ``field``.

    Derivative types become :class:`AjaxSelectField` carrying the matching
    built-in callback; every other field is returned unchanged.
    """
    if not isinstance(field, _DerivativeField):
        return field

    if isinstance(field, PostField):
        callback = search_posts(field.post_type, field.query_args, store=store)
    elif isinstance(field, TaxonomyField):
        callback = search_terms(field.taxonomy, field.query_args, store=store)
    elif isinstance(field, UserField):
        callback = search_users(field.role, field.query_args, store=store)
    else:
        raise TypeError(f"Unhandled derivative field type: {field.type}")

    attributes = field.model_dump(exclude=_CALLBACK_ONLY)
    return AjaxSelectField(type="ajax_select", callback=callback, **attributes)


def resolve_fields(fields: Mapping[str, BaseField], store: StoreSource = None) -> dict[str, BaseField]:
    """Resolve every field in an ordered mapping, keeping key order."""
    return {key: resolve_field(field, store) for key, field in fields.items()}
