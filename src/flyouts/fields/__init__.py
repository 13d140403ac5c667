"""Typed form field specifications, resolution, and sanitization."""

from .models import (
    DERIVATIVE_TYPES,
    FIELD_TYPES,
    AjaxSelectField,
    BaseField,
    ComponentField,
    FieldDependency,
    FieldSpec,
    InputField,
    NumberField,
    PostField,
    RadioField,
    SelectField,
    TagsField,
    TaxonomyField,
    TextareaField,
    ToggleField,
    UserField,
    build_field,
    normalize_fields,
)
from .resolve import resolve_field, resolve_fields
from .sanitizer import Sanitizer

__all__ = [
    "DERIVATIVE_TYPES",
    "FIELD_TYPES",
    "FieldSpec",
    "BaseField",
    "FieldDependency",
    "InputField",
    "NumberField",
    "TextareaField",
    "SelectField",
    "RadioField",
    "ToggleField",
    "TagsField",
    "AjaxSelectField",
    "PostField",
    "TaxonomyField",
    "UserField",
    "ComponentField",
    "build_field",
    "normalize_fields",
    "resolve_field",
    "resolve_fields",
    "Sanitizer",
]
