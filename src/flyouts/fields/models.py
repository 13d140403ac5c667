"""Field Specifications - Typed Form Field Variants.

Each form field type is a pydantic model whose ``type`` attribute is a literal
tag. A variant carries only the attributes relevant to its type, so a typo in
a field definition fails at registration rather than when the form is shown.

Variant Families:
    - **Inputs**: text, email, url, tel, password, hidden, date, color
    - **Numeric**: number (min/max/step)
    - **Multi-line**: textarea (rows/cols)
    - **Choices**: select, radio, toggle, tags
    - **Search-driven**: ajax_select (unified search callback)
    - **Derivative**: post, taxonomy, user - resolved to ajax_select at
      registration by :func:`flyouts.fields.resolve.resolve_field`
    - **Components**: any other tag validates into :class:`ComponentField`,
      which keeps its extra attributes for the host's display component

Examples:
    Building a field from a plain mapping::

        >>> field = build_field("email", {"type": "email", "label": "Email"})
        >>> field.name
        'email'

    Dependencies on other fields::

        >>> build_field("notes", {"type": "textarea", "depends": {"field": "status", "value": "draft"}})

.. seealso::
   :func:`flyouts.fields.resolve.resolve_field` : Derivative type resolution
   :class:`flyouts.fields.sanitizer.Sanitizer` : Per-type sanitization on save
"""

from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from flyouts.base.errors import ConfigurationError
from flyouts.search.adapter import SearchCallback

INPUT_TYPES = ("text", "email", "url", "tel", "password", "hidden", "date", "color")
DERIVATIVE_TYPES = ("post", "taxonomy", "user")


class FieldDependency(BaseModel):
    """Conditional display rule: show a field when another field matches.

    ``value`` requires an exact match, ``contains`` a membership match. When
    both are given ``value`` wins.
    """

    model_config = ConfigDict(extra="forbid")

    field: str
    value: Any = None
    contains: Any = None

    def to_attribute(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field}
        if self.value is not None:
            data["value"] = self.value
        elif self.contains is not None:
            data["contains"] = self.contains
        return data


class BaseField(BaseModel):
    """Attributes shared by every field variant."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, arbitrary_types_allowed=True)

    type: str
    name: str = ""
    id: str = ""
    label: str = ""
    value: Any = None
    description: str = ""
    placeholder: str = ""
    required: bool = False
    disabled: bool = False
    readonly: bool = False
    tab: str | None = None
    class_: str = Field(default="", alias="class")
    wrapper_class: str = ""
    depends: str | FieldDependency | None = None
    sanitize_callback: Callable[[Any], Any] | None = None
    data_callback: Callable[[], Any] | None = None

    @property
    def data_key(self) -> str:
        """Key used to look the field's value up in loaded or submitted data."""
        return self.name or self.id

    def dependency_attribute(self) -> str | dict[str, Any] | None:
        """Return the ``data-depends`` payload for the client, if any."""
        if isinstance(self.depends, FieldDependency):
            return self.depends.to_attribute()
        return self.depends


class InputField(BaseField):
    """Single-line input rendered with the tag as its HTML input type."""

    type: Literal["text", "email", "url", "tel", "password", "hidden", "date", "color"] = "text"


class NumberField(BaseField):
    type: Literal["number"] = "number"
    min: float | None = None
    max: float | None = None
    step: float = 1


class TextareaField(BaseField):
    type: Literal["textarea"] = "textarea"
    rows: int = 5
    cols: int = 50


class SelectField(BaseField):
    type: Literal["select"] = "select"
    options: dict[Any, Any] = Field(default_factory=dict)
    multiple: bool = False


class RadioField(BaseField):
    type: Literal["radio"] = "radio"
    options: dict[Any, Any] = Field(default_factory=dict)


class ToggleField(BaseField):
    type: Literal["toggle"] = "toggle"
    checked: bool = False


class TagsField(BaseField):
    type: Literal["tags"] = "tags"
    placeholder: str = "Add tags..."


class AjaxSelectField(BaseField):
    """Select whose options come from a unified search callback.

    ``callback`` is called as ``callback(search, ids)`` - see
    :class:`flyouts.search.adapter.SearchCallbackAdapter`. With ``tags``
    enabled the client may create free-text values that no stored entity
    backs; hydration then echoes them back as their own labels.
    """

    type: Literal["ajax_select"] = "ajax_select"
    callback: SearchCallback | None = None
    options: dict[Any, Any] = Field(default_factory=dict)
    multiple: bool = False
    tags: bool = False
    placeholder: str = "Type to search..."
    page_size: int | None = None
    ajax_params: dict[str, Any] = Field(default_factory=dict)


class _DerivativeField(BaseField):
    query_args: dict[str, Any] = Field(default_factory=dict)
    multiple: bool = False
    tags: bool = False
    placeholder: str = "Type to search..."
    page_size: int | None = None


class PostField(_DerivativeField):
    type: Literal["post"] = "post"
    post_type: str | list[str] = "post"


class TaxonomyField(_DerivativeField):
    type: Literal["taxonomy"] = "taxonomy"
    taxonomy: str = "category"


class UserField(_DerivativeField):
    type: Literal["user"] = "user"
    role: str | list[str] = ""


class ComponentField(BaseField):
    """Any field tag without a dedicated variant (display components).

    Extra attributes are kept as-is so the host component can read them,
    e.g. ``buttons`` on ``action_buttons`` or ``add_callback`` on ``notes``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def _reject_reserved_tags(self):
        if self.type in FIELD_TYPES:
            raise ValueError(f"type '{self.type}' has a dedicated field variant")
        return self

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


FieldSpec = (
    InputField
    | NumberField
    | TextareaField
    | SelectField
    | RadioField
    | ToggleField
    | TagsField
    | AjaxSelectField
    | PostField
    | TaxonomyField
    | UserField
    | ComponentField
)

FIELD_TYPES: dict[str, type[BaseField]] = {
    **{tag: InputField for tag in INPUT_TYPES},
    "number": NumberField,
    "textarea": TextareaField,
    "select": SelectField,
    "radio": RadioField,
    "toggle": ToggleField,
    "tags": TagsField,
    "ajax_select": AjaxSelectField,
    "post": PostField,
    "taxonomy": TaxonomyField,
    "user": UserField,
}


def build_field(key: str, spec: Mapping[str, Any] | BaseField) -> BaseField:
    """Validate a raw field mapping into its typed variant.

    The field ``name`` defaults to ``key``; ``type`` defaults to ``text``.

    :param key: Field key within the flyout's ``fields`` mapping
    :type key: str
    :param spec: Raw mapping or an already-built field
    :return: Validated field variant
    :raises ConfigurationError: If the mapping does not validate
    """
    if isinstance(spec, BaseField):
        return spec if spec.name else spec.model_copy(update={"name": key})

    if not isinstance(spec, Mapping):
        raise ConfigurationError(f'Field "{key}" must be a mapping, got {type(spec).__name__}')

    raw = dict(spec)
    raw.setdefault("type", "text")
    raw.setdefault("name", key)
    field_cls = FIELD_TYPES.get(raw["type"], ComponentField)

    try:
        return field_cls.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f'Invalid field "{key}": {e}') from e


def normalize_fields(fields: Mapping[str, Any] | list[Any]) -> dict[str, BaseField]:
    """Key fields by string and build each one.

    A list is accepted as well as a mapping; list entries are keyed by their
    ``name`` or ``field_<index>``.
    """
    if isinstance(fields, list):
        keyed: dict[str, Any] = {}
        for index, spec in enumerate(fields):
            name = spec.get("name") if isinstance(spec, Mapping) else getattr(spec, "name", "")
            keyed[name or f"field_{index}"] = spec
        fields = keyed

    return {str(key): build_field(str(key), spec) for key, spec in fields.items()}
