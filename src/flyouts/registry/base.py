"""Flyout Configuration Models.

This module defines the validated configuration a manager stores for each
registered flyout. Hosts pass plain mappings to
:meth:`FlyoutManager.register_flyout`; the mapping is validated once into a
frozen :class:`FlyoutConfig`, with every field built into its typed variant.

Configuration Keys:
    - **title / subtitle**: Header text
    - **width**: ``small``, ``medium``, ``large`` or ``full`` (``size`` is
      accepted as an alias); default from ``flyouts.default_width``
    - **tabs**: Ordered ``tab_id -> label`` or ``tab_id -> {"label": ...}``
    - **fields**: Ordered ``field_key -> field mapping`` (required)
    - **actions**: Footer buttons; derived from ``save``/``delete`` when empty
    - **capability**: Permission needed to open the flyout; default from
      ``flyouts.default_capability``
    - **admin_pages**: Admin screens the flyout's assets load on
    - **load / save / delete / validate**: Host callbacks

Examples:
    Minimal configuration::

        >>> config = FlyoutConfig.model_validate({
        ...     "title": "Edit Customer",
        ...     "fields": {"name": {"type": "text", "label": "Name"}},
        ...     "load": lambda item_id: {"name": "Alice"},
        ...     "save": lambda item_id, data: True,
        ... })
        >>> config.width
        'medium'

.. seealso::
   :mod:`flyouts.fields.models` : Field variants held in ``fields``
   :class:`flyouts.registry.manager.FlyoutManager` : Owner of these configs
"""

from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from flyouts.fields.models import BaseField, normalize_fields
from flyouts.utils.config import get_config_value

FlyoutWidth = Literal["small", "medium", "large", "full"]

LoadCallback = Callable[[Any], Any]
SaveCallback = Callable[[Any, dict[str, Any]], Any]
DeleteCallback = Callable[[Any], Any]
ValidateCallback = Callable[[dict[str, Any]], Any]


def _default_width() -> str:
    return get_config_value("flyouts.default_width", "medium")


def _default_capability() -> str:
    return get_config_value("flyouts.default_capability", "manage_options")


class TabSpec(BaseModel):
    """One tab in a tabbed flyout."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str


class ActionSpec(BaseModel):
    """Footer action button.

    ``action`` names the handler key the client posts back; ``callback`` is
    the optional host function invoked for it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True, arbitrary_types_allowed=True)

    text: str
    style: str = "secondary"
    class_: str = Field(default="", alias="class")
    action: str = ""
    icon: str = ""
    callback: Callable[[dict[str, Any]], Any] | None = None


class FlyoutConfig(BaseModel):
    """Validated, immutable configuration for one registered flyout."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True, arbitrary_types_allowed=True)

    title: str = ""
    subtitle: str = ""
    width: FlyoutWidth = Field(default_factory=_default_width, validation_alias=AliasChoices("width", "size"))
    tabs: dict[str, TabSpec] = Field(default_factory=dict)
    fields: dict[str, BaseField]
    actions: list[ActionSpec] = Field(default_factory=list)
    capability: str = Field(default_factory=_default_capability)
    admin_pages: frozenset[str] = frozenset()
    load: LoadCallback | None = None
    save: SaveCallback | None = None
    delete: DeleteCallback | None = None
    validate_: ValidateCallback | None = Field(default=None, alias="validate")

    @field_validator("tabs", mode="before")
    @classmethod
    def _normalize_tabs(cls, tabs: Any) -> Any:
        if isinstance(tabs, Mapping):
            return {
                str(tab_id): {"label": tab} if isinstance(tab, str) else tab
                for tab_id, tab in tabs.items()
            }
        return tabs

    @field_validator("fields", mode="before")
    @classmethod
    def _build_fields(cls, fields: Any) -> Any:
        if isinstance(fields, (Mapping, list)):
            return normalize_fields(fields)
        return fields

    @field_validator("admin_pages", mode="before")
    @classmethod
    def _normalize_admin_pages(cls, pages: Any) -> Any:
        if isinstance(pages, str):
            return frozenset([pages])
        return pages

    def get_actions(self) -> list[ActionSpec]:
        """Configured actions, or Save/Delete derived from the callbacks."""
        if self.actions:
            return list(self.actions)

        actions = []
        if self.save is not None:
            actions.append(ActionSpec(text="Save", style="primary", class_="wp-flyout-save"))
        if self.delete is not None:
            actions.append(ActionSpec(text="Delete", style="link-delete", class_="wp-flyout-delete"))
        return actions

    def fields_by_tab(self) -> dict[str, dict[str, BaseField]]:
        """Group fields by their ``tab`` attribute (``default`` when unset)."""
        grouped: dict[str, dict[str, BaseField]] = {}
        for key, field in self.fields.items():
            grouped.setdefault(field.tab or "default", {})[key] = field
        return grouped

    def find_field(self, field_key: str) -> BaseField | None:
        """Find a field by key, falling back to a match on its ``name``."""
        if field_key in self.fields:
            return self.fields[field_key]
        for key, field in self.fields.items():
            if (field.name or key) == field_key:
                return field
        return None
