"""Composite flyout identifier parsing.

A flyout is addressed across the whole system by a composite id of the form
``"<prefix>_<flyout_id>"``. The prefix selects the manager namespace and the
remainder names the flyout inside it. Only the first underscore splits, so
``"shop_edit_product"`` is prefix ``"shop"`` and flyout ``"edit_product"``.

No normalization is applied; ``"Shop_edit"`` and ``"shop_edit"`` address
different namespaces.
"""

from dataclasses import dataclass

from flyouts.base.errors import InvalidIdentifier
from flyouts.base.results import Err, Ok, Result

SEPARATOR = "_"


@dataclass(frozen=True)
class FlyoutIdentifier:
    """A composite id split into namespace prefix and local flyout id."""

    prefix: str
    flyout_id: str

    @property
    def composite(self) -> str:
        return f"{self.prefix}{SEPARATOR}{self.flyout_id}"

    def __str__(self) -> str:
        return self.composite


def try_parse_flyout_id(identifier: str) -> Result[FlyoutIdentifier]:
    """Split ``identifier`` at its first underscore, returning a result."""
    if not isinstance(identifier, str):
        return Err(InvalidIdentifier(repr(identifier), "identifier must be a string"))

    prefix, separator, flyout_id = identifier.partition(SEPARATOR)
    if not separator:
        return Err(InvalidIdentifier(identifier, "expected the form 'prefix_name'"))
    if not prefix:
        return Err(InvalidIdentifier(identifier, "prefix is empty"))
    if not flyout_id:
        return Err(InvalidIdentifier(identifier, "flyout id is empty"))

    return Ok(FlyoutIdentifier(prefix=prefix, flyout_id=flyout_id))


def parse_flyout_id(identifier: str) -> FlyoutIdentifier:
    """Split ``identifier`` at its first underscore.

    :raises InvalidIdentifier: If there is no underscore or either part is empty
    """
    return try_parse_flyout_id(identifier).unwrap()
