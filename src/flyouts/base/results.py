"""Result values for parse and lookup operations.

Parsing a composite id and resolving a manager are expected to fail for bad
input, so those seams return :class:`Ok` or :class:`Err` instead of raising.
Callers branch on the result with ``match``::

    match try_parse_flyout_id("shop_edit_product"):
        case Ok(identifier):
            ...
        case Err(error):
            logger.error(str(error))
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from flyouts.base.errors import FlyoutError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result wrapping a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed result wrapping the error that explains the failure."""

    error: FlyoutError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Ok[T] | Err
