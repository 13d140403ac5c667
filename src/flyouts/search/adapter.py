"""Search Callback Adapter - Unified Callback to Widget Protocol.

Flyout search fields are driven by a single host callback with the shape::

    callback(search: str, ids: Sequence | None) -> Mapping[id, label]

The callback is used two ways by the client search widget:

1. **Search mode** - the user is typing. ``search`` holds the term and
   ``ids`` is ``None``. The callback returns matching ``id -> label`` pairs;
   the adapter keeps at most ``page_size`` of them in the callback's order.
2. **Hydration mode** - a form is reloading saved values. ``search`` is the
   empty string and ``ids`` lists the saved ids. The callback returns labels
   for the ids it can resolve; the rest are dropped, or, in tags mode, echoed
   back with the id as its own label since a free-text tag may not match any
   stored entity.

The adapter output is then translated into an ordered list of
:class:`SearchChoice` pairs, which is what the widget consumes.

Examples:
    >>> adapter = SearchCallbackAdapter(lambda search, ids: {5: "Alice", 7: "Bob"}, tags=True)
    >>> adapter.hydrate([5, 7, 99])
    {5: 'Alice', 7: 'Bob', 99: '99'}
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from flyouts.base.errors import CallbackFailure, ConfigurationError
from flyouts.utils.config import get_config_value
from flyouts.utils.logger import get_logger

logger = get_logger("search")

SearchCallback = Callable[[str, Sequence[Any] | None], Mapping[Any, Any]]

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class SearchChoice:
    """One ``{id, label}`` pair shown by the search widget."""

    id: str
    label: str

    def to_select2(self) -> dict[str, str]:
        return {"id": self.id, "text": self.label}


def to_choices(results: Mapping[Any, Any]) -> list[SearchChoice]:
    """Convert an ``id -> label`` mapping into ordered choices.

    Pure and order-preserving: the mapping's insertion order is the display
    order.
    """
    return [SearchChoice(id=str(key), label=str(label)) for key, label in results.items()]


def parse_include(include: str | Iterable[Any] | None) -> list[Any]:
    """Parse a hydration id list such as ``"5,7,99"``.

    Empty entries are dropped. Digit-only entries become ints so they match
    numeric keys; anything else stays a string (free-text tags).
    """
    if not include:
        return []

    raw = include.split(",") if isinstance(include, str) else list(include)
    ids: list[Any] = []
    for item in raw:
        item = item.strip() if isinstance(item, str) else item
        if item in ("", None):
            continue
        if isinstance(item, str) and item.isdigit():
            item = int(item)
        ids.append(item)
    return ids


def _page_size(value: Any) -> int:
    # Env-substituted settings arrive as strings
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Search page size must be an integer, got {value!r}") from e
    if size < 1:
        raise ConfigurationError(f"Search page size must be positive, got {size}")
    return size


class SearchCallbackAdapter:
    """Wraps one unified search callback into search and hydration modes.

    :param callback: Host callback ``(search, ids) -> mapping``
    :param page_size: Maximum results in search mode; defaults to the
        ``flyouts.search.page_size`` setting
    :param tags: Whether free-text tags are allowed, which makes hydration
        keep ids the callback could not resolve
    :param name: Label used in error messages and logs
    """

    def __init__(
        self,
        callback: SearchCallback,
        *,
        page_size: int | None = None,
        tags: bool = False,
        name: str = "search",
    ):
        if not callable(callback):
            raise CallbackFailure(name, "search callback is not callable")

        self.callback = callback
        self.page_size = _page_size(page_size or get_config_value("flyouts.search.page_size", DEFAULT_PAGE_SIZE))
        self.tags = tags
        self.name = name

    def _invoke(self, search: str, ids: list[Any] | None) -> dict[Any, Any]:
        try:
            result = self.callback(search, ids)
        except CallbackFailure:
            raise
        except Exception as e:
            raise CallbackFailure(self.name, str(e)) from e

        if result is None:
            return {}
        if not isinstance(result, Mapping):
            raise CallbackFailure(
                self.name, f"expected a mapping of id to label, got {type(result).__name__}"
            )
        return dict(result)

    def search(self, term: str) -> dict[Any, Any]:
        """Search mode: at most ``page_size`` matches in callback order."""
        results = self._invoke(term, None)
        if len(results) > self.page_size:
            logger.debug(f"{self.name}: truncating {len(results)} results to {self.page_size}")
        return dict(list(results.items())[: self.page_size])

    def hydrate(self, ids: Iterable[Any]) -> dict[Any, Any]:
        """Hydration mode: labels for previously saved ids.

        Ids the callback does not resolve are omitted, unless tags mode is on,
        in which case each one maps to its own string form.
        """
        ids = list(ids)
        if not ids:
            return {}

        results = self._invoke("", ids)
        if not self.tags:
            return results

        # Match by string form so "5" from a request finds an int key 5
        resolved = {str(key) for key in results}
        for item in ids:
            if str(item) not in resolved:
                results[item] = str(item)
                resolved.add(str(item))
        return results

    def query(self, term: str = "", include: str | Iterable[Any] | None = None) -> list[SearchChoice]:
        """Dispatch one widget request: hydration when ``include`` has ids, else search."""
        ids = parse_include(include)
        results = self.hydrate(ids) if ids else self.search(term)
        return to_choices(results)
