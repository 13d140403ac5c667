"""Built-in search callbacks for the derivative field types.

Each factory returns a closure with the unified search callback signature
``callback(search, ids) -> {id: label}``. The closure assembles a query
argument mapping (page size, ordering, search term or id list) and hands it
to the host's :class:`~flyouts.search.stores.ContentStore`.

``store`` may be the store itself or a zero-argument function returning it.
The latter lets a manager resolve the store when the callback runs rather
than when the field was registered.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from flyouts.base.errors import CallbackFailure
from flyouts.search.adapter import DEFAULT_PAGE_SIZE, SearchCallback
from flyouts.search.stores import ContentStore

StoreSource = ContentStore | Callable[[], ContentStore | None] | None


def _resolve_store(store: StoreSource, callback_name: str) -> ContentStore:
    if store is not None and not isinstance(store, ContentStore) and callable(store):
        store = store()
    if store is None:
        raise CallbackFailure(callback_name, "no content store is configured")
    return store


def _absint_ids(ids: Sequence[Any]) -> list[int]:
    result = []
    for item in ids:
        try:
            value = abs(int(item))
        except (TypeError, ValueError):
            continue
        if value:
            result.append(value)
    return result


def search_posts(
    post_type: str | list[str] = "post",
    query_args: Mapping[str, Any] | None = None,
    *,
    store: StoreSource = None,
) -> SearchCallback:
    """Post search: title search, published only, ordered by title."""

    def callback(search: str, ids: Sequence[Any] | None = None) -> dict[Any, str]:
        args: dict[str, Any] = {
            "post_type": post_type,
            "posts_per_page": DEFAULT_PAGE_SIZE,
            "orderby": "title",
            "order": "ASC",
            "post_status": "publish",
            **(query_args or {}),
        }

        if ids:
            args["post__in"] = _absint_ids(ids)
            args["posts_per_page"] = len(ids)
            args["orderby"] = "post__in"
        elif search != "":
            args["s"] = search

        return dict(_resolve_store(store, "posts").query_posts(args))

    callback.__name__ = f"search_posts[{post_type}]"
    return callback


def search_terms(
    taxonomy: str = "category",
    query_args: Mapping[str, Any] | None = None,
    *,
    store: StoreSource = None,
) -> SearchCallback:
    """Taxonomy term search, including empty terms, ordered by name."""

    def callback(search: str, ids: Sequence[Any] | None = None) -> dict[Any, str]:
        args: dict[str, Any] = {
            "taxonomy": taxonomy,
            "hide_empty": False,
            "number": DEFAULT_PAGE_SIZE,
            "orderby": "name",
            "order": "ASC",
            **(query_args or {}),
        }

        if ids:
            args["include"] = _absint_ids(ids)
            args["number"] = len(ids)
        elif search != "":
            args["search"] = search

        return dict(_resolve_store(store, "taxonomy").query_terms(args))

    callback.__name__ = f"search_terms[{taxonomy}]"
    return callback


def search_users(
    role: str | list[str] = "",
    query_args: Mapping[str, Any] | None = None,
    *,
    store: StoreSource = None,
) -> SearchCallback:
    """User search over login, email, and display name.

    ``role`` may be a list or a comma-separated string; empty means all roles.
    """

    def callback(search: str, ids: Sequence[Any] | None = None) -> dict[Any, str]:
        args: dict[str, Any] = {
            "number": DEFAULT_PAGE_SIZE,
            "orderby": "display_name",
            "order": "ASC",
            **(query_args or {}),
        }

        if role:
            roles = role if isinstance(role, list) else [part.strip() for part in role.split(",")]
            args["role__in"] = [r for r in roles if r]

        if ids:
            args["include"] = _absint_ids(ids)
            args["number"] = len(ids)
        elif search != "":
            args["search"] = f"*{search}*"
            args["search_columns"] = ["user_login", "user_email", "display_name"]

        return dict(_resolve_store(store, "users").query_users(args))

    callback.__name__ = f"search_users[{role or 'all'}]"
    return callback
