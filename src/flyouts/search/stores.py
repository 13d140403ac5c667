"""Content stores backing the built-in search callbacks.

The built-in ``post``, ``taxonomy`` and ``user`` field types search the host's
content. A host exposes that content through the :class:`ContentStore`
protocol; each query receives the argument mapping assembled by
:mod:`flyouts.search.callbacks` and yields ``(id, label)`` pairs in result
order.

:class:`InMemoryContentStore` implements the protocol over plain records and
understands the same argument keys, which is enough for tests, demos, and
small hosts that keep their content in memory.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ContentStore(Protocol):
    """Host content lookups used by the built-in search callbacks."""

    def query_posts(self, args: Mapping[str, Any]) -> Iterable[tuple[Any, str]]: ...

    def query_terms(self, args: Mapping[str, Any]) -> Iterable[tuple[Any, str]]: ...

    def query_users(self, args: Mapping[str, Any]) -> Iterable[tuple[Any, str]]: ...


@dataclass
class Post:
    id: int
    title: str
    post_type: str = "post"
    status: str = "publish"


@dataclass
class Term:
    id: int
    name: str
    taxonomy: str = "category"


@dataclass
class User:
    id: int
    display_name: str
    login: str = ""
    email: str = ""
    roles: list[str] = field(default_factory=list)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _limit(items: list[Any], number: Any) -> list[Any]:
    if number is None or int(number) < 0:
        return items
    return items[: int(number)]


def _order(items: list[Any], include: list[Any], attr: str, order: str) -> list[Any]:
    """Order by the include list when given, else by ``attr``."""
    if include:
        position = {item_id: index for index, item_id in enumerate(include)}
        return sorted(items, key=lambda item: position[item.id])
    return sorted(items, key=lambda item: getattr(item, attr).lower(), reverse=order.upper() == "DESC")


class InMemoryContentStore:
    """ContentStore over in-memory posts, terms, and users."""

    def __init__(
        self,
        posts: Iterable[Post] = (),
        terms: Iterable[Term] = (),
        users: Iterable[User] = (),
    ):
        self.posts = list(posts)
        self.terms = list(terms)
        self.users = list(users)

    def query_posts(self, args: Mapping[str, Any]) -> Iterator[tuple[Any, str]]:
        post_types = _as_list(args.get("post_type", "post"))
        statuses = _as_list(args.get("post_status", "publish"))
        include = _as_list(args.get("post__in"))
        search = str(args.get("s", "")).lower()

        matches = [
            post
            for post in self.posts
            if ("any" in post_types or post.post_type in post_types)
            and ("any" in statuses or post.status in statuses)
            and (not include or post.id in include)
            and search in post.title.lower()
        ]
        matches = _order(matches, include, "title", args.get("order", "ASC"))
        for post in _limit(matches, args.get("posts_per_page")):
            yield post.id, post.title

    def query_terms(self, args: Mapping[str, Any]) -> Iterator[tuple[Any, str]]:
        taxonomies = _as_list(args.get("taxonomy", "category"))
        include = _as_list(args.get("include"))
        search = str(args.get("search", "")).lower()

        matches = [
            term
            for term in self.terms
            if term.taxonomy in taxonomies
            and (not include or term.id in include)
            and search in term.name.lower()
        ]
        matches = _order(matches, include, "name", args.get("order", "ASC"))
        for term in _limit(matches, args.get("number")):
            yield term.id, term.name

    def query_users(self, args: Mapping[str, Any]) -> Iterator[tuple[Any, str]]:
        roles = _as_list(args.get("role__in"))
        include = _as_list(args.get("include"))
        # "*term*" wildcard search over the configured columns
        search = str(args.get("search", "")).strip("*").lower()
        columns = args.get("search_columns") or ["user_login", "user_email", "display_name"]
        column_attrs = {"user_login": "login", "user_email": "email", "display_name": "display_name"}

        def matches_search(user: User) -> bool:
            if not search:
                return True
            return any(
                search in str(getattr(user, column_attrs[column], "")).lower()
                for column in columns
                if column in column_attrs
            )

        matches = [
            user
            for user in self.users
            if (not roles or set(roles) & set(user.roles))
            and (not include or user.id in include)
            and matches_search(user)
        ]
        matches = _order(matches, include, "display_name", args.get("order", "ASC"))
        for user in _limit(matches, args.get("number")):
            yield user.id, user.display_name
