"""Search callbacks, the callback adapter, and content stores."""

from .adapter import (
    DEFAULT_PAGE_SIZE,
    SearchCallback,
    SearchCallbackAdapter,
    SearchChoice,
    parse_include,
    to_choices,
)
from .callbacks import search_posts, search_terms, search_users
from .stores import ContentStore, InMemoryContentStore, Post, Term, User

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "SearchCallback",
    "SearchCallbackAdapter",
    "SearchChoice",
    "parse_include",
    "to_choices",
    "search_posts",
    "search_terms",
    "search_users",
    "ContentStore",
    "InMemoryContentStore",
    "Post",
    "Term",
    "User",
]
