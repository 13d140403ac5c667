"""
Pytest configuration and shared test utilities.

This module provides shared fixtures for all flyouts tests: an isolated
registry per test, cleared global state, and an in-memory content store with
a small known data set.
"""

import pytest

from flyouts.registry import FlyoutRegistry, reset_registry
from flyouts.search import InMemoryContentStore, Post, Term, User
from flyouts.utils.config import reset_config

# ===================================================================
# Global State Isolation
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_globals(monkeypatch, tmp_path):
    """Reset the default registry and configuration around every test.

    The working directory is moved to an empty temp dir so a stray
    ``flyouts.yml`` never leaks into a test.
    """
    monkeypatch.delenv("FLYOUTS_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    reset_registry()
    reset_config()
    yield
    reset_registry()
    reset_config()


# ===================================================================
# Content Store
# ===================================================================


def create_test_store() -> InMemoryContentStore:
    """Factory for a content store with a few posts, terms and users.

    Examples:
        Search posts by title::

            store = create_test_store()
            dict(store.query_posts({"post_type": "page", "s": "about"}))
    """
    return InMemoryContentStore(
        posts=[
            Post(1, "Hello World"),
            Post(2, "About Us", post_type="page"),
            Post(3, "Contact", post_type="page"),
            Post(4, "Draft Notes", status="draft"),
            Post(5, "Pricing", post_type="page"),
        ],
        terms=[
            Term(10, "News"),
            Term(11, "Releases"),
            Term(12, "Blue", taxonomy="color"),
        ],
        users=[
            User(5, "Alice", login="alice", email="alice@example.com", roles=["customer"]),
            User(7, "Bob", login="bob", email="bob@example.com", roles=["editor"]),
            User(9, "Carol", login="carol", email="carol@shop.test", roles=["customer"]),
        ],
    )


@pytest.fixture
def store():
    """In-memory content store with known posts, terms and users."""
    return create_test_store()


@pytest.fixture
def registry(store):
    """Fresh registry wired to the test content store."""
    return FlyoutRegistry(content_store=store)


@pytest.fixture
def people():
    """Host search callback that resolves ids 5 and 7 only."""
    data = {5: "Alice", 7: "Bob", 9: "Carol"}

    def callback(search, ids=None):
        if ids:
            return {item: data[item] for item in ids if item in (5, 7)}
        return {key: label for key, label in data.items() if search.lower() in label.lower()}

    return callback
