"""Flyout Registry - Namespace Prefix to Manager Lookup.

The registry maps each namespace prefix to exactly one
:class:`~flyouts.registry.manager.FlyoutManager`, creating managers lazily the
first time a prefix is referenced.

Applications construct a :class:`FlyoutRegistry` at their composition root
and pass it to whatever needs it; tests build a fresh one per case. For the
global convenience functions, a process-wide default instance is available
through :func:`get_registry`, replaceable with :func:`set_registry` and
discarded with :func:`reset_registry`.

Registry Guarantees:
    - ``get_manager(p)`` returns the same manager object for the same ``p``
    - A manager only ever holds flyouts for its own prefix
    - Check-then-create in ``get_manager`` runs under a lock, so concurrent
      requests in a long-lived process never create two managers for one
      prefix

Examples:
    Explicit registry::

        >>> registry = FlyoutRegistry()
        >>> shop = registry.get_manager("shop")
        >>> shop is registry.get_manager("shop")
        True
        >>> registry.has_manager("other")
        False

    Process-wide default::

        >>> from flyouts.registry import get_registry, reset_registry
        >>> get_registry() is get_registry()
        True
        >>> reset_registry()  # tests only

.. seealso::
   :mod:`flyouts.registry.identifiers` : Composite id parsing
   :mod:`flyouts.functions` : Global façade built on the default registry
"""

import threading

from flyouts.base.errors import RegistryError, UnknownManager
from flyouts.base.results import Err, Ok, Result
from flyouts.fields.sanitizer import Sanitizer
from flyouts.registry.identifiers import try_parse_flyout_id
from flyouts.registry.manager import FlyoutManager, PermissionChecker, check_capability
from flyouts.search.stores import ContentStore
from flyouts.utils.logger import get_logger

logger = get_logger("registry")


class FlyoutRegistry:
    """Lookup table from namespace prefix to flyout manager.

    :param content_store: Store handed to every manager for built-in searches
    :param permission_checker: ``checker(capability) -> bool`` handed to every
        manager; ``None`` allows everything
    :param sanitizer: Sanitizer shared by the managers this registry creates
    """

    def __init__(
        self,
        *,
        content_store: ContentStore | None = None,
        permission_checker: PermissionChecker | None = None,
        sanitizer: Sanitizer | None = None,
    ):
        self._managers: dict[str, FlyoutManager] = {}
        self._lock = threading.RLock()
        self._content_store = content_store
        self._permission_checker = permission_checker
        self.sanitizer = sanitizer or Sanitizer()

    def __repr__(self) -> str:
        return f"FlyoutRegistry(prefixes={self.get_prefixes()!r})"

    @classmethod
    def get_instance(cls) -> "FlyoutRegistry":
        """Return the process-wide default registry, creating it on first use."""
        return get_registry()

    # =========================================================================
    # SHARED COLLABORATORS
    # =========================================================================

    @property
    def content_store(self) -> ContentStore | None:
        return self._content_store

    @content_store.setter
    def content_store(self, store: ContentStore | None) -> None:
        with self._lock:
            self._content_store = store
            for manager in self._managers.values():
                manager.content_store = store

    @property
    def permission_checker(self) -> PermissionChecker | None:
        return self._permission_checker

    @permission_checker.setter
    def permission_checker(self, checker: PermissionChecker | None) -> None:
        with self._lock:
            self._permission_checker = checker
            for manager in self._managers.values():
                manager.permission_checker = checker

    def is_allowed(self, capability: str) -> bool:
        return check_capability(self._permission_checker, capability)

    # =========================================================================
    # MANAGER LOOKUP
    # =========================================================================

    def get_manager(self, prefix: str) -> FlyoutManager:
        """Return the manager for ``prefix``, creating an empty one if needed."""
        with self._lock:
            manager = self._managers.get(prefix)
            if manager is None:
                manager = FlyoutManager(
                    prefix,
                    content_store=self._content_store,
                    permission_checker=self._permission_checker,
                    sanitizer=self.sanitizer,
                )
                self._managers[prefix] = manager
                logger.debug(f"Created manager for prefix '{prefix}'")
            return manager

    get_or_create_manager = get_manager

    def has_manager(self, prefix: str) -> bool:
        with self._lock:
            return prefix in self._managers

    has = has_manager

    def lookup(self, prefix: str) -> FlyoutManager | None:
        """Return the manager for ``prefix`` without creating one."""
        with self._lock:
            return self._managers.get(prefix)

    def resolve(self, identifier: str) -> Result[tuple[FlyoutManager, str]]:
        """Resolve a composite id to its existing manager and local flyout id.

        Never creates a manager. Fails with the parse error for malformed ids
        and with :class:`UnknownManager` when the prefix is not registered.
        """
        match try_parse_flyout_id(identifier):
            case Err() as failure:
                return failure
            case Ok(parsed):
                manager = self.lookup(parsed.prefix)
                if manager is None:
                    return Err(UnknownManager(parsed.prefix))
                return Ok((manager, parsed.flyout_id))

    def register_manager(self, prefix: str, manager: FlyoutManager) -> "FlyoutRegistry":
        """Install a preconfigured manager under ``prefix``.

        :raises RegistryError: If ``prefix`` is taken or does not match the
            manager's own prefix
        """
        if manager.prefix != prefix:
            raise RegistryError(
                f'Manager prefix "{manager.prefix}" does not match registry prefix "{prefix}"'
            )
        with self._lock:
            if prefix in self._managers:
                raise RegistryError(f'Manager with prefix "{prefix}" is already registered')
            self._managers[prefix] = manager
        return self

    def remove_manager(self, prefix: str) -> bool:
        with self._lock:
            return self._managers.pop(prefix, None) is not None

    def get_all_managers(self) -> dict[str, FlyoutManager]:
        with self._lock:
            return dict(self._managers)

    def get_prefixes(self) -> list[str]:
        with self._lock:
            return list(self._managers)

    def count(self) -> int:
        return len(self)

    def __len__(self) -> int:
        with self._lock:
            return len(self._managers)

    def clear(self) -> "FlyoutRegistry":
        with self._lock:
            self._managers.clear()
        return self

    def get_stats(self) -> dict[str, object]:
        """Summary of registered namespaces and flyouts, for debugging."""
        managers = self.get_all_managers()
        return {
            "managers": len(managers),
            "flyouts": sum(len(manager) for manager in managers.values()),
            "prefixes": list(managers),
            "flyout_ids": {prefix: list(manager.get_flyouts()) for prefix, manager in managers.items()},
        }


# ==============================================================================
# PROCESS-WIDE DEFAULT REGISTRY
# ==============================================================================

_registry: FlyoutRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> FlyoutRegistry:
    """Return the process-wide default registry, creating it on first call."""
    global _registry

    if _registry is None:
        with _registry_lock:
            if _registry is None:
                logger.debug("Creating default registry instance...")
                _registry = FlyoutRegistry()
    return _registry


def set_registry(registry: FlyoutRegistry) -> None:
    """Install ``registry`` as the process-wide default."""
    global _registry
    with _registry_lock:
        _registry = registry


def reset_registry() -> None:
    """Discard the default registry; the next get_registry() builds a fresh one.

    .. warning::
       Drops every manager and flyout held by the default registry. Intended
       for tests.
    """
    global _registry
    with _registry_lock:
        if _registry is not None:
            _registry.clear()
        _registry = None
