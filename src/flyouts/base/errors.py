"""Exception hierarchy for the flyout registry.

All exceptions raised by this package derive from :class:`FlyoutError`, so
hosts that want a single catch-all at their own boundary can use it. The
global façade functions in :mod:`flyouts.functions` already catch these at
their boundary, log them, and return a safe default.

Exception Families:
    - **Identifier errors**: :class:`InvalidIdentifier` for malformed
      composite ids such as ``"shop"`` or ``"_edit"``
    - **Lookup errors**: :class:`UnknownManager` and :class:`UnknownFlyout`
    - **Configuration errors**: :class:`ConfigurationError` and its
      :class:`MissingRequiredConfig` specialisation
    - **Callback errors**: :class:`CallbackFailure` for host supplied
      load/save/delete/search callbacks that raise or return the wrong shape
    - **Endpoint errors**: :class:`EndpointError` carrying a machine code and
      an HTTP-style status for the transport layer to translate

.. seealso::
   :mod:`flyouts.base.results` : Result values used instead of exceptions
   at the parse/lookup seam
"""

from typing import Any


class FlyoutError(Exception):
    """Base exception for all flyout-related errors."""

    pass


class RegistryError(FlyoutError):
    """Exception for registry and manager lookup errors."""

    pass


class ConfigurationError(FlyoutError):
    """Exception for invalid flyout or package configuration.

    Raised when a flyout config or a field spec fails validation, or when the
    YAML settings file cannot be used.
    """

    pass


class InvalidIdentifier(FlyoutError):
    """Raised when a composite flyout id cannot be split into prefix and id.

    :param identifier: The offending composite id
    :type identifier: str
    :param reason: Why the id was rejected
    :type reason: str
    """

    def __init__(self, identifier: str, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f'Invalid flyout identifier "{identifier}": {reason}')


class UnknownManager(RegistryError):
    """Raised when no manager is registered for a namespace prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f'Flyout manager "{prefix}" not found')


class UnknownFlyout(RegistryError):
    """Raised when a manager has no flyout registered under an id."""

    def __init__(self, prefix: str, flyout_id: str):
        self.prefix = prefix
        self.flyout_id = flyout_id
        super().__init__(f'Flyout "{flyout_id}" not found in manager "{prefix}"')


class MissingRequiredConfig(ConfigurationError):
    """Raised when a flyout config lacks a required key such as ``fields``."""

    def __init__(self, key: str, flyout_id: str | None = None):
        self.key = key
        self.flyout_id = flyout_id
        target = f' for flyout "{flyout_id}"' if flyout_id else ""
        super().__init__(f"Missing required config key '{key}'{target}")


class CallbackFailure(FlyoutError):
    """Raised when a host callback fails or returns an unexpected shape.

    :param callback_name: Which callback failed (``load``, ``save``, ``search``...)
    :type callback_name: str
    :param message: Description of the failure
    :type message: str
    """

    def __init__(self, callback_name: str, message: str):
        self.callback_name = callback_name
        super().__init__(f"{callback_name} callback failed: {message}")


class EndpointError(FlyoutError):
    """Error returned by an endpoint handler.

    Mirrors the shape a REST layer needs to build an error response: a stable
    machine code, a human message, and a status code.
    """

    def __init__(self, code: str, message: str, status: int = 500):
        self.code = code
        self.message = message
        self.status = status
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status},
        }
