"""Base error and result types shared across the package."""

from .errors import (
    CallbackFailure,
    ConfigurationError,
    EndpointError,
    FlyoutError,
    InvalidIdentifier,
    MissingRequiredConfig,
    RegistryError,
    UnknownFlyout,
    UnknownManager,
)
from .results import Err, Ok, Result

__all__ = [
    "FlyoutError",
    "RegistryError",
    "ConfigurationError",
    "InvalidIdentifier",
    "UnknownManager",
    "UnknownFlyout",
    "MissingRequiredConfig",
    "CallbackFailure",
    "EndpointError",
    "Ok",
    "Err",
    "Result",
]
