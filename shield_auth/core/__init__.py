"""
SHIELD Auth - Core

Configuration et taxonomie des erreurs partagées par tous les modules.
"""

from .errors import (
    ShieldAuthError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    ServiceError,
    ConfigurationError,
    wrap_unknown_error,
)
from .config_loader import AuthSettings, ConfigLoader, parse_duration

__all__ = [
    # Configuration
    "AuthSettings",
    "ConfigLoader",
    "parse_duration",
    # Exceptions
    "ShieldAuthError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "ServiceError",
    "ConfigurationError",
    "wrap_unknown_error",
]
