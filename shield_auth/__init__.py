"""
SHIELD Auth

Coeur d'authentification par identifiants:
- Inscription, connexion, rotation des refresh tokens, déconnexion
- Mots de passe bcrypt, tokens JWT signés par deux secrets distincts
- Verrouillage temporaire des comptes après échecs répétés
"""

from .container import AuthServices, build_services
from .core import (
    AuthSettings,
    ConfigLoader,
    ShieldAuthError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    ServiceError,
    ConfigurationError,
)

__version__ = "1.0.0"

__all__ = [
    "AuthServices",
    "build_services",
    "AuthSettings",
    "ConfigLoader",
    "ShieldAuthError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "ServiceError",
    "ConfigurationError",
]
