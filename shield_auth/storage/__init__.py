"""
SHIELD Auth - Storage

Persistance des utilisateurs (CredentialStore) et des sessions
(RefreshTokenStore): implémentations mémoire et PostgreSQL.
"""

from .interfaces import (
    ICredentialStore,
    IRefreshTokenStore,
    User,
    RefreshToken,
    Connection,
    normalize_email,
)
from .memory import InMemoryCredentialStore, InMemoryRefreshTokenStore
from .postgres import (
    PostgresCredentialStore,
    PostgresRefreshTokenStore,
    SCHEMA_STATEMENTS,
    apply_schema,
    connect,
)

__all__ = [
    # Interfaces
    "ICredentialStore",
    "IRefreshTokenStore",
    "Connection",
    # Data classes
    "User",
    "RefreshToken",
    "normalize_email",
    # Implementations
    "InMemoryCredentialStore",
    "InMemoryRefreshTokenStore",
    "PostgresCredentialStore",
    "PostgresRefreshTokenStore",
    # Schema
    "SCHEMA_STATEMENTS",
    "apply_schema",
    "connect",
]
