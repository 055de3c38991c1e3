"""
SHIELD Auth - Credentials & Tokens

Hachage des mots de passe (bcrypt) et émission/vérification
des access et refresh tokens (JWT, deux secrets).
"""

from .interfaces import IPasswordHasher, ITokenIssuer, TokenPayload
from .password_hasher import PasswordHasher
from .token_issuer import TokenIssuer, ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE

__all__ = [
    # Interfaces
    "IPasswordHasher",
    "ITokenIssuer",
    # Data classes
    "TokenPayload",
    # Implementations
    "PasswordHasher",
    "TokenIssuer",
    # Constants
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
]
