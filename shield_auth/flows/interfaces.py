"""
SHIELD Auth - Flows - Types

Résultats des opérations publiques consommées par la couche transport.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..storage.interfaces import User


@dataclass(frozen=True)
class PublicUser:
    """Identité exportable (jamais de hash)."""

    id: str
    email: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=user.id, email=user.email, created_at=user.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "created_at": self.created_at}


@dataclass(frozen=True)
class TokenPair:
    """Access token + refresh token."""

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        return "TokenPair(access_token=***, refresh_token=***)"


@dataclass(frozen=True)
class AuthResult:
    """Résultat de Register et Login."""

    user: PublicUser
    access_token: str
    refresh_token: str

    @property
    def tokens(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)

    def __repr__(self) -> str:
        return f"AuthResult(user={self.user!r}, access_token=***, refresh_token=***)"


@dataclass(frozen=True)
class LogoutResult:
    """Confirmation de déconnexion."""

    message: str
    revoked: bool = True


@dataclass(frozen=True)
class LoginContext:
    """Contexte client optionnel (journalisé, non persisté)."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
