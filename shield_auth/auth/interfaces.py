"""
SHIELD Auth - Interfaces Auth

Définit les contrats pour le hachage des mots de passe et la
signature/vérification des tokens.
Toute implémentation DOIT respecter ces interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class TokenPayload:
    """
    Claims extraits et validés d'un token signé.

    Attributes:
        user_id: Identifiant utilisateur (claim userId)
        email: Email normalisé (claim email)
        issued_at: Date émission (iat)
        expires_at: Date expiration (exp)
        token_id: Identifiant aléatoire, refresh token uniquement (tokenId)
    """

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
    token_id: Optional[str] = None

    def __post_init__(self):
        """Validation des contraintes."""
        if not self.user_id or not self.email:
            raise ValueError("user_id and email are required")
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")


class IPasswordHasher(ABC):
    """
    Interface hachage des mots de passe.

    Une non-correspondance est un booléen False, jamais une exception.
    """

    @abstractmethod
    def hash(self, password: str) -> str:
        """
        Hache un mot de passe (fonction lente, sel inclus dans la sortie).

        Returns:
            Hash encodé (algorithme, coût et sel compris)
        """
        pass

    @abstractmethod
    def compare(self, password: str, hashed: str) -> bool:
        """
        Compare en temps constant un mot de passe et un hash.

        Returns:
            True si correspondance
        """
        pass

    @abstractmethod
    def dummy_compare(self, password: str) -> bool:
        """
        Comparaison factice au même coût que compare().

        Returns:
            Toujours False
        """
        pass


class ITokenIssuer(ABC):
    """
    Interface signature/vérification des tokens.

    Access et refresh tokens sont signés avec deux secrets distincts.
    """

    DEFAULT_ACCESS_TOKEN_SECONDS: int = 900  # 15 minutes
    DEFAULT_REFRESH_TOKEN_SECONDS: int = 7 * 86400  # 7 jours

    access_token_ttl: timedelta
    refresh_token_ttl: timedelta

    @abstractmethod
    def generate_access_token(self, user_id: str, email: str) -> str:
        """Signe un access token {userId, email} avec le secret d'accès."""
        pass

    @abstractmethod
    def generate_refresh_token(self, user_id: str, email: str) -> str:
        """Signe un refresh token {userId, email, tokenId} avec le secret de refresh."""
        pass

    @abstractmethod
    def verify_access_token(self, token: str) -> TokenPayload:
        """
        Vérifie signature et expiration d'un access token.

        Raises:
            AuthenticationError: Token invalide, falsifié ou expiré
        """
        pass

    @abstractmethod
    def verify_refresh_token(self, token: str) -> TokenPayload:
        """
        Vérifie signature et expiration d'un refresh token.

        Raises:
            AuthenticationError: Token invalide, falsifié ou expiré
        """
        pass
