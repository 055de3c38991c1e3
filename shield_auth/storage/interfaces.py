"""
SHIELD Auth - Interfaces Storage

Contrats de persistance des utilisateurs et des refresh tokens.
Les absences sont des valeurs (None, False, 0), pas des exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol


def normalize_email(email: str) -> str:
    """Forme canonique d'un email (comparaison insensible à la casse)."""
    return email.strip().lower()


@dataclass
class User:
    """
    Identité utilisateur.

    Attributes:
        id: Identifiant unique stable (UUID)
        email: Email normalisé, unique
        password_hash: Hash opaque, jamais exporté ni loggé
        created_at: Horodatage création
        updated_at: Horodatage dernière modification
    """

    id: str
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        if not self.id:
            raise ValueError("User id cannot be empty")
        if not self.email or "@" not in self.email:
            raise ValueError("User email must be a valid email")
        if not self.password_hash:
            raise ValueError("User password hash cannot be empty")

    def to_public(self) -> Dict[str, Any]:
        """Vue exportable (sans hash)."""
        return {"id": self.id, "email": self.email, "created_at": self.created_at}


@dataclass
class RefreshToken:
    """
    Session persistée.

    La présence de la ligne fait foi: une signature valide et non
    expirée est nécessaire mais pas suffisante.

    Attributes:
        id: Identifiant de la ligne
        user_id: Utilisateur propriétaire
        token: Token signé opaque, unique
        expires_at: Horodatage expiration
        created_at: Horodatage création
    """

    id: str
    user_id: str
    token: str = field(repr=False)
    expires_at: datetime
    created_at: datetime

    def __post_init__(self):
        if not self.id or not self.user_id:
            raise ValueError("RefreshToken id and user_id are required")
        if not self.token:
            raise ValueError("RefreshToken token cannot be empty")
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")

    def is_expired(self, now: datetime) -> bool:
        """True si expiré à l'instant donné."""
        return now >= self.expires_at


class Cursor(Protocol):
    """Protocol pour curseur DB-API."""

    rowcount: int

    def execute(self, sql: str, params: Any = None) -> Any:
        """Exécute une requête SQL."""
        ...

    def fetchone(self) -> Optional[tuple]:
        """Récupère la prochaine ligne."""
        ...

    def fetchall(self) -> List[tuple]:
        """Récupère tous les résultats de la dernière requête."""
        ...

    def close(self) -> None:
        ...


class Connection(Protocol):
    """Protocol pour connexion base de données DB-API (psycopg2)."""

    def cursor(self) -> Cursor:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class ICredentialStore(ABC):
    """Stockage des utilisateurs, clé unique: email normalisé."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Recherche insensible à la casse. None si absent."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """None si absent."""
        pass

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """
        Crée l'utilisateur.

        Raises:
            ConflictError: Email déjà utilisé (contrainte d'unicité)
        """
        pass


class IRefreshTokenStore(ABC):
    """
    Stockage des refresh tokens, source de vérité des sessions.

    find_by_token retournant None = session morte, même si la
    signature du token est encore valide.
    """

    @abstractmethod
    async def save(self, token: RefreshToken) -> RefreshToken:
        pass

    @abstractmethod
    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        pass

    @abstractmethod
    async def find_by_id(self, token_id: str) -> Optional[RefreshToken]:
        pass

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> List[RefreshToken]:
        pass

    @abstractmethod
    async def delete_by_token(self, token: str) -> bool:
        """Returns: True si une ligne a été supprimée."""
        pass

    @abstractmethod
    async def delete_by_id(self, token_id: str) -> bool:
        """Returns: True si une ligne a été supprimée."""
        pass

    @abstractmethod
    async def delete_by_user_id(self, user_id: str) -> int:
        """Révoque toutes les sessions d'un utilisateur. Returns: nombre supprimé."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Purge hors bande des lignes expirées. Returns: nombre supprimé."""
        pass

    @abstractmethod
    async def rotate(self, old_token_id: str, replacement: RefreshToken) -> bool:
        """
        Supprime l'ancienne ligne et insère la nouvelle, atomiquement.

        Returns:
            False si l'ancienne ligne n'existe plus (rien n'est inséré)
        """
        pass
