"""
SHIELD Auth - In-Memory Stores

Stockage en mémoire des utilisateurs et refresh tokens.

Note:
    Chaque opération s'exécute sans point d'attente (await): elle est
    donc atomique vis-à-vis de la boucle asyncio. Utilisé pour les tests
    et le développement; PostgreSQL en production.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Set

from ..core.errors import ConflictError
from .interfaces import (
    ICredentialStore,
    IRefreshTokenStore,
    RefreshToken,
    User,
    normalize_email,
)


class InMemoryCredentialStore(ICredentialStore):
    """
    Utilisateurs indexés par id et par email normalisé.

    Example:
        store = InMemoryCredentialStore()
        await store.save(user)
        found = await store.find_by_email("A@Test.com")
    """

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._ids_by_email: Dict[str, str] = {}  # email normalisé -> user_id

    async def find_by_email(self, email: str) -> Optional[User]:
        user_id = self._ids_by_email.get(normalize_email(email))
        if user_id is None:
            return None
        return self._users.get(user_id)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return self._users.get(user_id)

    async def exists_by_email(self, email: str) -> bool:
        return normalize_email(email) in self._ids_by_email

    async def save(self, user: User) -> User:
        """
        Raises:
            ConflictError: Email ou id déjà présent
        """
        key = normalize_email(user.email)
        # Contrainte d'unicité: tranche la course check-then-insert
        if key in self._ids_by_email or user.id in self._users:
            raise ConflictError("User with this email already exists")

        stored = replace(user, email=key)
        self._users[stored.id] = stored
        self._ids_by_email[key] = stored.id
        return stored

    def count(self) -> int:
        """Nombre d'utilisateurs stockés."""
        return len(self._users)


class InMemoryRefreshTokenStore(IRefreshTokenStore):
    """
    Refresh tokens indexés par id, par valeur et par utilisateur.

    Example:
        store = InMemoryRefreshTokenStore()
        await store.save(token)
        alive = await store.find_by_token(token.token) is not None
    """

    def __init__(self):
        self._tokens: Dict[str, RefreshToken] = {}
        self._ids_by_value: Dict[str, str] = {}  # token -> id
        self._user_tokens: Dict[str, Set[str]] = {}  # user_id -> ids

    async def save(self, token: RefreshToken) -> RefreshToken:
        self._insert(token)
        return token

    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        token_id = self._ids_by_value.get(token)
        if token_id is None:
            return None
        return self._tokens.get(token_id)

    async def find_by_id(self, token_id: str) -> Optional[RefreshToken]:
        return self._tokens.get(token_id)

    async def find_by_user_id(self, user_id: str) -> List[RefreshToken]:
        tokens = [self._tokens[i] for i in self._user_tokens.get(user_id, set())]
        # Plus récentes en premier
        tokens.sort(key=lambda t: t.created_at, reverse=True)
        return tokens

    async def delete_by_token(self, token: str) -> bool:
        token_id = self._ids_by_value.get(token)
        if token_id is None:
            return False
        return self._remove(token_id)

    async def delete_by_id(self, token_id: str) -> bool:
        return self._remove(token_id)

    async def delete_by_user_id(self, user_id: str) -> int:
        token_ids = list(self._user_tokens.get(user_id, set()))  # Copie avant suppression
        return sum(1 for token_id in token_ids if self._remove(token_id))

    async def delete_expired(self, now: datetime) -> int:
        expired_ids = [t.id for t in self._tokens.values() if t.is_expired(now)]
        return sum(1 for token_id in expired_ids if self._remove(token_id))

    async def rotate(self, old_token_id: str, replacement: RefreshToken) -> bool:
        if old_token_id not in self._tokens:
            return False
        if replacement.token in self._ids_by_value or replacement.id in self._tokens:
            raise ConflictError("Refresh token already stored")
        self._remove(old_token_id)
        self._insert(replacement)
        return True

    def count(self) -> int:
        """Nombre de sessions stockées."""
        return len(self._tokens)

    def _insert(self, token: RefreshToken) -> None:
        if token.id in self._tokens or token.token in self._ids_by_value:
            raise ConflictError("Refresh token already stored")
        self._tokens[token.id] = token
        self._ids_by_value[token.token] = token.id
        self._user_tokens.setdefault(token.user_id, set()).add(token.id)

    def _remove(self, token_id: str) -> bool:
        token = self._tokens.pop(token_id, None)
        if token is None:
            return False
        self._ids_by_value.pop(token.token, None)
        user_ids = self._user_tokens.get(token.user_id)
        if user_ids is not None:
            user_ids.discard(token_id)
            if not user_ids:
                del self._user_tokens[token.user_id]
        return True
