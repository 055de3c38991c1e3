"""
SHIELD Auth - PostgreSQL Stores

Persistance des utilisateurs et refresh tokens via une connexion
DB-API (psycopg2). Les appels bloquants sont exécutés dans un thread
(asyncio.to_thread) pour ne pas bloquer la boucle.
"""

import asyncio
import threading
from datetime import datetime
from typing import Any, Callable, List, Optional, TypeVar

import psycopg2
from psycopg2 import errors as pg_errors

from ..core.errors import ConflictError
from .interfaces import (
    Connection,
    Cursor,
    ICredentialStore,
    IRefreshTokenStore,
    RefreshToken,
    User,
    normalize_email,
)


T = TypeVar("T")


SCHEMA_STATEMENTS: List[str] = [
    """CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  email TEXT NOT NULL UNIQUE,
  password_hash TEXT NOT NULL,
  created_at TIMESTAMPTZ NOT NULL,
  updated_at TIMESTAMPTZ NOT NULL
);""",
    """CREATE TABLE IF NOT EXISTS refresh_tokens (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  token TEXT NOT NULL UNIQUE,
  expires_at TIMESTAMPTZ NOT NULL,
  created_at TIMESTAMPTZ NOT NULL,
  CHECK (expires_at > created_at)
);""",
    "CREATE INDEX IF NOT EXISTS refresh_tokens_user_id_idx ON refresh_tokens (user_id);",
    "CREATE INDEX IF NOT EXISTS refresh_tokens_expires_at_idx ON refresh_tokens (expires_at);",
]

_USER_COLUMNS = "id, email, password_hash, created_at, updated_at"
_TOKEN_COLUMNS = "id, user_id, token, expires_at, created_at"


def connect(dsn: str) -> Connection:
    """Ouvre une connexion psycopg2."""
    return psycopg2.connect(dsn)


def apply_schema(connection: Connection) -> None:
    """
    Crée les tables si absentes.

    Args:
        connection: Connexion à la base de données
    """
    cursor = connection.cursor()
    try:
        for statement in SCHEMA_STATEMENTS:
            cursor.execute(statement)
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        cursor.close()


class _PostgresStore:
    """Exécution transactionnelle partagée par les deux stores."""

    def __init__(self, connection: Connection, lock: Optional[threading.Lock] = None):
        """
        Args:
            connection: Connexion DB-API
            lock: Verrou partagé quand plusieurs stores utilisent la même connexion
        """
        self._connection = connection
        # Une connexion psycopg2 = une transaction à la fois
        self._lock = lock or threading.Lock()

    async def _run(self, work: Callable[[Cursor], T]) -> T:
        return await asyncio.to_thread(self._transaction, work)

    def _transaction(self, work: Callable[[Cursor], T]) -> T:
        with self._lock:
            cursor = self._connection.cursor()
            try:
                result = work(cursor)
                self._connection.commit()
                return result
            except Exception:
                self._connection.rollback()
                raise
            finally:
                cursor.close()


def _row_to_user(row: Any) -> User:
    return User(
        id=row[0],
        email=row[1],
        password_hash=row[2],
        created_at=row[3],
        updated_at=row[4],
    )


def _row_to_token(row: Any) -> RefreshToken:
    return RefreshToken(
        id=row[0],
        user_id=row[1],
        token=row[2],
        expires_at=row[3],
        created_at=row[4],
    )


class PostgresCredentialStore(_PostgresStore, ICredentialStore):
    """Table users, unicité garantie par la contrainte UNIQUE(email)."""

    async def find_by_email(self, email: str) -> Optional[User]:
        def work(cursor: Cursor) -> Optional[User]:
            cursor.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
                (normalize_email(email),),
            )
            row = cursor.fetchone()
            return _row_to_user(row) if row else None

        return await self._run(work)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        def work(cursor: Cursor) -> Optional[User]:
            cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            row = cursor.fetchone()
            return _row_to_user(row) if row else None

        return await self._run(work)

    async def exists_by_email(self, email: str) -> bool:
        def work(cursor: Cursor) -> bool:
            cursor.execute("SELECT 1 FROM users WHERE email = %s", (normalize_email(email),))
            return cursor.fetchone() is not None

        return await self._run(work)

    async def save(self, user: User) -> User:
        email = normalize_email(user.email)

        def work(cursor: Cursor) -> User:
            cursor.execute(
                f"INSERT INTO users ({_USER_COLUMNS}) VALUES (%s, %s, %s, %s, %s) "
                f"RETURNING {_USER_COLUMNS}",
                (user.id, email, user.password_hash, user.created_at, user.updated_at),
            )
            return _row_to_user(cursor.fetchone())

        try:
            return await self._run(work)
        except pg_errors.UniqueViolation:
            raise ConflictError("User with this email already exists") from None


class PostgresRefreshTokenStore(_PostgresStore, IRefreshTokenStore):
    """Table refresh_tokens."""

    async def save(self, token: RefreshToken) -> RefreshToken:
        def work(cursor: Cursor) -> RefreshToken:
            self._insert(cursor, token)
            return token

        try:
            return await self._run(work)
        except pg_errors.UniqueViolation:
            raise ConflictError("Refresh token already stored") from None

    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        def work(cursor: Cursor) -> Optional[RefreshToken]:
            cursor.execute(f"SELECT {_TOKEN_COLUMNS} FROM refresh_tokens WHERE token = %s", (token,))
            row = cursor.fetchone()
            return _row_to_token(row) if row else None

        return await self._run(work)

    async def find_by_id(self, token_id: str) -> Optional[RefreshToken]:
        def work(cursor: Cursor) -> Optional[RefreshToken]:
            cursor.execute(f"SELECT {_TOKEN_COLUMNS} FROM refresh_tokens WHERE id = %s", (token_id,))
            row = cursor.fetchone()
            return _row_to_token(row) if row else None

        return await self._run(work)

    async def find_by_user_id(self, user_id: str) -> List[RefreshToken]:
        def work(cursor: Cursor) -> List[RefreshToken]:
            cursor.execute(
                f"SELECT {_TOKEN_COLUMNS} FROM refresh_tokens WHERE user_id = %s "
                "ORDER BY created_at DESC",
                (user_id,),
            )
            return [_row_to_token(row) for row in cursor.fetchall()]

        return await self._run(work)

    async def delete_by_token(self, token: str) -> bool:
        return await self._delete("DELETE FROM refresh_tokens WHERE token = %s", (token,)) > 0

    async def delete_by_id(self, token_id: str) -> bool:
        return await self._delete("DELETE FROM refresh_tokens WHERE id = %s", (token_id,)) > 0

    async def delete_by_user_id(self, user_id: str) -> int:
        return await self._delete("DELETE FROM refresh_tokens WHERE user_id = %s", (user_id,))

    async def delete_expired(self, now: datetime) -> int:
        return await self._delete("DELETE FROM refresh_tokens WHERE expires_at <= %s", (now,))

    async def rotate(self, old_token_id: str, replacement: RefreshToken) -> bool:
        def work(cursor: Cursor) -> bool:
            cursor.execute("DELETE FROM refresh_tokens WHERE id = %s", (old_token_id,))
            if cursor.rowcount == 0:
                return False
            self._insert(cursor, replacement)
            return True

        try:
            return await self._run(work)
        except pg_errors.UniqueViolation:
            raise ConflictError("Refresh token already stored") from None

    async def _delete(self, sql: str, params: tuple) -> int:
        def work(cursor: Cursor) -> int:
            cursor.execute(sql, params)
            return max(cursor.rowcount, 0)

        return await self._run(work)

    @staticmethod
    def _insert(cursor: Cursor, token: RefreshToken) -> None:
        cursor.execute(
            f"INSERT INTO refresh_tokens ({_TOKEN_COLUMNS}) VALUES (%s, %s, %s, %s, %s)",
            (token.id, token.user_id, token.token, token.expires_at, token.created_at),
        )
