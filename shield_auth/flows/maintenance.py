"""
SHIELD Auth - Maintenance Flows

Opérations annexes autour des sessions:
- Authentification d'une requête par access token
- Révocation de toutes les sessions d'un utilisateur
- Purge des sessions expirées et des compteurs d'échecs obsolètes
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..auth.interfaces import ITokenIssuer, TokenPayload
from ..core.errors import AuthenticationError, ShieldAuthError
from ..incident.interfaces import IAccountLockoutTracker
from ..logging import StructuredLogger
from ..storage.interfaces import ICredentialStore, IRefreshTokenStore
from .base import BaseFlow


@dataclass(frozen=True)
class SweepReport:
    """Résultat d'une purge."""

    expired_tokens: int
    stale_lockouts: int


class AuthenticateAccessToken(BaseFlow):
    """
    Vérifie un access token et, si un store est fourni, l'existence
    de l'utilisateur.

    Example:
        authenticate = AuthenticateAccessToken(issuer, users)
        payload = await authenticate.execute(bearer_token)
    """

    OPERATION = "authenticateAccessToken"
    FAILURE_MESSAGE = "Failed to authenticate request"

    def __init__(
        self,
        token_issuer: ITokenIssuer,
        credential_store: Optional[ICredentialStore] = None,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._users = credential_store

    async def execute(self, access_token: str, correlation_id: str = "") -> TokenPayload:
        """
        Raises:
            AuthenticationError: Token invalide/expiré ou utilisateur supprimé
        """
        log = self._context(correlation_id)

        try:
            payload = self._tokens.verify_access_token(access_token)

            if self._users is not None and await self._users.find_by_id(payload.user_id) is None:
                log.warn("Access token for unknown user", user_id=payload.user_id)
                raise AuthenticationError("Invalid or expired access token")

            return payload
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e


class RevokeUserSessions(BaseFlow):
    """Déconnexion de tous les appareils d'un utilisateur."""

    OPERATION = "revokeUserSessions"
    FAILURE_MESSAGE = "Failed to revoke sessions"

    def __init__(
        self,
        refresh_token_store: IRefreshTokenStore,
        token_issuer: ITokenIssuer,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._sessions = refresh_token_store

    async def execute(self, user_id: str, correlation_id: str = "") -> int:
        """
        Returns:
            Nombre de sessions supprimées (0 si aucune)
        """
        log = self._context(correlation_id)

        try:
            revoked = await self._sessions.delete_by_user_id(user_id)
            log.info("User sessions revoked", user_id=user_id, revoked=revoked)
            return revoked
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e


class SweepExpiredTokens(BaseFlow):
    """
    Purge périodique: lignes refresh token expirées et compteurs
    d'échecs obsolètes.
    """

    OPERATION = "sweepExpiredTokens"
    FAILURE_MESSAGE = "Failed to sweep expired tokens"

    def __init__(
        self,
        refresh_token_store: IRefreshTokenStore,
        token_issuer: ITokenIssuer,
        lockout_tracker: Optional[IAccountLockoutTracker] = None,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._sessions = refresh_token_store
        self._lockout = lockout_tracker

    async def execute(self, correlation_id: str = "") -> SweepReport:
        log = self._context(correlation_id)

        try:
            expired = await self._sessions.delete_expired(self._clock())
            stale = self._lockout.purge_stale() if self._lockout is not None else 0

            log.info("Expired sessions swept", expired_sessions=expired, stale_lockouts=stale)
            return SweepReport(expired_tokens=expired, stale_lockouts=stale)
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e
