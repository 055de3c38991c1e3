"""
SHIELD Auth - Refresh Session

Rotation des refresh tokens: chaque token n'est échangeable qu'une fois.
"""

from datetime import datetime
from typing import Callable, Optional

from ..auth.interfaces import ITokenIssuer
from ..core.errors import AuthenticationError, NotFoundError, ShieldAuthError
from ..logging import StructuredLogger
from ..storage.interfaces import IRefreshTokenStore
from .base import BaseFlow
from .interfaces import TokenPair


class RefreshSession(BaseFlow):
    """
    Échange un refresh token valide contre une nouvelle paire.

    L'ancienne ligne est supprimée et la nouvelle insérée dans une seule
    opération du store (rotate): deux échanges concurrents du même token
    ne produisent qu'une seule paire.

    Example:
        refresh = RefreshSession(sessions, issuer)
        pair = await refresh.execute(result.refresh_token)
    """

    OPERATION = "refreshSession"
    FAILURE_MESSAGE = "Failed to refresh token"

    def __init__(
        self,
        refresh_token_store: IRefreshTokenStore,
        token_issuer: ITokenIssuer,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._sessions = refresh_token_store

    async def execute(self, refresh_token: str, correlation_id: str = "") -> TokenPair:
        """
        Args:
            refresh_token: Refresh token présenté par le client

        Returns:
            Nouvelle paire {access_token, refresh_token}

        Raises:
            AuthenticationError: Signature invalide, token expiré ou session expirée
            NotFoundError: Token révoqué ou déjà consommé
            ServiceError: Échec inattendu d'un collaborateur
        """
        log = self._context(correlation_id)

        try:
            payload = self._tokens.verify_refresh_token(refresh_token)

            stored = await self._sessions.find_by_token(refresh_token)
            if stored is None:
                log.info("Refresh rejected: token not found", user_id=payload.user_id)
                raise NotFoundError("Refresh token")

            if stored.user_id != payload.user_id:
                log.warn("Refresh rejected: token owner mismatch", user_id=payload.user_id)
                raise AuthenticationError("Invalid or expired refresh token")

            if stored.is_expired(self._clock()):
                await self._sessions.delete_by_id(stored.id)
                log.info("Refresh rejected: session expired", user_id=stored.user_id)
                raise AuthenticationError("Refresh token has expired")

            access_token, replacement = self._issue_session(payload.user_id, payload.email)

            if not await self._sessions.rotate(stored.id, replacement):
                # Consommé entre la lecture et la rotation
                log.warn("Refresh rejected: token already rotated", user_id=stored.user_id)
                raise NotFoundError("Refresh token")

            log.info("Session refreshed", user_id=stored.user_id)

            return TokenPair(access_token=access_token, refresh_token=replacement.token)
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e
