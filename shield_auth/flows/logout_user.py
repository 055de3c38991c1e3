"""
SHIELD Auth - Logout User

Révocation d'une session (suppression de la ligne refresh token).
"""

from datetime import datetime
from typing import Callable, Optional

from ..auth.interfaces import ITokenIssuer
from ..core.errors import NotFoundError, ShieldAuthError
from ..logging import StructuredLogger
from ..storage.interfaces import IRefreshTokenStore
from .base import BaseFlow
from .interfaces import LogoutResult


LOGOUT_MESSAGE = "Logged out successfully"


class LogoutUser(BaseFlow):
    """
    Déconnexion d'une session.

    Strict par défaut: un token inconnu ou déjà révoqué lève NotFoundError.
    Avec missing_ok=True l'opération devient idempotente.
    """

    OPERATION = "logoutUser"
    FAILURE_MESSAGE = "Failed to logout"

    def __init__(
        self,
        refresh_token_store: IRefreshTokenStore,
        token_issuer: ITokenIssuer,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._sessions = refresh_token_store

    async def execute(
        self,
        refresh_token: str,
        missing_ok: bool = False,
        correlation_id: str = "",
    ) -> LogoutResult:
        """
        Raises:
            AuthenticationError: Signature invalide ou token expiré
            NotFoundError: Session inconnue (sauf missing_ok)
            ServiceError: Échec inattendu d'un collaborateur
        """
        log = self._context(correlation_id)

        try:
            payload = self._tokens.verify_refresh_token(refresh_token)

            if not await self._sessions.delete_by_token(refresh_token):
                if missing_ok:
                    log.info("Logout: session already revoked", user_id=payload.user_id)
                    return LogoutResult(message=LOGOUT_MESSAGE, revoked=False)
                raise NotFoundError("Refresh token")

            log.info("User logged out", user_id=payload.user_id)
            return LogoutResult(message=LOGOUT_MESSAGE)
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e
