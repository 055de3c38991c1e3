"""
SHIELD Auth - Flows - Base

Briques communes aux orchestrateurs: émission d'une paire de tokens,
horloge injectable et enveloppement des erreurs inattendues.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Tuple

from ..auth.interfaces import ITokenIssuer
from ..core.errors import ShieldAuthError, ValidationError, wrap_unknown_error
from ..logging import ContextualLogger, StructuredLogger
from ..storage.interfaces import RefreshToken, normalize_email


INVALID_EMAIL_MESSAGE = "Invalid email format"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseFlow:
    """Base des orchestrateurs."""

    OPERATION: str = "auth"
    FAILURE_MESSAGE: str = "An unexpected error occurred"

    def __init__(
        self,
        token_issuer: ITokenIssuer,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tokens = token_issuer
        self._logger = logger or StructuredLogger(f"shield_auth.flows.{self.OPERATION}")
        self._clock = clock or _utcnow

    def _context(self, correlation_id: str = "") -> ContextualLogger:
        return self._logger.with_context(correlation_id or None)

    @staticmethod
    def _validated_email(email: Any) -> str:
        """
        Email normalisé, avant tout accès store ou hachage.

        Raises:
            ValidationError: Email absent, non textuel ou sans '@'
        """
        if not isinstance(email, str):
            raise ValidationError(INVALID_EMAIL_MESSAGE)
        normalized = normalize_email(email)
        if not normalized or "@" not in normalized:
            raise ValidationError(INVALID_EMAIL_MESSAGE)
        return normalized

    @staticmethod
    def _validated_password(password: Any) -> str:
        """Raises: ValidationError si absent ou non textuel."""
        if not isinstance(password, str) or not password:
            raise ValidationError("Password is required")
        return password

    def _issue_session(self, user_id: str, email: str) -> Tuple[str, RefreshToken]:
        """
        Signe une nouvelle paire et prépare la ligne de session.

        Returns:
            (access_token, ligne RefreshToken à persister)
        """
        access_token = self._tokens.generate_access_token(user_id, email)
        refresh_token = self._tokens.generate_refresh_token(user_id, email)

        now = self._clock()
        row = RefreshToken(
            id=str(uuid.uuid4()),
            user_id=user_id,
            token=refresh_token,
            expires_at=now + self._tokens.refresh_token_ttl,
            created_at=now,
        )
        return access_token, row

    def _failure(self, error: Exception, log: ContextualLogger) -> ShieldAuthError:
        """
        Erreurs connues: inchangées. Autres: ServiceError journalisée.
        """
        wrapped = wrap_unknown_error(
            error,
            self.FAILURE_MESSAGE,
            operation=self.OPERATION,
            correlation_id=log.correlation_id,
        )
        if wrapped is not error:
            log.error(
                f"{self.OPERATION} failed unexpectedly",
                operation=self.OPERATION,
                error_type=type(error).__name__,
            )
        return wrapped
