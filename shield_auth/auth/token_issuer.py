"""
SHIELD Auth - Token Issuer

Signature et vérification des access/refresh tokens JWT.

Deux secrets indépendants: la compromission du secret d'accès
(utilisé à chaque requête) ne permet pas de forger un refresh token,
et inversement.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.errors import AuthenticationError, ConfigurationError
from .interfaces import ITokenIssuer, TokenPayload


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer(ITokenIssuer):
    """
    Émetteur de tokens HMAC (PyJWT).

    Example:
        issuer = TokenIssuer(access_secret, refresh_secret)
        token = issuer.generate_access_token("user-1", "a@test.com")
        payload = issuer.verify_access_token(token)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_token_ttl: Optional[timedelta] = None,
        refresh_token_ttl: Optional[timedelta] = None,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            access_secret: Secret de signature des access tokens
            refresh_secret: Secret de signature des refresh tokens
            access_token_ttl: Durée de vie access token (défaut: 15 min)
            refresh_token_ttl: Durée de vie refresh token (défaut: 7 jours)
            algorithm: Algorithme HMAC (HS256, HS384, HS512)
            clock: Horloge UTC injectable (tests)

        Raises:
            ConfigurationError: Secret manquant, secrets identiques ou algorithme refusé
        """
        if not access_secret or not refresh_secret:
            raise ConfigurationError("JWT secrets are not configured")
        if access_secret == refresh_secret:
            raise ConfigurationError("Access and refresh secrets must differ")
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported JWT algorithm: {algorithm}")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl or timedelta(seconds=self.DEFAULT_ACCESS_TOKEN_SECONDS)
        self.refresh_token_ttl = refresh_token_ttl or timedelta(seconds=self.DEFAULT_REFRESH_TOKEN_SECONDS)
        self._clock = clock or _utcnow

        if self.access_token_ttl.total_seconds() <= 0 or self.refresh_token_ttl.total_seconds() <= 0:
            raise ConfigurationError("Token lifetimes must be positive")

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={self.algorithm!r})"

    def generate_access_token(self, user_id: str, email: str) -> str:
        """Access token {userId, email}, durée courte."""
        return self._sign(
            {"userId": user_id, "email": email, "type": ACCESS_TOKEN_TYPE},
            self._access_secret,
            self.access_token_ttl,
        )

    def generate_refresh_token(self, user_id: str, email: str) -> str:
        """
        Refresh token {userId, email, tokenId}.

        tokenId aléatoire: deux tokens émis dans la même seconde
        pour le même utilisateur ne sont jamais identiques.
        """
        return self._sign(
            {
                "userId": user_id,
                "email": email,
                "tokenId": str(uuid.uuid4()),
                "type": REFRESH_TOKEN_TYPE,
            },
            self._refresh_secret,
            self.refresh_token_ttl,
        )

    def verify_access_token(self, token: str) -> TokenPayload:
        """Raises: AuthenticationError"""
        return self._verify(token, self._access_secret, ACCESS_TOKEN_TYPE, "Invalid or expired access token")

    def verify_refresh_token(self, token: str) -> TokenPayload:
        """Raises: AuthenticationError"""
        return self._verify(token, self._refresh_secret, REFRESH_TOKEN_TYPE, "Invalid or expired refresh token")

    def _sign(self, claims: dict, secret: str, ttl: timedelta) -> str:
        now = self._clock()
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + ttl).timestamp())
        token = jwt.encode(payload, secret, algorithm=self.algorithm)
        return token if isinstance(token, str) else token.decode("utf-8")

    def _verify(self, token: str, secret: str, expected_type: str, message: str) -> TokenPayload:
        """
        Vérifie signature, expiration et claims obligatoires.

        Aucun token partiellement valide n'est accepté.
        """
        if not token or not isinstance(token, str):
            raise AuthenticationError(message)

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["exp", "iat"],
                    "verify_exp": True,
                    "verify_iat": True,
                },
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(message, context={"reason": "expired"}) from None
        except jwt.InvalidTokenError:
            raise AuthenticationError(message, context={"reason": "invalid"}) from None

        if payload.get("type") != expected_type:
            raise AuthenticationError(message, context={"reason": "wrong_type"})

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str) or not user_id or not email:
            raise AuthenticationError(message, context={"reason": "invalid_payload"})

        token_id = payload.get("tokenId")
        if expected_type == REFRESH_TOKEN_TYPE and not token_id:
            raise AuthenticationError(message, context={"reason": "invalid_payload"})

        try:
            return TokenPayload(
                user_id=user_id,
                email=email,
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_id=token_id,
            )
        except (TypeError, ValueError, OverflowError):
            raise AuthenticationError(message, context={"reason": "invalid_payload"}) from None
