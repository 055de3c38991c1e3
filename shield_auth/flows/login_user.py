"""
SHIELD Auth - Login User

Authentification par mot de passe avec protection force brute.

Les échecs "email inconnu" et "mauvais mot de passe" produisent le
même message: aucun oracle d'existence de compte.
"""

from datetime import datetime
from typing import Callable, NoReturn, Optional

from ..auth.interfaces import IPasswordHasher, ITokenIssuer
from ..core.errors import AuthenticationError, ShieldAuthError
from ..incident.interfaces import IAccountLockoutTracker
from ..logging import ContextualLogger, StructuredLogger
from ..storage.interfaces import ICredentialStore, IRefreshTokenStore
from .base import BaseFlow
from .interfaces import AuthResult, LoginContext, PublicUser


INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class LoginUser(BaseFlow):
    """
    Connexion: verrou → recherche → comparaison → nouvelle session.

    Example:
        login = LoginUser(users, sessions, hasher, issuer, tracker)
        result = await login.execute("a@test.com", "Passw0rd!1")
    """

    OPERATION = "loginUser"
    FAILURE_MESSAGE = "Failed to login"

    def __init__(
        self,
        credential_store: ICredentialStore,
        refresh_token_store: IRefreshTokenStore,
        password_hasher: IPasswordHasher,
        token_issuer: ITokenIssuer,
        lockout_tracker: IAccountLockoutTracker,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._users = credential_store
        self._sessions = refresh_token_store
        self._hasher = password_hasher
        self._lockout = lockout_tracker

    async def execute(
        self,
        email: str,
        password: str,
        context: Optional[LoginContext] = None,
        correlation_id: str = "",
    ) -> AuthResult:
        """
        Raises:
            ValidationError: Email ou mot de passe mal formé
            AuthenticationError: Identifiants invalides ou compte verrouillé
                (remaining_seconds renseigné dans ce cas)
            ServiceError: Échec inattendu d'un collaborateur
        """
        log = self._context(correlation_id)
        client = context or LoginContext()

        try:
            normalized = self._validated_email(email)
            self._validated_password(password)

            if self._lockout.is_account_locked(normalized):
                remaining = self._lockout.get_lock_remaining_time(normalized)
                log.warn("Login refused: account locked", remaining_seconds=remaining,
                         ip_address=client.ip_address)
                raise AuthenticationError(
                    f"Too many failed login attempts. Account is locked for {remaining} seconds.",
                    remaining_seconds=remaining,
                )

            user = await self._users.find_by_email(normalized)
            if user is None:
                self._hasher.dummy_compare(password)
                self._reject(normalized, log, client)

            if not self._hasher.compare(password, user.password_hash):
                self._reject(normalized, log, client)

            self._lockout.record_successful_login(normalized)

            access_token, session = self._issue_session(user.id, user.email)
            await self._sessions.save(session)

            log.info("User logged in", user_id=user.id, ip_address=client.ip_address,
                     user_agent=client.user_agent)

            return AuthResult(
                user=PublicUser.from_user(user),
                access_token=access_token,
                refresh_token=session.token,
            )
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e

    def _reject(self, email: str, log: ContextualLogger, client: LoginContext) -> NoReturn:
        """Enregistre l'échec puis lève l'erreur générique."""
        status = self._lockout.record_failed_login(email)
        if status.locked:
            log.warn("Account locked after repeated failures", ip_address=client.ip_address,
                     remaining_seconds=status.remaining_seconds)
        else:
            log.info("Login failed: invalid credentials", ip_address=client.ip_address)
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
