"""
SHIELD Auth - Container

Assemble les composants à partir des paramètres validés:
hasher, émetteur de tokens, tracker de verrouillage, stores et flows.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from .auth import PasswordHasher, TokenIssuer
from .core.config_loader import AuthSettings
from .flows import (
    AuthenticateAccessToken,
    LoginUser,
    LogoutUser,
    RefreshSession,
    RegisterUser,
    RevokeUserSessions,
    SweepExpiredTokens,
)
from .incident import AccountLockoutTracker
from .logging import StructuredLogger
from .storage import (
    ICredentialStore,
    IRefreshTokenStore,
    InMemoryCredentialStore,
    InMemoryRefreshTokenStore,
    PostgresCredentialStore,
    PostgresRefreshTokenStore,
    apply_schema,
    connect,
)


@dataclass
class AuthServices:
    """Composants et opérations prêts à l'emploi."""

    settings: AuthSettings
    password_hasher: PasswordHasher
    token_issuer: TokenIssuer
    lockout_tracker: AccountLockoutTracker
    credential_store: ICredentialStore
    refresh_token_store: IRefreshTokenStore
    register: RegisterUser
    login: LoginUser
    refresh: RefreshSession
    logout: LogoutUser
    authenticate: AuthenticateAccessToken
    revoke_sessions: RevokeUserSessions
    sweep: SweepExpiredTokens


def build_services(
    settings: AuthSettings,
    credential_store: Optional[ICredentialStore] = None,
    refresh_token_store: Optional[IRefreshTokenStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
    logger: Optional[StructuredLogger] = None,
) -> AuthServices:
    """
    Construit l'ensemble des services.

    Sans stores fournis: PostgreSQL si database_url est défini,
    mémoire sinon.

    Args:
        settings: Paramètres validés (ConfigLoader.load())
        credential_store: Store utilisateurs (optionnel)
        refresh_token_store: Store sessions (optionnel)
        clock: Horloge UTC injectable (stores, tracker, flows)
        logger: Logger partagé par les flows

    Example:
        services = build_services(ConfigLoader("auth.yaml").load())
        result = await services.register.execute("a@test.com", "Passw0rd!1")
    """
    logger = logger or StructuredLogger("shield_auth")

    if credential_store is None or refresh_token_store is None:
        credential_store, refresh_token_store = _default_stores(
            settings, credential_store, refresh_token_store
        )

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    issuer = TokenIssuer(
        access_secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_token_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
        refresh_token_ttl=timedelta(seconds=settings.refresh_token_ttl_seconds),
        algorithm=settings.jwt_algorithm,
    )
    tracker = AccountLockoutTracker(
        max_failures=settings.max_login_attempts,
        failure_window=timedelta(seconds=settings.login_window_seconds),
        lockout_duration=timedelta(seconds=settings.lockout_duration_seconds),
        clock=clock,
    )

    logger.info(
        "Auth services initialised",
        store=type(credential_store).__name__,
        bcrypt_rounds=settings.bcrypt_rounds,
    )

    return AuthServices(
        settings=settings,
        password_hasher=hasher,
        token_issuer=issuer,
        lockout_tracker=tracker,
        credential_store=credential_store,
        refresh_token_store=refresh_token_store,
        register=RegisterUser(credential_store, refresh_token_store, hasher, issuer, logger, clock),
        login=LoginUser(credential_store, refresh_token_store, hasher, issuer, tracker, logger, clock),
        refresh=RefreshSession(refresh_token_store, issuer, logger, clock),
        logout=LogoutUser(refresh_token_store, issuer, logger, clock),
        authenticate=AuthenticateAccessToken(issuer, credential_store, logger, clock),
        revoke_sessions=RevokeUserSessions(refresh_token_store, issuer, logger, clock),
        sweep=SweepExpiredTokens(refresh_token_store, issuer, tracker, logger, clock),
    )


def _default_stores(
    settings: AuthSettings,
    credential_store: Optional[ICredentialStore],
    refresh_token_store: Optional[IRefreshTokenStore],
) -> Tuple[ICredentialStore, IRefreshTokenStore]:
    """Complète uniquement les stores non fournis."""
    if not settings.database_url:
        if credential_store is None:
            credential_store = InMemoryCredentialStore()
        if refresh_token_store is None:
            refresh_token_store = InMemoryRefreshTokenStore()
        return credential_store, refresh_token_store

    # Une seule connexion, partagée par les stores créés ici
    connection = connect(settings.database_url)
    apply_schema(connection)
    lock = threading.Lock()
    if credential_store is None:
        credential_store = PostgresCredentialStore(connection, lock)
    if refresh_token_store is None:
        refresh_token_store = PostgresRefreshTokenStore(connection, lock)
    return credential_store, refresh_token_store
