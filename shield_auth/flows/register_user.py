"""
SHIELD Auth - Register User

Création d'un compte et ouverture de la première session.
"""

import uuid
from datetime import datetime
from typing import Callable, Optional

from ..auth.interfaces import IPasswordHasher, ITokenIssuer
from ..core.errors import ConflictError, ShieldAuthError, ValidationError
from ..logging import StructuredLogger
from ..storage.interfaces import ICredentialStore, IRefreshTokenStore, User
from .base import BaseFlow
from .interfaces import AuthResult, PublicUser


class RegisterUser(BaseFlow):
    """
    Inscription: email unique, mot de passe haché, paire de tokens.

    Example:
        register = RegisterUser(users, sessions, hasher, issuer)
        result = await register.execute("a@test.com", "Passw0rd!1")
    """

    OPERATION = "registerUser"
    FAILURE_MESSAGE = "Failed to register user"

    def __init__(
        self,
        credential_store: ICredentialStore,
        refresh_token_store: IRefreshTokenStore,
        password_hasher: IPasswordHasher,
        token_issuer: ITokenIssuer,
        logger: Optional[StructuredLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(token_issuer, logger, clock)
        self._users = credential_store
        self._sessions = refresh_token_store
        self._hasher = password_hasher

    async def execute(self, email: str, password: str, correlation_id: str = "") -> AuthResult:
        """
        Args:
            email: Email (normalisé puis vérifié ici)
            password: Mot de passe en clair
            correlation_id: Identifiant de corrélation de la requête

        Returns:
            AuthResult {user, access_token, refresh_token}

        Raises:
            ValidationError: Email ou mot de passe mal formé
            ConflictError: Email déjà utilisé
            ServiceError: Échec inattendu d'un collaborateur
        """
        log = self._context(correlation_id)

        try:
            normalized = self._validated_email(email)
            self._validated_password(password)

            # Vérification préalable; la contrainte d'unicité du store tranche les courses
            if await self._users.exists_by_email(normalized):
                raise ConflictError("User with this email already exists")

            password_hash = self._hasher.hash(password)

            now = self._clock()
            user = await self._users.save(
                User(
                    id=str(uuid.uuid4()),
                    email=normalized,
                    password_hash=password_hash,
                    created_at=now,
                    updated_at=now,
                )
            )

            access_token, session = self._issue_session(user.id, user.email)
            await self._sessions.save(session)

            log.info("User registered", user_id=user.id)

            return AuthResult(
                user=PublicUser.from_user(user),
                access_token=access_token,
                refresh_token=session.token,
            )
        except ConflictError:
            log.info("Registration rejected: email already exists")
            raise
        except ValidationError as e:
            log.info("Registration rejected: invalid input", reason=e.message)
            raise
        except ShieldAuthError:
            raise
        except Exception as e:
            raise self._failure(e, log) from e
