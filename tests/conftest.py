"""
SHIELD Auth - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest

from shield_auth.auth import PasswordHasher, TokenIssuer
from shield_auth.incident import AccountLockoutTracker
from shield_auth.logging import LogConfig, LogLevel, StructuredLogger
from shield_auth.storage import InMemoryCredentialStore, InMemoryRefreshTokenStore


ACCESS_SECRET = "a" * 32 + "access-secret-for-tests-only-0123456789"
REFRESH_SECRET = "r" * 32 + "refresh-secret-for-tests-only-012345678"


class FakeClock:
    """Horloge UTC contrôlable."""

    def __init__(self, start: datetime = None) -> None:
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Horloge démarrant à l'instant réel (les JWT restent vérifiables)."""
    return FakeClock()


@pytest.fixture
def make_clock():
    """Fabrique d'horloges à instant de départ choisi."""
    return FakeClock


@pytest.fixture
def hasher() -> PasswordHasher:
    """Coût bcrypt minimal pour la vitesse des tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)


@pytest.fixture
def tracker(clock: FakeClock) -> AccountLockoutTracker:
    return AccountLockoutTracker(clock=clock)


@pytest.fixture
def users() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def sessions() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture
def captured() -> List[Tuple[LogLevel, str]]:
    """Sorties JSON émises par le logger de test."""
    return []


@pytest.fixture
def logger(captured: List[Tuple[LogLevel, str]]) -> StructuredLogger:
    return StructuredLogger(
        "shield_auth.tests",
        config=LogConfig(min_level=LogLevel.DEBUG, service="auth-service-test"),
        output_handler=lambda level, payload: captured.append((level, payload)),
    )


@pytest.fixture
def past_issuer() -> TokenIssuer:
    """Mêmes secrets, horloge 30 jours en arrière: tokens déjà expirés."""
    past = datetime.now(timezone.utc) - timedelta(days=30)
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, clock=lambda: past)
