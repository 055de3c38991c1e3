"""
Tests unitaires pour TokenIssuer (PyJWT, deux secrets).
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from shield_auth.auth import TokenIssuer
from shield_auth.core.errors import AuthenticationError, ConfigurationError


ACCESS_SECRET = "A" * 64
REFRESH_SECRET = "R" * 64


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)


@pytest.fixture
def past_issuer() -> TokenIssuer:
    """Émetteur dont l'horloge est 30 jours en arrière: tokens déjà expirés."""
    past = datetime.now(timezone.utc) - timedelta(days=30)
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, clock=lambda: past)


# =============================================================================
# CONFIGURATION
# =============================================================================


class TestConfiguration:

    def test_missing_secret(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer("", REFRESH_SECRET)

    def test_identical_secrets(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer(ACCESS_SECRET, ACCESS_SECRET)

    def test_unsupported_algorithm(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, algorithm="none")

    def test_non_positive_ttl(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, access_token_ttl=timedelta(seconds=-1))

    def test_default_lifetimes(self, token_issuer):
        assert token_issuer.access_token_ttl == timedelta(minutes=15)
        assert token_issuer.refresh_token_ttl == timedelta(days=7)

    def test_repr_hides_secrets(self, token_issuer):
        assert ACCESS_SECRET not in repr(token_issuer)


# =============================================================================
# ACCESS TOKENS
# =============================================================================


class TestAccessToken:

    def test_roundtrip_claims(self, token_issuer):
        token = token_issuer.generate_access_token("user-1", "a@test.com")

        payload = token_issuer.verify_access_token(token)

        assert payload.user_id == "user-1"
        assert payload.email == "a@test.com"
        assert payload.token_id is None
        assert payload.expires_at - payload.issued_at == timedelta(minutes=15)

    def test_signed_with_access_secret(self, token_issuer):
        token = token_issuer.generate_access_token("user-1", "a@test.com")

        claims = jwt.decode(token, ACCESS_SECRET, algorithms=["HS256"])

        assert claims["userId"] == "user-1"
        assert claims["type"] == "access"

    def test_refresh_token_rejected_as_access(self, token_issuer):
        refresh = token_issuer.generate_refresh_token("user-1", "a@test.com")

        with pytest.raises(AuthenticationError):
            token_issuer.verify_access_token(refresh)

    def test_expired(self, past_issuer, token_issuer):
        token = past_issuer.generate_access_token("user-1", "a@test.com")

        with pytest.raises(AuthenticationError) as exc_info:
            token_issuer.verify_access_token(token)

        assert exc_info.value.message == "Invalid or expired access token"
        assert exc_info.value.context["reason"] == "expired"

    def test_tampered(self, token_issuer):
        token = token_issuer.generate_access_token("user-1", "a@test.com")
        header, _, signature = token.split(".")
        forged_claims = jwt.encode(
            {"userId": "admin", "email": "a@test.com", "type": "access"},
            "another-secret",
            algorithm="HS256",
        ).split(".")[1]

        with pytest.raises(AuthenticationError):
            token_issuer.verify_access_token(".".join([header, forged_claims, signature]))

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, token_issuer, token):
        with pytest.raises(AuthenticationError):
            token_issuer.verify_access_token(token)

    def test_missing_claims(self, token_issuer):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"type": "access", "iat": now, "exp": now + 60},
            ACCESS_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            token_issuer.verify_access_token(token)

        assert exc_info.value.context["reason"] == "invalid_payload"


# =============================================================================
# REFRESH TOKENS
# =============================================================================


class TestRefreshToken:

    def test_roundtrip_with_token_id(self, token_issuer):
        token = token_issuer.generate_refresh_token("user-1", "a@test.com")

        payload = token_issuer.verify_refresh_token(token)

        assert payload.user_id == "user-1"
        assert payload.token_id
        assert payload.expires_at - payload.issued_at == timedelta(days=7)

    def test_successive_tokens_differ(self, token_issuer):
        first = token_issuer.generate_refresh_token("user-1", "a@test.com")
        second = token_issuer.generate_refresh_token("user-1", "a@test.com")

        assert first != second

    def test_access_secret_cannot_verify_refresh(self, token_issuer):
        token = token_issuer.generate_refresh_token("user-1", "a@test.com")

        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, ACCESS_SECRET, algorithms=["HS256"])

    def test_forged_with_access_secret_rejected(self, token_issuer):
        now = int(datetime.now(timezone.utc).timestamp())
        forged = jwt.encode(
            {"userId": "user-1", "email": "a@test.com", "tokenId": "t-1",
             "type": "refresh", "iat": now, "exp": now + 60},
            ACCESS_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            token_issuer.verify_refresh_token(forged)

        assert exc_info.value.message == "Invalid or expired refresh token"

    def test_refresh_without_token_id_rejected(self, token_issuer):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"userId": "user-1", "email": "a@test.com", "type": "refresh",
             "iat": now, "exp": now + 60},
            REFRESH_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            token_issuer.verify_refresh_token(token)

    def test_expired(self, past_issuer, token_issuer):
        token = past_issuer.generate_refresh_token("user-1", "a@test.com")

        with pytest.raises(AuthenticationError):
            token_issuer.verify_refresh_token(token)
