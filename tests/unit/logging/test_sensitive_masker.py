"""
Tests unitaires pour SensitiveMasker.
"""

import bcrypt
import jwt
import pytest

from shield_auth.logging import ISensitiveMasker, SensitiveMasker


MASK = ISensitiveMasker.MASK_VALUE


class TestSensitiveMasking:
    """Mots de passe, hash, tokens et secrets masqués."""

    @pytest.mark.parametrize(
        "key",
        ["password", "password_hash", "access_token", "refresh_token", "jwt_secret", "Authorization"],
    )
    def test_sensitive_keys_masked(self, key) -> None:
        masker = SensitiveMasker()

        result = masker.mask({"user_id": "u-1", key: "sensitive-value"})

        assert result["user_id"] == "u-1"
        assert result[key] == MASK

    def test_nested_dict_masked(self) -> None:
        masker = SensitiveMasker()

        result = masker.mask({"session": {"refresh_token": "eyJ", "user_id": "u-1"}})

        assert result["session"]["refresh_token"] == MASK
        assert result["session"]["user_id"] == "u-1"

    def test_list_of_dicts_masked(self) -> None:
        masker = SensitiveMasker()

        result = masker.mask({"users": [{"email": "a@test.com", "password": "x"}]})

        assert result["users"][0]["password"] == MASK
        assert result["users"][0]["email"] == "a@test.com"

    def test_original_not_modified(self) -> None:
        masker = SensitiveMasker()
        data = {"password": "x"}

        masker.mask(data)

        assert data["password"] == "x"

    def test_non_dict_returned_as_is(self) -> None:
        assert SensitiveMasker().mask("plain") == "plain"


class TestKeys:
    """Gestion des fragments de clé."""

    def test_case_insensitive(self) -> None:
        assert SensitiveMasker().is_sensitive_key("REFRESH_TOKEN") is True

    def test_empty_key_not_sensitive(self) -> None:
        assert SensitiveMasker().is_sensitive_key("") is False

    def test_extra_keys(self) -> None:
        masker = SensitiveMasker(extra_keys=["ip_address"])

        assert masker.mask({"ip_address": "10.0.0.1"})["ip_address"] == MASK

    def test_add_key_deduplicated(self) -> None:
        masker = SensitiveMasker()
        before = len(masker.keys)

        masker.add_key("Password")

        assert len(masker.keys) == before

    def test_add_empty_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            SensitiveMasker().add_key("  ")


class TestValueShapes:
    """Tokens et hash reconnus à leur forme, quelle que soit la clé."""

    def test_jwt_value_masked(self) -> None:
        token = jwt.encode({"userId": "u-1"}, "k" * 64, algorithm="HS256")

        result = SensitiveMasker().mask({"detail": token, "args": ["ok", token]})

        assert result["detail"] == MASK
        assert result["args"] == ["ok", MASK]

    def test_bcrypt_value_masked(self) -> None:
        hashed = bcrypt.hashpw(b"Passw0rd!1", bcrypt.gensalt(rounds=4)).decode()

        assert SensitiveMasker().is_sensitive_value(hashed) is True

    def test_ordinary_values_kept(self) -> None:
        masker = SensitiveMasker()

        assert masker.is_sensitive_value("a@test.com") is False
        assert masker.is_sensitive_value(42) is False
