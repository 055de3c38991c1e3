"""
SHIELD Auth - Config Loader
Charge la configuration depuis un fichier YAML puis l'environnement.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from .errors import ConfigurationError


MIN_SECRET_LENGTH = 64

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d)?\s*$")
_DURATION_FACTORS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: Any) -> int:
    """
    Convertit une durée en secondes.

    Formats acceptés: 900, "900", "900s", "15m", "12h", "7d", "900000ms".

    Raises:
        ConfigurationError: Format invalide
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid duration: {value!r}")
    if isinstance(value, int):
        return value

    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ConfigurationError(f"Invalid duration: {value!r}")

    amount, unit = int(match.group(1)), match.group(2) or "s"
    if unit == "ms":
        return amount // 1000
    return amount * _DURATION_FACTORS[unit]


class AuthSettings(BaseModel):
    """Paramètres du coeur d'authentification."""

    jwt_secret: str = Field(min_length=MIN_SECRET_LENGTH)
    jwt_refresh_secret: str = Field(min_length=MIN_SECRET_LENGTH)
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = Field(default=900, gt=0)
    refresh_token_ttl_seconds: int = Field(default=7 * 86400, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    max_login_attempts: int = Field(default=5, gt=0)
    login_window_seconds: int = Field(default=900, gt=0)
    lockout_duration_seconds: int = Field(default=900, gt=0)
    database_url: Optional[str] = None

    @model_validator(mode="after")
    def _check_secrets(self) -> "AuthSettings":
        # Deux secrets indépendants: l'un ne doit pas permettre de forger l'autre
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError("jwt_secret and jwt_refresh_secret must differ")
        if self.refresh_token_ttl_seconds <= self.access_token_ttl_seconds:
            raise ValueError("refresh token lifetime must exceed access token lifetime")
        return self

    def __repr__(self) -> str:
        return (
            f"AuthSettings(jwt_algorithm={self.jwt_algorithm!r}, "
            f"access_token_ttl_seconds={self.access_token_ttl_seconds}, "
            f"refresh_token_ttl_seconds={self.refresh_token_ttl_seconds})"
        )

    __str__ = __repr__


# Variable d'environnement -> (champ, conversion)
ENV_OVERRIDES = {
    "JWT_SECRET": ("jwt_secret", str),
    "JWT_REFRESH_SECRET": ("jwt_refresh_secret", str),
    "JWT_ALGORITHM": ("jwt_algorithm", str),
    "JWT_EXPIRES_IN": ("access_token_ttl_seconds", parse_duration),
    "JWT_REFRESH_EXPIRES_IN": ("refresh_token_ttl_seconds", parse_duration),
    "BCRYPT_ROUNDS": ("bcrypt_rounds", int),
    "MAX_LOGIN_ATTEMPTS": ("max_login_attempts", int),
    "LOGIN_WINDOW_MS": ("login_window_seconds", lambda v: parse_duration(f"{v}ms")),
    "ACCOUNT_LOCKOUT_DURATION_MS": ("lockout_duration_seconds", lambda v: parse_duration(f"{v}ms")),
    "DATABASE_URL": ("database_url", str),
}


class ConfigLoader:
    """Chargement des paramètres depuis YAML + variables d'environnement."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config_path = Path(config_path) if config_path else None
        self._environ = environ if environ is not None else os.environ

    def load(self) -> AuthSettings:
        """
        Construit les paramètres validés.

        L'environnement a priorité sur le fichier.

        Raises:
            ConfigurationError: Fichier illisible, valeur invalide ou secret manquant
        """
        raw = self._read_file()
        raw.update(self._read_environ())

        try:
            return AuthSettings(**raw)
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) or "settings" for err in e.errors()})
            # Ne jamais recopier les valeurs: elles peuvent contenir les secrets
            raise ConfigurationError(
                f"Invalid auth configuration: {', '.join(fields)}",
                context={"fields": fields},
            ) from None

    def _read_file(self) -> Dict[str, Any]:
        if self.config_path is None:
            return {}

        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parsing error: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a YAML mapping")

        # Section "auth" optionnelle
        section = config.get("auth", config)
        if not isinstance(section, dict):
            raise ConfigurationError("auth section must be a YAML mapping")

        result = dict(section)
        for key in ("access_token_ttl_seconds", "refresh_token_ttl_seconds",
                    "login_window_seconds", "lockout_duration_seconds"):
            if key in result:
                result[key] = parse_duration(result[key])
        return result

    def _read_environ(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for env_name, (field_name, convert) in ENV_OVERRIDES.items():
            raw = self._environ.get(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = convert(raw.strip())
            except ValueError:
                raise ConfigurationError(f"Invalid value for {env_name}") from None
        return values
