"""
SHIELD Auth - Logging - Interfaces

Entrées JSON structurées: timestamp (ISO 8601 UTC), level,
correlation_id, service, message, puis les champs libres.
Mots de passe, hash et tokens ne sont jamais écrits en clair.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern


class LogLevel(Enum):
    """Niveaux de log, du moins au plus sévère."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR, LogLevel.CRITICAL)


@dataclass
class LogEntry:
    """
    Entrée sérialisable.

    Attributes:
        timestamp: Horodatage ISO 8601 UTC (suffixe Z)
        level: Niveau
        correlation_id: Identifiant de la requête d'origine
        service: Nom du service émetteur
        message: Message lisible
        extra: Champs libres, déjà masqués
        logger_name: Module émetteur
    """

    timestamp: str
    level: LogLevel
    correlation_id: str
    service: str
    message: str
    extra: Dict[str, Any] = field(default_factory=dict)
    logger_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "correlation_id": self.correlation_id,
            "service": self.service,
            "message": self.message,
        }
        if self.logger_name:
            payload["logger"] = self.logger_name
        if self.extra:
            payload["extra"] = self.extra
        return payload

    def to_json(self) -> str:
        # default=str: datetimes et UUID des champs libres
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


@dataclass
class LogConfig:
    """
    Attributes:
        min_level: Niveau minimal émis
        service: Valeur du champ service
        include_extra: Écrire les champs libres
        mask_sensitive: Masquer les données sensibles
        max_captured_entries: Entrées conservées en mémoire
    """

    min_level: LogLevel = LogLevel.INFO
    service: str = "auth-service"
    include_extra: bool = True
    mask_sensitive: bool = True
    max_captured_entries: int = 1000


class IStructuredLogger(ABC):
    """
    Interface logger structuré.

    Les méthodes par niveau délèguent à log().
    """

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Returns:
            Entrée émise, None si filtrée par niveau
        """
        pass

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)


class ISensitiveMasker(ABC):
    """
    Interface masquage.

    Une valeur est masquée si sa clé contient un fragment sensible,
    ou si la valeur elle-même ressemble à un JWT ou à un hash bcrypt.
    """

    SENSITIVE_KEYS: List[str] = [
        "password",
        "passwd",
        "hash",
        "token",
        "secret",
        "jwt",
        "authorization",
        "bearer",
        "cookie",
        "credential",
    ]

    SENSITIVE_VALUES: List[Pattern[str]] = [
        re.compile(r"^eyJ[\w-]*\.[\w-]*\.[\w-]*$"),  # JWT compact
        re.compile(r"^\$2[abxy]?\$\d{2}\$[./A-Za-z0-9]{53}$"),  # bcrypt
    ]

    MASK_VALUE: str = "***MASKED***"

    @abstractmethod
    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copie de data avec les valeurs sensibles remplacées."""
        pass

    @abstractmethod
    def is_sensitive_key(self, key: str) -> bool:
        pass

    @abstractmethod
    def is_sensitive_value(self, value: Any) -> bool:
        pass
