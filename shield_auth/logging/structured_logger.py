"""
SHIELD Auth - Logging - Structured Logger

Émission des entrées JSON vers le module logging standard
(ou un handler injecté), avec capture en mémoire pour les tests.
"""

import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, List, Optional

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
)
from .sensitive_masker import SensitiveMasker


OutputHandler = Callable[[LogLevel, str], None]

_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class MissingRequiredFieldError(Exception):
    """Champ obligatoire absent d'une entrée."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Required field missing: {field_name}")


def _iso_utc_now() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON d'un module.

    Example:
        logger = StructuredLogger("shield_auth.flows")
        logger.info("User logged in", user_id="u-789")
        logger.with_context("corr-456").warn("Account locked")
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[OutputHandler] = None,
    ) -> None:
        """
        Args:
            name: Nom du module émetteur
            config: Niveau minimal, service, masquage
            masker: Masquage des champs libres (défaut: SensitiveMasker)
            output_handler: Reçoit (niveau, json); défaut: logging.getLogger(name)

        Raises:
            ValueError: Nom vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self.name = name.strip()
        self.config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._emit = output_handler or _stdlib_output(self.name)
        self._captured: Deque[LogEntry] = deque(maxlen=self.config.max_captured_entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Raises:
            MissingRequiredFieldError: Message vide
        """
        if level.severity < self.config.min_level.severity:
            return None
        if not message:
            raise MissingRequiredFieldError("message")

        fields = dict(extra) if self.config.include_extra else {}
        if fields and self.config.mask_sensitive:
            fields = self._masker.mask(fields)

        entry = LogEntry(
            timestamp=_iso_utc_now(),
            level=level,
            correlation_id=correlation_id or str(uuid.uuid4()),
            service=self.config.service,
            message=message,
            extra=fields,
            logger_name=self.name,
        )
        self._captured.append(entry)
        self._emit(level, entry.to_json())
        return entry

    def with_context(self, correlation_id: Optional[str] = None) -> "ContextualLogger":
        """Logger lié à une requête (correlation_id généré si absent)."""
        return ContextualLogger(self, correlation_id or str(uuid.uuid4()))

    # Capture

    def get_entries(self, level: Optional[LogLevel] = None,
                    correlation_id: Optional[str] = None) -> List[LogEntry]:
        """Entrées capturées, filtrables par niveau et corrélation."""
        return [
            entry for entry in self._captured
            if (level is None or entry.level == level)
            and (correlation_id is None or entry.correlation_id == correlation_id)
        ]

    def clear_entries(self) -> None:
        self._captured.clear()


class ContextualLogger(IStructuredLogger):
    """Vue d'un StructuredLogger avec correlation_id fixé."""

    def __init__(self, logger: StructuredLogger, correlation_id: str) -> None:
        self._logger = logger
        self.correlation_id = correlation_id

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        return self._logger.log(level, message, correlation_id or self.correlation_id, **extra)


def _stdlib_output(name: str) -> OutputHandler:
    target = logging.getLogger(name)

    def emit(level: LogLevel, payload: str) -> None:
        target.log(_STDLIB_LEVELS[level], payload)

    return emit
