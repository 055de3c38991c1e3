"""
Tests unitaires pour StructuredLogger.

Vérifie:
- Sortie JSON structurée
- Champs obligatoires: timestamp, level, correlation_id, service, message
- Timestamp ISO 8601 UTC
- Masquage des données sensibles
"""

import json
import logging
import re
from typing import List, Tuple

import pytest

from shield_auth.logging import (
    ContextualLogger,
    LogConfig,
    LogLevel,
    MissingRequiredFieldError,
    StructuredLogger,
)


def make_logger(**config) -> Tuple[StructuredLogger, List[Tuple[LogLevel, str]]]:
    output: List[Tuple[LogLevel, str]] = []
    logger = StructuredLogger(
        "test",
        config=LogConfig(**config),
        output_handler=lambda level, payload: output.append((level, payload)),
    )
    return logger, output


class TestJsonFormat:
    """Format JSON et champs obligatoires."""

    def test_output_is_valid_json(self) -> None:
        logger, output = make_logger()

        logger.info("Test message")

        assert len(output) == 1
        parsed = json.loads(output[0][1])
        assert isinstance(parsed, dict)

    def test_required_fields_present(self) -> None:
        logger, _ = make_logger(service="auth-service")

        entry = logger.info("Test message")
        parsed = json.loads(entry.to_json())

        for field_name in ("timestamp", "level", "correlation_id", "service", "message"):
            assert field_name in parsed
        assert parsed["service"] == "auth-service"
        assert parsed["level"] == "INFO"

    def test_extra_included(self) -> None:
        logger, _ = make_logger()

        entry = logger.info("User logged in", user_id="u-123", ip_address="10.0.0.1")
        parsed = json.loads(entry.to_json())

        assert parsed["extra"]["user_id"] == "u-123"
        assert parsed["extra"]["ip_address"] == "10.0.0.1"
        assert parsed["logger"] == "test"

    def test_extra_excluded_when_disabled(self) -> None:
        logger, _ = make_logger(include_extra=False)

        entry = logger.info("Test", user_id="u-123")

        assert "extra" not in entry.to_dict()

    def test_timestamp_iso_utc(self) -> None:
        logger, _ = make_logger()

        entry = logger.info("Test")

        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", entry.timestamp)

    def test_empty_message_rejected(self) -> None:
        logger, _ = make_logger()

        with pytest.raises(MissingRequiredFieldError):
            logger.info("")

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            StructuredLogger("  ")


class TestLevels:
    """Niveaux et filtrage."""

    def test_below_min_level_not_logged(self) -> None:
        logger, output = make_logger(min_level=LogLevel.WARN)

        assert logger.info("ignored") is None
        assert logger.warn("kept") is not None
        assert len(output) == 1

    def test_all_levels(self) -> None:
        logger, _ = make_logger(min_level=LogLevel.DEBUG)

        logger.debug("d")
        logger.info("i")
        logger.warn("w")
        logger.error("e")
        logger.critical("c")

        assert [e.level for e in logger.get_entries()] == [
            LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR, LogLevel.CRITICAL,
        ]
        assert len(logger.get_entries(level=LogLevel.WARN)) == 1

    def test_default_handler_uses_stdlib_logging(self, caplog) -> None:
        logger = StructuredLogger("shield_auth.test_stdlib")

        with caplog.at_level(logging.INFO, logger="shield_auth.test_stdlib"):
            logger.info("Routed to stdlib")

        assert any("Routed to stdlib" in record.getMessage() for record in caplog.records)


class TestMasking:
    """Données sensibles jamais en clair."""

    def test_sensitive_extra_masked(self) -> None:
        logger, output = make_logger()

        logger.info("Login", password="Passw0rd!1", refresh_token="eyJhbGc", user_id="u-1")

        payload = output[0][1]
        assert "Passw0rd!1" not in payload
        assert "eyJhbGc" not in payload
        assert "u-1" in payload

    def test_masking_can_be_disabled(self) -> None:
        logger, _ = make_logger(mask_sensitive=False)

        entry = logger.info("Debug", password="visible")

        assert entry.extra["password"] == "visible"


class TestCorrelation:
    """Corrélation des entrées d'une même requête."""

    def test_generated_when_absent(self) -> None:
        logger, _ = make_logger()

        first = logger.info("one")
        second = logger.info("two")

        assert first.correlation_id
        assert first.correlation_id != second.correlation_id

    def test_contextual_logger_reuses_id(self) -> None:
        logger, _ = make_logger()

        contextual = logger.with_context("corr-456")
        contextual.info("one")
        contextual.warn("two")

        assert isinstance(contextual, ContextualLogger)
        assert contextual.correlation_id == "corr-456"
        assert len(logger.get_entries(correlation_id="corr-456")) == 2

    def test_contextual_logger_generates_id(self) -> None:
        logger, _ = make_logger()

        assert logger.with_context().correlation_id


class TestCapture:
    """Mémoire des dernières entrées."""

    def test_capture_is_bounded(self) -> None:
        logger, _ = make_logger(max_captured_entries=3)

        for i in range(5):
            logger.info(f"message {i}")

        assert [e.message for e in logger.get_entries()] == ["message 2", "message 3", "message 4"]

    def test_clear_entries(self) -> None:
        logger, _ = make_logger()
        logger.info("one")

        logger.clear_entries()

        assert logger.get_entries() == []
