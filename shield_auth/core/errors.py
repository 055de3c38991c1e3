"""
SHIELD Auth - Errors
Taxonomie des erreurs remontées par le coeur d'authentification.

Les erreurs connues sont propagées telles quelles à l'appelant.
Toute autre exception est enveloppée dans ServiceError.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ShieldAuthError(Exception):
    """Erreur de base du module d'authentification."""

    code: str = "SHIELD_AUTH_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        is_operational: bool = True,
    ) -> None:
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.timestamp = datetime.now(timezone.utc)
        self.is_operational = is_operational
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Sérialisation pour la couche transport et les logs."""
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "context": dict(self.context),
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(ShieldAuthError):
    """Entrée mal formée arrivée jusqu'au coeur."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthenticationError(ShieldAuthError):
    """Identifiants invalides, token invalide/expiré ou compte verrouillé."""

    code = "AUTHENTICATION_ERROR"
    status_code = 401

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        remaining_seconds: Optional[int] = None,
    ) -> None:
        self.remaining_seconds = remaining_seconds
        context = dict(context or {})
        if remaining_seconds is not None:
            context["remaining_seconds"] = remaining_seconds
        super().__init__(message, context)


class NotFoundError(ShieldAuthError):
    """Ressource référencée absente."""

    code = "NOT_FOUND_ERROR"
    status_code = 404

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.resource = resource
        self.identifier = identifier
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message, {"resource": resource, **(context or {})})


class ConflictError(ShieldAuthError):
    """Identité déjà existante."""

    code = "CONFLICT_ERROR"
    status_code = 409


class ServiceError(ShieldAuthError):
    """Mauvaise configuration ou échec interne inattendu."""

    code = "SERVICE_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.correlation_id = correlation_id
        merged = dict(context or {})
        if operation:
            merged["operation"] = operation
        if correlation_id:
            merged["correlation_id"] = correlation_id
        super().__init__(message, merged, is_operational=False)


class ConfigurationError(ServiceError):
    """Configuration absente ou invalide (secrets, durées...)."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, operation="configuration", context=context)


KNOWN_ERRORS = (
    ValidationError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    ServiceError,
)


def wrap_unknown_error(
    error: BaseException,
    message: str,
    operation: str,
    correlation_id: Optional[str] = None,
) -> ShieldAuthError:
    """
    Retourne l'erreur telle quelle si elle est connue, sinon l'enveloppe.

    Le message d'origine n'est pas recopié: il peut contenir des données
    issues du stockage. Seul le type est conservé dans le contexte.

    Args:
        error: Exception levée par un collaborateur
        message: Message générique de l'opération
        operation: Nom de l'opération (ex: "loginUser")
        correlation_id: Identifiant de corrélation de la requête

    Returns:
        Erreur connue ou ServiceError
    """
    if isinstance(error, KNOWN_ERRORS):
        return error

    return ServiceError(
        message,
        operation=operation,
        correlation_id=correlation_id or None,
        context={"original_error": type(error).__name__},
    )
