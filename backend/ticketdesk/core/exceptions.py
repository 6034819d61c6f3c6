"""
Custom exception hierarchy for structured error handling.

Every error the API reports to a client is an AppException subclass. The
class decides the HTTP status; the message is the user-facing text and any
keyword context ends up (filtered) in the "details" field of the response.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "refresh_token", "secret", "key", "hash"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when the caller cannot be authenticated.

    Login failures deliberately share one message so a client cannot tell an
    unknown organization from an unknown email or a bad password.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Identifiants invalides"


class AuthorizationError(AppException):
    """
    Raised when an authenticated caller lacks permission for an action.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Accès refusé"


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT has expired."""

    default_message = "Token invalide ou expiré"


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT is malformed or its signature does not verify."""

    default_message = "Token invalide ou expiré"


# ============================================================================
# Validation
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation or a request-level business check fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


# ============================================================================
# Resources
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    Resources that belong to another organization are reported with this
    error as well, so their existence is never disclosed.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Ressource introuvable"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when creating a resource would violate a uniqueness rule.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class TicketNotFoundError(ResourceNotFoundError):
    """Raised when a ticket doesn't exist in the caller's organization."""

    default_message = "Ticket non trouvé"


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user doesn't exist in the caller's organization."""

    default_message = "Utilisateur non trouvé"


class NotificationNotFoundError(ResourceNotFoundError):
    default_message = "Notification non trouvée"


class SlaPolicyNotFoundError(ResourceNotFoundError):
    default_message = "Politique SLA non trouvée"


class TicketCategoryNotFoundError(ResourceNotFoundError):
    default_message = "Catégorie non trouvée"


class AssetNotFoundError(ResourceNotFoundError):
    default_message = "Asset non trouvé"

