"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API and the SDK client
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. No sensitive data leaks in error messages

User-facing form and editor validation is NOT raised: it is returned as a
value (EditResult, SaveResult, form errors). Exceptions here are for
failures the caller has to handle.
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
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
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
# Authentication
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT token has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT token is malformed or has an invalid signature."""

    default_message = "Token is invalid"


# ============================================================================
# Validation & Input
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    WHY: 400 with the failing field in context lets the caller show the
    message next to the right input.

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

    WHY: Resources owned by another user are reported as missing too, so
    their existence is not disclosed.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


# ============================================================================
# External Services
# ============================================================================


class ExternalServiceError(AppException):
    """
    Base exception for upstream/API failures.

    WHY: In the SDK client these wrap non-2xx responses and transport
    errors from the SoloDesk API. On the server they signal a 502.

    HTTP Status: 502 Bad Gateway
    """

    status_code = 502
    default_message = "External service error"


class ApiRequestError(ExternalServiceError):
    """Raised by the SDK client when an API call fails."""

    default_message = "Request to SoloDesk API failed"


class TemplateSaveError(ExternalServiceError):
    """
    Raised when saving a template fails for a reason other than validation.

    The message is the one shown to the user; the upstream status and
    original error travel in context.
    """

    default_message = "Error saving template. Please check your connection and try again."


class AttachmentUploadError(ExternalServiceError):
    """Raised when a file upload request fails."""

    default_message = "Failed to upload files. Please try again."


# ============================================================================
# Domain-specific
# ============================================================================


class ClientNotFoundError(ResourceNotFoundError):
    """Raised when a client doesn't exist."""

    default_message = "Client not found"


class ProjectNotFoundError(ResourceNotFoundError):
    """Raised when a project doesn't exist."""

    default_message = "Project not found"


class UserNotFoundError(ResourceNotFoundError):
    """Raised when the authenticated user's record is gone."""

    default_message = "User not found"


class EmailTemplateError(AppException):
    """
    Base exception for email template operations.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Email template error"


class EmailTemplateNotFoundError(ResourceNotFoundError):
    """Raised when an email template doesn't exist."""

    default_message = "Email template not found"


class EmailTemplateRenderError(EmailTemplateError):
    """
    Raised when template rendering fails.

    WHY: A missing skeleton file or a Jinja2 error is a server fault the
    editor cannot fix by changing fields.

    HTTP Status: 422 Unprocessable Entity
    """

    status_code = 422
    default_message = "Failed to render email template"


class TemplatesAlreadyExistError(EmailTemplateError):
    """Raised when default templates are requested for a user who already has templates."""

    default_message = "User already has email templates"
