"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to JSON
responses by centralized exception handlers in main.py, keeping the contact
service free of HTTP concerns.

Every exception carries a correlation ID so a user-reported error can be
matched to the server log line that explains it. Messages returned to the
browser are fixed strings; the portfolio frontend matches on them.
"""

from typing import Any

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code returned alongside the message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    code = "internal_error"

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class ValidationException(DomainException):
    """Raised when input validation fails."""

    code = "validation_error"


class ContactValidationException(ValidationException):
    """Raised when a contact form submission violates its schema."""

    def __init__(
        self,
        errors: list[dict[str, Any]],
        message: str = "Validation error",
    ):
        super().__init__(message)
        self.errors = errors


# ============================================================================
# Email Exceptions
# ============================================================================


class EmailException(DomainException):
    """Base exception for outbound email errors. Not recoverable by the submitter."""

    pass


class EmailNotConfiguredException(EmailException):
    """Raised before any transport attempt when credentials are missing or placeholders."""

    code = "email_not_configured"

    def __init__(
        self,
        message: str = "Email service not configured. Please contact the administrator.",
    ):
        super().__init__(message)


class EmailAuthenticationException(EmailException):
    """Raised when the mail transport rejects the configured credentials."""

    code = "email_auth_failed"

    def __init__(
        self,
        message: str = "Email authentication failed. Please check your email credentials.",
    ):
        super().__init__(message)


class EmailDeliveryException(EmailException):
    """Raised when email fails to send for any other reason."""

    code = "email_delivery_failed"

    def __init__(self, message: str = "Failed to send email. Please try again later."):
        super().__init__(message)
