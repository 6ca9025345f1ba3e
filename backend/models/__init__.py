"""Models package - Pydantic schemas and domain types."""

from .email_types import DeliveryFailure, DeliveryResult, MailService, SmtpEndpoint

__all__ = [
    "DeliveryFailure",
    "DeliveryResult",
    "MailService",
    "SmtpEndpoint",
]
