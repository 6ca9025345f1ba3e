"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .contact_service import ContactService
from .email_service import ConsoleProvider, EmailProvider, SMTPProvider, get_email_provider

__all__ = [
    "ContactService",
    "ConsoleProvider",
    "EmailProvider",
    "SMTPProvider",
    "get_email_provider",
]
