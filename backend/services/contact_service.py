"""Contact form service for relaying portfolio inquiries.

This module validates contact form submissions, checks that outbound email
is configured, and hands the rendered message to the email transport.
"""

import asyncio
import html
from typing import Any

from loguru import logger
from pydantic import ValidationError

from helpers.redaction import mask_email
from models.config import settings
from models.email_types import DeliveryFailure
from models.exceptions import (
    ContactValidationException,
    EmailAuthenticationException,
    EmailDeliveryException,
    EmailNotConfiguredException,
)
from models.schemas import ContactFormRequest, EmailConfiguration, OutboundEmail
from services.email_service import EmailProvider, get_email_provider


class ContactService:
    """Service for handling contact form submissions."""

    SUBJECT_PREFIX = "Portfolio Contact"

    @classmethod
    def parse_submission(cls, payload: Any) -> ContactFormRequest:
        """Validate an untrusted request body.

        Args:
            payload: Decoded JSON body (any shape)

        Returns:
            The validated submission

        Raises:
            ContactValidationException: With one entry per failed constraint
        """
        try:
            return ContactFormRequest.model_validate(payload)
        except ValidationError as e:
            errors = cls._format_errors(e)
            logger.info(
                f"Contact form rejected: {[err['field'] for err in errors]}"
            )
            raise ContactValidationException(errors) from e

    @staticmethod
    def _format_errors(error: ValidationError) -> list[dict[str, str]]:
        """Flatten pydantic errors without echoing submitted values back."""
        formatted = []
        for err in error.errors(include_url=False, include_input=False):
            loc = [str(part) for part in err.get("loc", ())]
            formatted.append(
                {
                    "field": ".".join(loc) or "body",
                    "message": err.get("msg", "Invalid value"),
                    "type": err.get("type", "value_error"),
                }
            )
        return formatted

    @staticmethod
    def check_configuration(
        config: EmailConfiguration | None = None,
    ) -> EmailConfiguration:
        """Make sure credentials exist before any connection is attempted.

        Raises:
            EmailNotConfiguredException: If user/password are unset or placeholders
        """
        config = config or settings.get_email_configuration()
        if not config.is_configured:
            logger.warning("Email not configured properly. Check .env file.")
            raise EmailNotConfiguredException()
        return config

    @classmethod
    def build_email(
        cls, form: ContactFormRequest, config: EmailConfiguration
    ) -> OutboundEmail:
        """Build the notification sent to the site owner.

        User-provided data is HTML-escaped in the HTML part.
        """
        text_body = (
            f"Name: {form.name}\n"
            f"Email: {form.email}\n"
            f"\n"
            f"Message:\n"
            f"{form.message}"
        )

        safe_name = html.escape(form.name)
        safe_email = html.escape(form.email)
        safe_message = html.escape(form.message).replace("\n", "<br>")

        html_body = (
            f"<p><strong>Name:</strong> {safe_name}</p>\n"
            f"<p><strong>Email:</strong> {safe_email}</p>\n"
            f"<p><strong>Message:</strong></p>\n"
            f"<p>{safe_message}</p>"
        )

        return OutboundEmail(
            sender=config.user,
            recipient=config.delivery_address,
            # Header values must stay on one line
            subject=f"{cls.SUBJECT_PREFIX}: {' '.join(form.name.splitlines())}",
            text_body=text_body,
            html_body=html_body,
            reply_to=form.email,
        )

    @classmethod
    async def submit_contact_form(
        cls,
        form: ContactFormRequest,
        provider: EmailProvider | None = None,
        timeout: float | None = None,
    ) -> None:
        """Deliver a validated contact form submission.

        Args:
            form: The validated contact form data
            provider: Transport override (defaults to EMAIL_PROVIDER)
            timeout: Seconds to wait for the transport (defaults to EMAIL_SEND_TIMEOUT)

        Raises:
            EmailNotConfiguredException: Credentials missing; transport not contacted
            EmailAuthenticationException: Transport rejected the credentials
            EmailDeliveryException: Any other transport failure, including timeout
        """
        config = cls.check_configuration()
        email = cls.build_email(form, config)
        provider = provider or get_email_provider()
        timeout = timeout if timeout is not None else settings.EMAIL_SEND_TIMEOUT

        try:
            result = await asyncio.wait_for(provider.send(email), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Email sending timed out after {timeout}s")
            raise EmailDeliveryException()

        if result.failure is DeliveryFailure.AUTHENTICATION:
            logger.error(f"Email sending error: authentication ({result.detail})")
            raise EmailAuthenticationException()
        if not result.ok:
            logger.error(f"Email sending error: {result.failure.value} ({result.detail})")
            raise EmailDeliveryException()

        logger.info(f"Contact form relayed: from={mask_email(form.email)}")
