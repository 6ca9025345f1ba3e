"""Email service for delivering contact form notifications.

This module provides a unified interface for sending emails through various providers.
Supports:
- console: Logs emails to console (development)
- smtp: Standard SMTP delivery, host picked from EMAIL_SERVICE or SMTP_HOST

Providers never raise for delivery problems. They return a DeliveryResult
tagged with the failure reason so callers can tell a credentials problem
from a flaky network.
"""

import asyncio
import re
import smtplib
from abc import ABC, abstractmethod
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from models.config import Settings, settings
from models.email_types import DeliveryFailure, DeliveryResult, MailService, SmtpEndpoint
from models.schemas import EmailConfiguration, OutboundEmail

DEFAULT_SMTP_ENDPOINT = SmtpEndpoint("localhost", 587, False)


def resolve_smtp_endpoint(config: Settings) -> SmtpEndpoint:
    """Pick the SMTP server: explicit SMTP_HOST first, then the EMAIL_SERVICE table."""
    if config.SMTP_HOST:
        use_ssl = (
            config.SMTP_USE_SSL
            if config.SMTP_USE_SSL is not None
            else config.SMTP_PORT == 465
        )
        port = config.SMTP_PORT or (465 if use_ssl else 587)
        return SmtpEndpoint(config.SMTP_HOST, port, use_ssl)

    service = MailService.lookup(config.EMAIL_SERVICE)
    if service is None:
        logger.warning(
            f"Unknown email service '{config.EMAIL_SERVICE}', "
            f"falling back to {DEFAULT_SMTP_ENDPOINT.host}:{DEFAULT_SMTP_ENDPOINT.port}"
        )
        return DEFAULT_SMTP_ENDPOINT

    endpoint = service.endpoint
    if config.SMTP_USE_SSL is not None:
        endpoint = endpoint._replace(use_ssl=config.SMTP_USE_SSL)
    return endpoint


def _mentions_authentication(error: smtplib.SMTPResponseException) -> bool:
    smtp_error = error.smtp_error
    if isinstance(smtp_error, bytes):
        smtp_error = smtp_error.decode("utf-8", errors="replace")
    return "authentication" in str(smtp_error).lower()


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    async def send(self, email: OutboundEmail) -> DeliveryResult:
        """Send an email."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(
        self,
        credentials: EmailConfiguration | None = None,
        endpoint: SmtpEndpoint | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize SMTP provider with settings."""
        credentials = credentials or settings.get_email_configuration()
        endpoint = endpoint or resolve_smtp_endpoint(settings)

        self.user = credentials.user
        self.password = credentials.password
        self.host = endpoint.host
        self.port = endpoint.port
        self.use_ssl = endpoint.use_ssl
        self.use_tls = settings.SMTP_USE_TLS if settings.SMTP_USE_TLS is not None else True
        self.timeout = timeout if timeout is not None else settings.EMAIL_SEND_TIMEOUT

    def build_message(self, email: OutboundEmail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = email.subject
        msg["From"] = email.sender
        msg["To"] = email.recipient
        if email.reply_to:
            msg["Reply-To"] = email.reply_to

        msg.attach(MIMEText(email.text_body, "plain", "utf-8"))
        msg.attach(MIMEText(email.html_body, "html", "utf-8"))
        return msg

    def _open(self) -> smtplib.SMTP:
        if self.use_ssl:
            # Implicit SSL (port 465) - connection is encrypted from start
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            # STARTTLS (port 587) - upgrade to TLS after connection
            server.starttls()
        return server

    def _deliver(self, email: OutboundEmail) -> None:
        """Blocking SMTP conversation; runs in a worker thread."""
        # Build the payload before connecting
        payload = self.build_message(email).as_string()
        with self._open() as server:
            if self.user and self.password:
                logger.debug("SMTP: Authenticating...")
                server.login(self.user, self.password)
            server.sendmail(email.sender, [email.recipient], payload)

    async def send(self, email: OutboundEmail) -> DeliveryResult:
        """Send email via SMTP.

        Supports both:
        - Implicit SSL (port 465)
        - STARTTLS (port 587)
        """
        logger.info(
            f"SMTP: Connecting to {self.host}:{self.port} "
            f"(SSL={self.use_ssl}, TLS={self.use_tls and not self.use_ssl})"
        )
        try:
            await asyncio.to_thread(self._deliver, email)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error!r}")
            return DeliveryResult.failed(DeliveryFailure.AUTHENTICATION, str(e))
        except smtplib.SMTPResponseException as e:
            if _mentions_authentication(e):
                logger.error(f"SMTP: Authentication rejected - {e.smtp_code}: {e.smtp_error!r}")
                return DeliveryResult.failed(DeliveryFailure.AUTHENTICATION, str(e))
            logger.error(f"SMTP: Server error - {e.smtp_code}: {e.smtp_error!r}")
            return DeliveryResult.failed(DeliveryFailure.TRANSPORT, str(e))
        except TimeoutError as e:
            logger.error(f"SMTP: Timed out talking to {self.host}:{self.port}")
            return DeliveryResult.failed(DeliveryFailure.TIMEOUT, str(e))
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP: Failed to send email - {e!r}")
            return DeliveryResult.failed(DeliveryFailure.TRANSPORT, str(e))
        except (MessageError, ValueError) as e:
            logger.error(f"SMTP: Could not build message - {e!r}")
            return DeliveryResult.failed(DeliveryFailure.TRANSPORT, str(e))

        logger.info("SMTP: Email accepted by server")
        return DeliveryResult.delivered()


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    async def send(self, email: OutboundEmail) -> DeliveryResult:
        """Log email to console."""
        clean_html = re.sub(r"<[^>]+>", "", email.html_body)[:500]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"From: {email.sender}\n"
            f"To: {email.recipient}\n"
            f"Reply-To: {email.reply_to or '-'}\n"
            f"Subject: {email.subject}\n"
            f"{'-' * 60}\n"
            f"PLAIN TEXT:\n{email.text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview):\n{clean_html}\n"
            f"{'=' * 60}\n"
        )
        return DeliveryResult.delivered()


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()
