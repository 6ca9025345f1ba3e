"""Mail transport type definitions: known SMTP services and delivery outcomes."""

from enum import Enum
from typing import NamedTuple, Optional


class SmtpEndpoint(NamedTuple):
    """Where and how to reach a mail service's submission server."""

    host: str
    port: int
    use_ssl: bool  # implicit TLS; otherwise STARTTLS


class MailService(Enum):
    """
    Well-known mail services selectable by name through EMAIL_SERVICE.

    Names are matched case-insensitively, the same way users write them in
    `.env` ("Gmail", "gmail", "GMAIL").
    """

    GMAIL = SmtpEndpoint("smtp.gmail.com", 465, True)
    OUTLOOK = SmtpEndpoint("smtp-mail.outlook.com", 587, False)
    HOTMAIL = SmtpEndpoint("smtp-mail.outlook.com", 587, False)
    OFFICE365 = SmtpEndpoint("smtp.office365.com", 587, False)
    YAHOO = SmtpEndpoint("smtp.mail.yahoo.com", 465, True)
    ICLOUD = SmtpEndpoint("smtp.mail.me.com", 587, False)
    ZOHO = SmtpEndpoint("smtp.zoho.com", 465, True)
    FASTMAIL = SmtpEndpoint("smtp.fastmail.com", 465, True)
    SENDGRID = SmtpEndpoint("smtp.sendgrid.net", 587, False)
    MAILGUN = SmtpEndpoint("smtp.mailgun.org", 465, True)

    @property
    def endpoint(self) -> SmtpEndpoint:
        return self.value

    @classmethod
    def lookup(cls, name: Optional[str]) -> Optional["MailService"]:
        """Find a service by name, or None if the name is empty or unknown."""
        if not name:
            return None
        return cls.__members__.get(name.strip().upper())


class DeliveryFailure(str, Enum):
    """Why a transport could not deliver a message."""

    AUTHENTICATION = "authentication"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"


class DeliveryResult(NamedTuple):
    """Outcome of one send attempt. `failure` is None on success."""

    failure: Optional[DeliveryFailure] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def delivered(cls) -> "DeliveryResult":
        return cls()

    @classmethod
    def failed(cls, failure: DeliveryFailure, detail: str = "") -> "DeliveryResult":
        return cls(failure=failure, detail=detail)
