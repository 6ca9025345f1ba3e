"""
Contact form controller used by the portfolio frontend.

Owns the form fields, their validation errors and the submission status.
A submission goes through at most one HTTP request; the outcome is turned
into a status the page can render:

    Idle -> Submitting -> Success | Error -> (after display window) Idle

Configuration problems on the server (missing or rejected mail
credentials) lock the form until reset(), since resubmitting cannot help.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx
from loguru import logger

from contact_client.validation import FIELDS, ContactSubmission, validate_submission

DEFAULT_ENDPOINT = "http://localhost:5000/api/contact"
DISPLAY_SECONDS = 5.0
REQUEST_TIMEOUT = 15.0

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
FALLBACK_ERROR_MESSAGE = "Something went wrong"

# The server reports these by message text only
CONFIG_ERROR_MARKERS = (
    "Email service not configured",
    "Email authentication failed",
)


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SubmissionStatus:
    """What the form should currently show."""

    state: SubmissionState = SubmissionState.IDLE
    message: Optional[str] = None
    is_config_error: bool = False

    @classmethod
    def idle(cls) -> "SubmissionStatus":
        return cls()

    @classmethod
    def submitting(cls) -> "SubmissionStatus":
        return cls(SubmissionState.SUBMITTING)

    @classmethod
    def success(cls, message: str) -> "SubmissionStatus":
        return cls(SubmissionState.SUCCESS, message)

    @classmethod
    def error(cls, message: str, is_config_error: bool = False) -> "SubmissionStatus":
        return cls(SubmissionState.ERROR, message, is_config_error)


def is_config_error_message(message: str) -> bool:
    """True if a server error means the backend itself is misconfigured."""
    return any(marker in message for marker in CONFIG_ERROR_MARKERS)


class ContactFormController:
    """
    State holder for one contact form.

    Args:
        endpoint: URL of the contact endpoint.
        http_client: Client to send with; one is created (and owned) if omitted.
        display_seconds: How long Success/Error stay visible before reverting to Idle.
        timeout: Upper bound for the HTTP request, in seconds.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        http_client: httpx.AsyncClient | None = None,
        display_seconds: float = DISPLAY_SECONDS,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self.display_seconds = display_seconds
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

        self.values: dict[str, str] = dict.fromkeys(FIELDS, "")
        self.errors: dict[str, str] = {}
        self.status = SubmissionStatus.idle()
        self.locked = False
        self._revert_handle: asyncio.TimerHandle | None = None

    async def __aenter__(self) -> "ContactFormController":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._cancel_revert()
        if self._owns_client:
            await self._client.aclose()

    @property
    def submission(self) -> ContactSubmission:
        return ContactSubmission(**self.values)

    @property
    def can_submit(self) -> bool:
        """False while a request is in flight or after a configuration error."""
        return not self.locked and self.status.state is not SubmissionState.SUBMITTING

    def update_field(self, field: str, value: str) -> None:
        """Set a field; an error shown for that field is cleared immediately."""
        if field not in self.values:
            raise KeyError(f"Unknown contact form field: {field}")
        self.values[field] = value
        self.errors.pop(field, None)

    def validate(self) -> bool:
        self.errors = validate_submission(self.submission)
        return not self.errors

    def reset(self) -> None:
        """Return the form to its freshly loaded state, lifting any lock."""
        self._cancel_revert()
        self.values = dict.fromkeys(FIELDS, "")
        self.errors = {}
        self.status = SubmissionStatus.idle()
        self.locked = False

    async def submit(self) -> SubmissionStatus:
        """
        Validate and send the form.

        Returns:
            The status after the attempt. Invalid input returns the current
            status unchanged with `errors` populated and no request made.
        """
        if not self.can_submit:
            return self.status
        if not self.validate():
            return self.status

        self._set_status(SubmissionStatus.submitting())
        submission = self.submission
        payload = {
            "name": submission.name.strip(),
            "email": submission.email.strip(),
            "message": submission.message.strip(),
        }

        try:
            response = await self._client.post(
                self.endpoint, json=payload, timeout=self.timeout
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Contact form request failed: {e!r}")
            self._set_status(SubmissionStatus.error(NETWORK_ERROR_MESSAGE))
            return self.status

        if not isinstance(data, dict):
            data = {}

        if response.is_success:
            self.values = dict.fromkeys(FIELDS, "")
            self._set_status(SubmissionStatus.success(str(data.get("message", ""))))
            return self.status

        message = str(data.get("message") or data.get("error") or FALLBACK_ERROR_MESSAGE)
        is_config_error = is_config_error_message(message)
        if is_config_error:
            self.locked = True
        self._set_status(SubmissionStatus.error(message, is_config_error))
        return self.status

    def _set_status(self, status: SubmissionStatus) -> None:
        self._cancel_revert()
        self.status = status
        if status.state in (SubmissionState.SUCCESS, SubmissionState.ERROR):
            loop = asyncio.get_running_loop()
            self._revert_handle = loop.call_later(self.display_seconds, self._revert)

    def _revert(self) -> None:
        self._revert_handle = None
        self.status = SubmissionStatus.idle()

    def _cancel_revert(self) -> None:
        if self._revert_handle is not None:
            self._revert_handle.cancel()
            self._revert_handle = None
