"""Client side of the contact form: local validation and submission state."""

from contact_client.controller import (
    ContactFormController,
    SubmissionState,
    SubmissionStatus,
    is_config_error_message,
)
from contact_client.validation import ContactSubmission, validate_submission

__all__ = [
    "ContactFormController",
    "ContactSubmission",
    "SubmissionState",
    "SubmissionStatus",
    "is_config_error_message",
    "validate_submission",
]
