"""Local checks run before a contact form is sent.

These mirror the server's schema so most mistakes are caught without a
round trip. The server revalidates everything regardless.
"""

import re
from typing import NamedTuple

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 1000

FIELDS = ("name", "email", "message")


class ContactSubmission(NamedTuple):
    name: str
    email: str
    message: str


def validate_submission(submission: ContactSubmission) -> dict[str, str]:
    """
    Check every field of a submission.

    All fields are checked independently so every problem is reported at
    once. Surrounding whitespace is ignored, matching what is sent.

    Args:
        submission: The values currently in the form

    Returns:
        Mapping of field name to error message; empty when the form is valid.
    """
    errors: dict[str, str] = {}

    name = submission.name.strip()
    if len(name) < NAME_MIN_LENGTH:
        errors["name"] = f"Name must be at least {NAME_MIN_LENGTH} characters"
    elif len(name) > NAME_MAX_LENGTH:
        errors["name"] = f"Name must be at most {NAME_MAX_LENGTH} characters"

    if not EMAIL_PATTERN.match(submission.email.strip()):
        errors["email"] = "Please enter a valid email address"

    message = submission.message.strip()
    if len(message) < MESSAGE_MIN_LENGTH:
        errors["message"] = f"Message must be at least {MESSAGE_MIN_LENGTH} characters"
    elif len(message) > MESSAGE_MAX_LENGTH:
        errors["message"] = f"Message must be at most {MESSAGE_MAX_LENGTH} characters"

    return errors
