"""Tests for client-side contact form validation."""

import pytest

from contact_client.validation import ContactSubmission, validate_submission

VALID = ContactSubmission(name="Al", email="al@x.com", message="Hello there!")


class TestValidateSubmission:
    """Field checks run before anything is sent."""

    def test_valid_submission(self) -> None:
        assert validate_submission(VALID) == {}

    def test_short_name_only_affects_name(self) -> None:
        errors = validate_submission(VALID._replace(name="A"))
        assert errors == {"name": "Name must be at least 2 characters"}

    def test_long_name(self) -> None:
        errors = validate_submission(VALID._replace(name="x" * 101))
        assert errors == {"name": "Name must be at most 100 characters"}

    def test_name_whitespace_ignored(self) -> None:
        errors = validate_submission(VALID._replace(name="  A  "))
        assert "name" in errors

    @pytest.mark.parametrize(
        "email",
        ["", "plainaddress", "a@b", "a b@c.com", "a@@b.com", "@example.com"],
    )
    def test_invalid_email(self, email: str) -> None:
        errors = validate_submission(VALID._replace(email=email))
        assert errors == {"email": "Please enter a valid email address"}

    def test_short_message(self) -> None:
        errors = validate_submission(VALID._replace(message="  too short  "))
        assert errors == {"message": "Message must be at least 10 characters"}

    def test_long_message(self) -> None:
        errors = validate_submission(VALID._replace(message="x" * 1001))
        assert errors == {"message": "Message must be at most 1000 characters"}

    def test_email_whitespace_ignored(self) -> None:
        assert validate_submission(VALID._replace(email="  al@x.com \n")) == {}

    def test_boundaries_accepted(self) -> None:
        submission = ContactSubmission(
            name="x" * 100, email="a@b.co", message="y" * 1000
        )
        assert validate_submission(submission) == {}

    def test_all_errors_reported_at_once(self) -> None:
        errors = validate_submission(ContactSubmission(name="", email="", message=""))
        assert set(errors) == {"name", "email", "message"}

    def test_idempotent(self) -> None:
        submission = ContactSubmission(name="A", email="bad", message="short")
        assert validate_submission(submission) == validate_submission(submission)
