"""Tests for the contact form endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from models.email_types import DeliveryFailure, DeliveryResult
from conftest import RecordingProvider

CONTACT_URL = "/api/contact"


class TestSubmitContactForm:
    """Happy path and response shape."""

    def test_valid_submission_is_relayed(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """A valid submission returns 200 and sends exactly one email."""
        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Message sent successfully!",
        }
        assert len(recording_provider.sent) == 1

    def test_email_content(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """Subject embeds the sender's name; mail goes to the owner."""
        client.post(CONTACT_URL, json=valid_payload)

        email = recording_provider.sent[0]
        assert email.subject == "Portfolio Contact: Ada Lovelace"
        assert email.sender == "owner@example.com"
        assert email.recipient == "owner@example.com"
        assert email.reply_to == "ada@example.com"
        assert "ada@example.com" in email.text_body

    def test_minimal_valid_submission(
        self, client: TestClient, recording_provider: RecordingProvider
    ) -> None:
        """Boundary lengths are accepted."""
        response = client.post(
            CONTACT_URL,
            json={"name": "Al", "email": "al@x.com", "message": "Hello there!"},
        )

        assert response.status_code == 200

    def test_response_carries_correlation_id(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """Well-formed incoming correlation IDs are echoed back."""
        response = client.post(
            CONTACT_URL, json=valid_payload, headers={"X-Correlation-ID": "abc12345"}
        )

        assert response.headers["X-Correlation-ID"] == "abc12345"

    def test_name_with_line_break_is_delivered(
        self, client: TestClient, valid_payload: dict
    ) -> None:
        """Line breaks in the name cannot smuggle extra mail headers."""
        payload = {**valid_payload, "name": "Ada\nBcc: evil@x.com"}

        with patch("services.email_service.smtplib.SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value
            response = client.post(CONTACT_URL, json=payload)

        assert response.status_code == 200
        sender, recipients, message = server.sendmail.call_args.args
        assert recipients == ["owner@example.com"]
        assert "Subject: Portfolio Contact: Ada Bcc: evil@x.com" in message
        assert "\nBcc:" not in message


class TestContactValidation:
    """Server-side schema enforcement."""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("name", "A"),
            ("name", "x" * 101),
            ("email", "not-an-email"),
            ("message", "too short"),
            ("message", "x" * 1001),
        ],
    )
    def test_invalid_field_rejected(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
        field: str,
        value: str,
    ) -> None:
        """Each constraint violation yields a 400 naming only that field."""
        payload = {**valid_payload, field: value}

        response = client.post(CONTACT_URL, json=payload)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Validation error"
        assert data["code"] == "validation_error"
        assert [err["field"] for err in data["errors"]] == [field]
        assert recording_provider.sent == []

    def test_all_errors_reported_together(
        self, client: TestClient, recording_provider: RecordingProvider
    ) -> None:
        """Every invalid field is reported in one response."""
        response = client.post(
            CONTACT_URL, json={"name": "A", "email": "nope", "message": "short"}
        )

        assert response.status_code == 400
        fields = {err["field"] for err in response.json()["errors"]}
        assert fields == {"name", "email", "message"}

    def test_missing_fields_rejected(
        self, client: TestClient, recording_provider: RecordingProvider
    ) -> None:
        """An empty object fails on all three fields."""
        response = client.post(CONTACT_URL, json={})

        assert response.status_code == 400
        assert len(response.json()["errors"]) == 3

    def test_submitted_values_not_echoed(
        self, client: TestClient, valid_payload: dict
    ) -> None:
        """Validation errors describe the problem without repeating the input."""
        response = client.post(CONTACT_URL, json={**valid_payload, "name": "Z"})

        assert "input" not in response.json()["errors"][0]

    def test_malformed_json_rejected(self, client: TestClient) -> None:
        """A body that is not JSON is a validation error, not a crash."""
        response = client.post(
            CONTACT_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "body"

    def test_non_object_body_rejected(self, client: TestClient) -> None:
        """A JSON array is not a submission."""
        response = client.post(CONTACT_URL, json=["Ada", "ada@example.com"])

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"


class TestEmailConfiguration:
    """Configuration check before any transport attempt."""

    def test_placeholder_credentials(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
        unconfigured_email: None,
    ) -> None:
        """Placeholder credentials short-circuit with a recognizable 500."""
        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert "Email service not configured" in data["message"]
        assert data["code"] == "email_not_configured"
        assert recording_provider.sent == []

    def test_missing_password(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """An unset password counts as not configured."""
        from models.config import settings

        monkeypatch.setattr(settings, "EMAIL_PASS", "")

        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 500
        assert "Email service not configured" in response.json()["message"]
        assert recording_provider.sent == []

    def test_validation_runs_before_configuration_check(
        self, client: TestClient, unconfigured_email: None
    ) -> None:
        """Bad input is reported as such even when email is not configured."""
        response = client.post(
            CONTACT_URL, json={"name": "A", "email": "a@b.co", "message": "x" * 20}
        )

        assert response.status_code == 400


class TestTransportFailures:
    """Mapping of transport outcomes to responses."""

    def test_authentication_failure(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """Rejected credentials produce the authentication message."""
        recording_provider.result = DeliveryResult.failed(
            DeliveryFailure.AUTHENTICATION, "535 bad credentials"
        )

        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 500
        data = response.json()
        assert "Email authentication failed" in data["message"]
        assert data["code"] == "email_auth_failed"

    @pytest.mark.parametrize(
        "failure", [DeliveryFailure.TRANSPORT, DeliveryFailure.TIMEOUT]
    )
    def test_generic_failure(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
        failure: DeliveryFailure,
    ) -> None:
        """Other failures produce the generic message."""
        recording_provider.result = DeliveryResult.failed(failure)

        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to send email. Please try again later.",
            "code": "email_delivery_failed",
            "correlation_id": response.headers["X-Correlation-ID"],
        }

    def test_unexpected_error(self, client: TestClient, valid_payload: dict) -> None:
        """Anything unforeseen becomes a generic 500 without details."""
        with patch(
            "routers.contact_router.ContactService.submit_contact_form",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            response = client.post(
                CONTACT_URL,
                json=valid_payload,
                headers={
                    "X-Correlation-ID": "abc12345",
                    "Origin": "https://portfolio.example",
                },
            )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to send message. Please try again later.",
            "code": "internal_error",
            "correlation_id": "abc12345",
        }
        assert "boom" not in response.text
        # The response still goes through the rest of the middleware stack
        assert response.headers["X-Correlation-ID"] == "abc12345"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Access-Control-Allow-Origin"] == "*"



class TestContactRateLimit:
    """Per-client throttling."""

    def test_sixth_request_is_throttled(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """Five requests per window pass; the sixth gets 429."""
        for _ in range(5):
            assert client.post(CONTACT_URL, json=valid_payload).status_code == 200

        response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 429
        assert response.json() == {
            "error": "Too many requests, please try again later."
        }
        assert len(recording_provider.sent) == 5

    def test_invalid_requests_count_toward_limit(
        self, client: TestClient, recording_provider: RecordingProvider
    ) -> None:
        """Throttling happens before validation, so rejected bodies count too."""
        for _ in range(5):
            assert client.post(CONTACT_URL, json={}).status_code == 400

        assert client.post(CONTACT_URL, json={}).status_code == 429

    def test_throttled_request_skips_validation_and_transport(
        self,
        client: TestClient,
        valid_payload: dict,
        recording_provider: RecordingProvider,
    ) -> None:
        """Once throttled, neither the schema nor the transport is consulted."""
        for _ in range(5):
            client.post(CONTACT_URL, json=valid_payload)

        with patch(
            "routers.contact_router.ContactService.parse_submission"
        ) as parse:
            response = client.post(CONTACT_URL, json=valid_payload)

        assert response.status_code == 429
        parse.assert_not_called()
        assert len(recording_provider.sent) == 5
