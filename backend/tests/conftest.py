"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["EMAIL_PROVIDER"] = "smtp"
os.environ["EMAIL_USER"] = "owner@example.com"
os.environ["EMAIL_PASS"] = "test-app-password"  # pragma: allowlist secret
os.environ["EMAIL_SERVICE"] = "gmail"
os.environ["EMAIL_RECIPIENT"] = ""
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"

from models.config import settings  # noqa: E402
from models.email_types import DeliveryResult  # noqa: E402
from models.schemas import OutboundEmail  # noqa: E402
from services.email_service import EmailProvider  # noqa: E402


class RecordingProvider(EmailProvider):
    """Email provider that records messages and returns a canned result."""

    def __init__(self, result: DeliveryResult | None = None) -> None:
        self.result = result or DeliveryResult.delivered()
        self.sent: list[OutboundEmail] = []

    async def send(self, email: OutboundEmail) -> DeliveryResult:
        self.sent.append(email)
        return self.result


@pytest.fixture
def valid_payload() -> dict[str, str]:
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "I would love to talk about your projects.",
    }


@pytest.fixture
def recording_provider(monkeypatch: pytest.MonkeyPatch) -> RecordingProvider:
    """Replace the configured transport for the duration of a test."""
    provider = RecordingProvider()
    monkeypatch.setattr(
        "services.contact_service.get_email_provider", lambda: provider
    )
    return provider


@pytest.fixture
def unconfigured_email(monkeypatch: pytest.MonkeyPatch) -> None:
    """Simulate a deployment that never filled in the mail credentials."""
    monkeypatch.setattr(settings, "EMAIL_USER", "your-email@gmail.com")
    monkeypatch.setattr(settings, "EMAIL_PASS", "your-app-password")


@pytest.fixture(scope="function")
def client():
    """Create a test client with a clean rate limiter."""
    from helpers.rate_limiter import limiter
    from main import app

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    limiter.reset()
