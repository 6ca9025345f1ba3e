import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.schemas import EmailConfiguration


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so the mail credentials
    can be provided from `backend/.env`.

    Do NOT auto-load `.env` when running under pytest or in CI, so tests that
    check the "not configured" path are not affected by a developer's file.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', or 'production'",
    )
    HOST: str = Field(default="0.0.0.0", description="Interface to listen on")
    PORT: int = Field(default=5000, description="Port to listen on")
    CORS_ORIGINS: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="smtp",
        description="Email provider: 'smtp' or 'console'",
    )
    EMAIL_USER: str = Field(
        default="",
        description="Mailbox used to authenticate and send contact notifications",
    )
    EMAIL_PASS: str = Field(
        default="",
        description="Password or app password for EMAIL_USER",
    )
    EMAIL_SERVICE: str = Field(
        default="gmail",
        description="Well-known mail service name (gmail, outlook, yahoo, ...)",
    )
    EMAIL_RECIPIENT: str = Field(
        default="",
        description="Where contact messages are delivered (defaults to EMAIL_USER)",
    )
    EMAIL_SEND_TIMEOUT: float = Field(
        default=10.0,
        description="Seconds to wait for the mail transport before giving up",
    )

    # Explicit SMTP overrides (take precedence over the EMAIL_SERVICE table)
    SMTP_HOST: str = Field(
        default="",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=0,
        description="SMTP server port",
    )
    SMTP_USE_TLS: bool | None = Field(
        default=None,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool | None = Field(
        default=None,
        description="Use implicit SSL for SMTP connection (port 465)",
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable/disable request rate limiting globally",
    )
    CONTACT_RATE_LIMIT: str = Field(
        default="5 per 15 minutes",
        description="Contact form submissions allowed per client",
    )
    RATE_LIMIT_STORAGE_URI: str = Field(
        default="memory://",
        description="Counter storage: 'memory://' or 'redis://host:port' for multiple instances",
    )
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Key rate limits on proxy headers (only behind a trusted proxy)",
    )

    def get_email_configuration(self) -> EmailConfiguration:
        """Snapshot of the mail credentials currently in the environment."""
        return EmailConfiguration(
            user=self.EMAIL_USER,
            password=self.EMAIL_PASS,
            service=self.EMAIL_SERVICE,
            recipient=self.EMAIL_RECIPIENT or None,
        )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
