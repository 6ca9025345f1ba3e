from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional


# Values shipped in .env.example; treated the same as an unset variable
PLACEHOLDER_EMAIL_USER = "your-email@gmail.com"
PLACEHOLDER_EMAIL_PASS = "your-app-password"


# Contact Form Schemas
class ContactFormRequest(BaseModel):
    """Contact form submission from the portfolio site."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    message: str = Field(..., min_length=10, max_length=1000)


class ContactFormResponse(BaseModel):
    success: bool
    message: str


class FieldError(BaseModel):
    """One failed constraint on one submitted field."""

    field: str
    message: str
    type: str


class ContactErrorResponse(BaseModel):
    success: bool = False
    message: str
    code: str
    errors: Optional[List[FieldError]] = None
    correlation_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    email_configured: bool


# Email Schemas
class EmailConfiguration(BaseModel):
    """Mail transport credentials as read from the environment."""

    model_config = ConfigDict(frozen=True)

    user: str = ""
    password: str = Field(default="", repr=False)
    service: str = ""
    recipient: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        """True when both credentials are set and are not the example placeholders."""
        if not self.user or self.user == PLACEHOLDER_EMAIL_USER:
            return False
        if not self.password or self.password == PLACEHOLDER_EMAIL_PASS:
            return False
        return True

    @property
    def delivery_address(self) -> str:
        return self.recipient or self.user


class OutboundEmail(BaseModel):
    """A fully rendered message ready to hand to a transport."""

    sender: str
    recipient: str
    subject: str
    text_body: str
    html_body: str
    reply_to: Optional[str] = None
