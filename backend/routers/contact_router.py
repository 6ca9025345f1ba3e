"""Contact form router for handling portfolio inquiries."""

import json

from fastapi import APIRouter, Request
from loguru import logger

from helpers.rate_limiter import limiter
from helpers.redaction import mask_email
from models.config import settings
from models.exceptions import ContactValidationException
from models.schemas import ContactFormResponse
from services.contact_service import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])

SUCCESS_MESSAGE = "Message sent successfully!"


@router.post("", response_model=ContactFormResponse)
@limiter.limit(settings.CONTACT_RATE_LIMIT)
async def submit_contact_form(request: Request) -> ContactFormResponse:
    """Submit a contact form.

    Relays the message to the site owner by email. No authentication
    required - public endpoint, rate limited per client.

    The body is read here rather than declared as a parameter so the rate
    limit is enforced before any parsing or validation happens.

    Args:
        request: FastAPI request object (required for rate limiter)

    Returns:
        Success response with confirmation message

    Raises:
        ContactValidationException: 400 if the body is not a valid submission
        EmailNotConfiguredException: 500 if mail credentials are missing
        EmailAuthenticationException: 500 if the transport rejects the credentials
        EmailDeliveryException: 500 if sending fails for any other reason
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ContactValidationException(
            [
                {
                    "field": "body",
                    "message": "Request body must be valid JSON",
                    "type": "json_invalid",
                }
            ]
        )

    form = ContactService.parse_submission(payload)
    logger.info(f"Contact form submitted: email={mask_email(form.email)}")

    await ContactService.submit_contact_form(form)

    return ContactFormResponse(success=True, message=SUCCESS_MESSAGE)
