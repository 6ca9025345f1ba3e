# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports so settings see .env

import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from helpers.rate_limiter import limiter, rate_limit_exceeded_handler
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    ContactValidationException,
    DomainException,
    EmailException,
)
from models.schemas import ContactErrorResponse, FieldError, HealthResponse
from routers import contact_router

# Configure logging with Loguru
configure_logging(
    settings.ENVIRONMENT,
    log_dir=None if settings.ENVIRONMENT == "test" else "logs",
)

GENERIC_FAILURE_MESSAGE = "Failed to send message. Please try again later."


def check_email_configuration() -> bool:
    """Report on startup whether contact messages can be delivered."""
    if settings.get_email_configuration().is_configured:
        logger.info("Email configuration loaded successfully")
        return True
    logger.warning("Email not configured properly. Check .env file.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Verify the mail transport credentials and warn if they are missing.
    """
    check_email_configuration()
    logger.info(
        f"Contact API ready (provider={settings.EMAIL_PROVIDER}, "
        f"rate_limit='{settings.CONTACT_RATE_LIMIT}')"
    )
    yield


app = FastAPI(title="Portfolio Contact API", lifespan=lifespan)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]


def _error_response(status_code: int, body: ContactErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


def _unexpected_error_response(
    request: Request, exc: Exception, correlation_id: str
) -> JSONResponse:
    """Log an unforeseen failure and hide its details from the caller."""
    # Use repr() to escape curly braces in exception message
    # (loguru's .format() interprets them as placeholders otherwise)
    logger.exception(
        f"Contact form error: {exc!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ContactErrorResponse(
            message=GENERIC_FAILURE_MESSAGE,
            code=DomainException.code,
            correlation_id=correlation_id,
        ),
    )


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context.

    Unhandled exceptions become the generic 500 here, inside the security
    header and CORS middleware.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        correlation_id = resolve_correlation_id(request.headers.get("X-Correlation-ID"))
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            response = _unexpected_error_response(request, exc, correlation_id)

        response.headers["X-Correlation-ID"] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response


# Note: Middleware runs in reverse order - the last added wraps everything
# Add correlation ID middleware (innermost, converts unhandled errors to 500)
app.add_middleware(CorrelationIdMiddleware)

# Add security headers middleware (wraps the correlation ID middleware)
app.add_middleware(SecurityHeadersMiddleware)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Browsers reject credentialed requests to a wildcard origin
allow_any_origin = "*" in settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_any_origin else settings.CORS_ORIGINS,
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Last resort for failures raised outside CorrelationIdMiddleware
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    return _unexpected_error_response(request, exc, correlation_id)


# Centralized exception handlers
@app.exception_handler(ContactValidationException)
async def contact_validation_exception_handler(
    request: Request, exc: ContactValidationException
) -> JSONResponse:
    """Handle rejected contact submissions."""
    logger.warning(
        f"Validation error: {len(exc.errors)} field error(s)",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ContactErrorResponse(
            message=exc.message,
            code=exc.code,
            errors=[FieldError(**error) for error in exc.errors],
            correlation_id=exc.correlation_id,
        ),
    )


@app.exception_handler(EmailException)
async def email_exception_handler(request: Request, exc: EmailException) -> JSONResponse:
    """Handle mail transport and configuration failures."""
    logger.error(
        f"Email error: {exc.message}",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ContactErrorResponse(
            message=exc.message, code=exc.code, correlation_id=exc.correlation_id
        ),
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle generic domain exceptions."""
    logger.warning(
        f"Domain exception: {exc.message}",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ContactErrorResponse(
            message=exc.message, code=exc.code, correlation_id=exc.correlation_id
        ),
    )


app.include_router(contact_router.router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        email_configured=settings.get_email_configuration().is_configured,
    )


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
