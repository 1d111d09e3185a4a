"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handlers registered here translate them
into HTTP responses with one consistent body:

    {"detail": "<human readable message>", "error_type": "<slug>"}

Exception hierarchy:
    BankAPIError (base)
    ├── ValidationError            — 400, malformed or unacceptable input
    │   └── InsufficientFundsError — 400, balance too low for the transfer
    ├── AuthenticationError        — 401, bad credential
    │   ├── InvalidPINError        — 401, wrong or unset transaction PIN
    │   └── InvalidCredentialsError— 401, wrong email/password
    ├── NotFoundError              — 404
    │   ├── RecipientNotFoundError
    │   ├── UserNotFoundError
    │   └── AccountNotFoundError
    ├── DuplicateEmailError        — 409
    └── InternalError              — 500, storage or unexpected failure

500 responses never expose internals unless DEBUG is enabled.
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from neobank.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all NeoBank domain errors."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class ValidationError(BankAPIError):
    """Raised when input is malformed or violates a business rule the user can fix."""

    status_code = 400
    error_type = "validation_error"


class InsufficientFundsError(ValidationError):
    """
    Raised when a transfer amount exceeds the funds available to the sender.

    Attributes:
        requested_cents: The amount the user tried to send.
        available_cents: The balance the check was made against.
    """

    error_type = "insufficient_funds"

    def __init__(self, requested_cents: int, available_cents: int):
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__("Insufficient funds")


class AuthenticationError(BankAPIError):
    status_code = 401
    error_type = "authentication_failed"

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(detail)


class InvalidPINError(AuthenticationError):
    """Raised when the transaction PIN does not match, or none has been set."""

    error_type = "invalid_pin"

    def __init__(self):
        super().__init__("Invalid PIN")


class InvalidCredentialsError(AuthenticationError):
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


class NotFoundError(BankAPIError):
    status_code = 404
    error_type = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class RecipientNotFoundError(NotFoundError):
    error_type = "recipient_not_found"

    def __init__(self):
        super().__init__("Recipient not found")


class UserNotFoundError(NotFoundError):
    error_type = "user_not_found"

    def __init__(self):
        super().__init__("User not found")


class AccountNotFoundError(NotFoundError):
    """Raised when a requested bank account does not exist or is inactive."""

    error_type = "account_not_found"

    def __init__(self, account_id: uuid.UUID):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class DuplicateEmailError(BankAPIError):
    """Raised when attempting to register with an email that's already in use."""

    status_code = 409
    error_type = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with email {email} already exists")


class InternalError(BankAPIError):
    """
    Raised for storage or unexpected failures.

    The detail is kept for logs; clients only see it when DEBUG is enabled.
    """

    status_code = 500
    error_type = "internal_error"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

HTTP_ERROR_TYPES = {
    401: AuthenticationError.error_type,
    403: "forbidden",
    404: NotFoundError.error_type,
    405: "method_not_allowed",
}


def _internal_error_response(detail: str) -> JSONResponse:
    content = {"detail": "Internal server error", "error_type": InternalError.error_type}
    if settings.DEBUG:
        content["details"] = detail
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Each BankAPIError subclass carries its own status_code and error_type,
    so a single handler covers the whole hierarchy. This is called once
    during app startup in main.py.
    """

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
            return _internal_error_response(exc.detail)

        content = {"detail": exc.detail, "error_type": exc.error_type}
        if isinstance(exc, InsufficientFundsError):
            content["requested_cents"] = exc.requested_cents
            content["available_cents"] = exc.available_cents
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Raised by FastAPI itself (missing bearer token, unknown route) and by
        # get_current_user; keep the same body shape as domain errors
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": HTTP_ERROR_TYPES.get(exc.status_code, "http_error"),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Report only the first problem, as a single human-readable message
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = first.get("msg", "Invalid request")
            detail = f"{location}: {message}" if location else message
        else:
            detail = "Invalid request"
        return JSONResponse(
            status_code=400,
            content={"detail": detail, "error_type": ValidationError.error_type},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _internal_error_response(str(exc))
