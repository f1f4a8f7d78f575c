"""
Exception handlers - Translate domain errors into HTTP responses.

Every SignupError maps to a fixed status code and its generic message.
Anything else collapses to a 500 with no detail leakage.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    DeliveryFailed,
    EmailAlreadyRegistered,
    InvalidCode,
    InvalidCredentials,
    InvalidInput,
    PendingSignupNotFound,
    RateLimited,
    SignupError,
    TooManyAttempts,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[SignupError], int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    InvalidCode: status.HTTP_400_BAD_REQUEST,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    PendingSignupNotFound: status.HTTP_404_NOT_FOUND,
    EmailAlreadyRegistered: status.HTTP_409_CONFLICT,
    RateLimited: status.HTTP_429_TOO_MANY_REQUESTS,
    TooManyAttempts: status.HTTP_429_TOO_MANY_REQUESTS,
    DeliveryFailed: status.HTTP_502_BAD_GATEWAY,
}


async def signup_error_handler(request: Request, exc: SignupError) -> JSONResponse:
    """Render a domain error with its mapped status code."""
    status_code = STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    content: dict = {"success": False, "detail": str(exc)}
    if isinstance(exc, InvalidCode):
        content["attempts_left"] = exc.attempts_left
    return JSONResponse(status_code=status_code, content=content)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and return a generic 500."""
    logger.error("Unhandled exception on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SignupError, signup_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
