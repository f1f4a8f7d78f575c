"""
Domain exceptions - Semantic error types for the OTP signup flow.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Messages are deliberately generic where they could otherwise reveal
whether an email has an account or a pending signup.
"""


class SignupError(Exception):
    """Base class for signup domain errors."""

    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidInput(SignupError):
    """Malformed email, password or code. Never touches storage."""

    message = "Invalid input"


class EmailAlreadyRegistered(SignupError):
    """An account already exists for this email (or a concurrent verify won)."""

    message = "An account with this email already exists"


class PendingSignupNotFound(SignupError):
    """No live pending signup - never existed, expired, or already consumed."""

    message = "Verification code expired or invalid. Please request a new one."


class RateLimited(SignupError):
    """Too many requests from the same client in the current window."""

    message = "Too many OTP requests. Please try again later."


class TooManyAttempts(SignupError):
    """Verification attempts exhausted; the pending signup is gone."""

    message = "Too many failed attempts. Please request a new code."


class InvalidCode(SignupError):
    """Supplied verification code does not match."""

    message = "Invalid verification code"

    def __init__(self, attempts_left: int) -> None:
        super().__init__()
        self.attempts_left = attempts_left


class InvalidCredentials(SignupError):
    """Login failed. Identical for unknown email and wrong password."""

    message = "Invalid email or password"


class DeliveryFailed(SignupError):
    """The verification code could not be delivered."""

    message = "Failed to send verification code. Please try again."


class AccountAlreadyExists(Exception):
    """Raised by account stores when the unique email constraint rejects an insert."""

    pass
