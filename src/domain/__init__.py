"""
Domain layer - Pure business logic with zero framework imports.

This package contains the OTP Signup State Machine and the port
interfaces it requires from infrastructure, keeping storage, hashing,
token and email concerns behind adapters.
"""

from .exceptions import (
    AccountAlreadyExists,
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
from .ports import (
    Account,
    AccountStore,
    AuthResult,
    EmailSender,
    PasswordHasher,
    PendingSignup,
    PendingSignupStore,
    RateLimiter,
    SignupState,
    TokenIssuer,
)
from .signup import SignupService

__all__ = [
    "Account",
    "AccountAlreadyExists",
    "AccountStore",
    "AuthResult",
    "DeliveryFailed",
    "EmailAlreadyRegistered",
    "EmailSender",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidInput",
    "PasswordHasher",
    "PendingSignup",
    "PendingSignupNotFound",
    "PendingSignupStore",
    "RateLimited",
    "RateLimiter",
    "SignupError",
    "SignupService",
    "SignupState",
    "TokenIssuer",
    "TooManyAttempts",
]
