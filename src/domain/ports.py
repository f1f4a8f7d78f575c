"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the records the domain works with and the interfaces
(ports) it requires from infrastructure. Adapters implement these protocols
through structural subtyping.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Protocol


class SignupState(str, Enum):
    """
    Conceptual per-email states of the OTP signup lifecycle.

    State Transitions:
    - NONE -> PENDING (signup-init)
    - PENDING -> PENDING (signup-init again, or resend: full reset)
    - PENDING -> VERIFIED (correct code) -> ACCOUNT_EXISTS
    - PENDING -> EXPIRED (TTL elapsed, enforced on read)
    - PENDING -> EXHAUSTED (max failed attempts, record deleted)

    EXPIRED and EXHAUSTED are indistinguishable from NONE to callers.
    ACCOUNT_EXISTS is permanent.
    """

    NONE = "NONE"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    EXHAUSTED = "EXHAUSTED"
    ACCOUNT_EXISTS = "ACCOUNT_EXISTS"


@dataclass(frozen=True)
class Account:
    """Permanent user account, keyed by normalized email."""

    id: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class PendingSignup:
    """Staging record bridging OTP issuance and account creation."""

    email: str
    otp_hash: str
    password_hash: str
    attempts: int
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class AuthResult:
    """Bearer token plus the account it was issued for."""

    token: str
    account: Account


class PendingSignupStore(Protocol):
    """Port interface for pending signup persistence."""

    def get(self, email: str) -> PendingSignup | None:
        """
        Fetch the live pending signup for an email.

        Records whose expiry has passed must be reported as None even if
        they have not been physically purged yet.
        """
        ...

    def upsert(
        self, email: str, otp_hash: str, password_hash: str, ttl_seconds: int
    ) -> PendingSignup:
        """
        Atomically create or fully replace the pending signup for an email.

        Attempts are reset to 0 and expiry set to now + ttl_seconds.
        """
        ...

    def reset_code(
        self, email: str, otp_hash: str, ttl_seconds: int, max_attempts: int
    ) -> bool:
        """
        Atomically swap in a new code digest for a live, non-exhausted record.

        Zeroes attempts and renews expiry; the password hash is untouched.

        Returns:
            True if a record was updated, False if there was none
        """
        ...

    def increment_attempts(self, email: str) -> int | None:
        """
        Atomically add one failed attempt.

        Returns:
            The new attempt count, or None if no live record exists
        """
        ...

    def delete(self, email: str, otp_hash: str | None = None) -> None:
        """
        Remove the pending signup for an email, if any.

        With otp_hash, only a record still holding that code digest is
        removed; a newer record written by a concurrent signup survives.
        """
        ...

    def purge_expired(self) -> int:
        """Physically delete expired records. Returns the number removed."""
        ...


class AccountStore(Protocol):
    """Port interface for account persistence."""

    def get(self, email: str) -> Account | None:
        """Fetch the account for a normalized email."""
        ...

    def insert_unique(self, email: str, password_hash: str) -> Account:
        """
        Insert a new account.

        Raises:
            AccountAlreadyExists: If the store's unique constraint rejects the email
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way secret hashing."""

    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, digest: str) -> bool:
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str) -> bool:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            code: 6-digit verification code

        Returns:
            True if the message was handed off, False otherwise
        """
        ...


class TokenIssuer(Protocol):
    """Port interface for bearer token minting."""

    def issue(self, claims: dict[str, Any], ttl: timedelta | None = None) -> str:
        ...


class RateLimiter(Protocol):
    """Port interface for per-client request limiting."""

    def hit(self, bucket: str, identity: str) -> bool:
        """
        Record one request for identity in bucket.

        Returns:
            True if the request is allowed, False if over the limit
        """
        ...
