"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry tests
- In-memory stores and a recording email sender
- A fully wired SignupService with a fast bcrypt cost
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.repository.memory import InMemoryAccountStore, InMemoryPendingSignupStore
from src.adapters.security.hashing import BcryptHasher
from src.adapters.security.rate_limit import LimitsRateLimiter
from src.adapters.security.tokens import JwtTokenIssuer
from src.domain.signup import SignupService

TEST_JWT_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailSender:
    """EmailSender test double that remembers every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False
        self.error: Exception | None = None

    def send_verification_code(self, email: str, code: str) -> bool:
        if self.error is not None:
            raise self.error
        if self.fail:
            return False
        self.sent.append((email, code))
        return True

    def last_code(self, email: str) -> str:
        return next(code for addr, code in reversed(self.sent) if addr == email)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pending_store(clock: FakeClock) -> InMemoryPendingSignupStore:
    return InMemoryPendingSignupStore(clock=clock)


@pytest.fixture
def account_store(clock: FakeClock) -> InMemoryAccountStore:
    return InMemoryAccountStore(clock=clock)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def hasher() -> BcryptHasher:
    # Lowest bcrypt cost keeps the suite fast
    return BcryptHasher(cost=4)


@pytest.fixture
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer(secret_key=TEST_JWT_SECRET)


@pytest.fixture
def service(
    pending_store: InMemoryPendingSignupStore,
    account_store: InMemoryAccountStore,
    hasher: BcryptHasher,
    email_sender: RecordingEmailSender,
    token_issuer: JwtTokenIssuer,
) -> SignupService:
    return SignupService(
        pending_store=pending_store,
        account_store=account_store,
        hasher=hasher,
        email_sender=email_sender,
        token_issuer=token_issuer,
        rate_limiter=LimitsRateLimiter("5/15 minutes", "memory://"),
    )
