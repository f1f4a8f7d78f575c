"""
In-memory repository adapters - Process-local store implementations.

Thread-safe implementations of the store ports for development, tests
and single-process deployments. Each store guards its dict with a lock
held only for the duration of one operation, which gives the same
per-operation atomicity the PostgreSQL adapters get from single
statements. Expiry is evaluated against an injectable clock.
"""

import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from src.domain.exceptions import AccountAlreadyExists
from src.domain.ports import Account, PendingSignup

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPendingSignupStore:
    """Implements PendingSignupStore protocol with a locked dict."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._records: dict[str, PendingSignup] = {}
        self._lock = threading.Lock()

    def _live(self, email: str, now: datetime) -> PendingSignup | None:
        record = self._records.get(email)
        if record is None or record.is_expired(now):
            return None
        return record

    def get(self, email: str) -> PendingSignup | None:
        with self._lock:
            return self._live(email, self._clock())

    def upsert(
        self, email: str, otp_hash: str, password_hash: str, ttl_seconds: int
    ) -> PendingSignup:
        now = self._clock()
        record = PendingSignup(
            email=email,
            otp_hash=otp_hash,
            password_hash=password_hash,
            attempts=0,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        with self._lock:
            self._records[email] = record
        return record

    def reset_code(
        self, email: str, otp_hash: str, ttl_seconds: int, max_attempts: int
    ) -> bool:
        with self._lock:
            now = self._clock()
            record = self._live(email, now)
            if record is None or record.attempts >= max_attempts:
                return False
            self._records[email] = replace(
                record,
                otp_hash=otp_hash,
                attempts=0,
                expires_at=now + timedelta(seconds=ttl_seconds),
            )
            return True

    def increment_attempts(self, email: str) -> int | None:
        with self._lock:
            record = self._live(email, self._clock())
            if record is None:
                return None
            record = replace(record, attempts=record.attempts + 1)
            self._records[email] = record
            return record.attempts

    def delete(self, email: str, otp_hash: str | None = None) -> None:
        with self._lock:
            record = self._records.get(email)
            if record is not None and otp_hash in (None, record.otp_hash):
                del self._records[email]

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [email for email, r in self._records.items() if r.is_expired(now)]
            for email in expired:
                del self._records[email]
        return len(expired)


class InMemoryAccountStore:
    """Implements AccountStore protocol with a locked dict keyed by email."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()

    def get(self, email: str) -> Account | None:
        with self._lock:
            return self._accounts.get(email)

    def insert_unique(self, email: str, password_hash: str) -> Account:
        with self._lock:
            if email in self._accounts:
                raise AccountAlreadyExists(email)
            account = Account(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=password_hash,
                created_at=self._clock(),
            )
            self._accounts[email] = account
            return account
