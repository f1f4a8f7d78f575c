"""
Signup domain service - OTP Signup State Machine implementation.

This module contains the core business logic for email/password signup
gated by a one-time passcode, plus password login.

OTP Signup State Machine
========================

States (per normalized email):
- NONE: No pending signup and no account
- PENDING: Pending signup holding an OTP digest and the candidate password digest
- EXPIRED: TTL elapsed; treated exactly like NONE on every read
- EXHAUSTED: max_attempts failed codes; record is deleted
- VERIFIED -> ACCOUNT_EXISTS: correct code; account persisted, pending record consumed

Transitions:
    NONE/PENDING/EXPIRED -> PENDING   (signup_init: unconditional full reset)
    PENDING -> PENDING                (resend_otp: new code, attempts zeroed)
    PENDING -> EXHAUSTED              (verify_signup: last allowed wrong code)
    PENDING -> ACCOUNT_EXISTS         (verify_signup: correct code)

Every read-modify-write is delegated to the stores' atomic primitives
(upsert, conditional update, atomic increment, unique insert). The service
never holds a lock across storage calls.

signup_init is a two-phase action: upsert the pending record, then deliver
the code, deleting the record again if delivery fails. A crash between the
two phases leaves a record nobody received a code for; it expires on its own.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from typing import NoReturn

from .exceptions import (
    AccountAlreadyExists,
    DeliveryFailed,
    EmailAlreadyRegistered,
    InvalidCode,
    InvalidCredentials,
    InvalidInput,
    PendingSignupNotFound,
    RateLimited,
    TooManyAttempts,
)
from .ports import (
    Account,
    AccountStore,
    AuthResult,
    EmailSender,
    PasswordHasher,
    PendingSignupStore,
    RateLimiter,
    SignupState,
    TokenIssuer,
)

logger = logging.getLogger(__name__)

SIGNUP_BUCKET = "signup-init"
RESEND_BUCKET = "resend-otp"


def _log_transition(
    email: str, state: SignupState, event: str, level: int = logging.INFO
) -> None:
    """Log a state change; the target state is also attached as record.signup_state."""
    logger.log(level, "%s: %s -> %s", event, email, state.value, extra={"signup_state": state})


def generate_otp() -> str:
    """
    Generate a cryptographically secure 6-digit code.

    Drawn uniformly from 000000-999999; returned as a string to keep
    leading zeros.
    """
    return f"{secrets.randbelow(1_000_000):06d}"


def normalize_email(email: str) -> str:
    """Canonical lookup key: strip whitespace + lowercase."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """
    Check the syntactic shape of a normalized email.

    Exactly one '@' separating a non-empty local part from a domain
    that contains a dot between non-empty labels. No whitespace.
    """
    if any(ch.isspace() for ch in email) or email.count("@") != 1:
        return False
    local, domain = email.split("@")
    return bool(local) and "." in domain.strip(".")


@dataclass
class SignupService:
    """
    Domain service for OTP-gated signup and login.

    Orchestrates the pending-signup store, account store, hasher,
    email sender, token issuer and rate limiter. Only normalized emails,
    tokens and public account identity leave this class.
    """

    pending_store: PendingSignupStore
    account_store: AccountStore
    hasher: PasswordHasher
    email_sender: EmailSender
    token_issuer: TokenIssuer
    rate_limiter: RateLimiter
    otp_ttl_seconds: int = 600
    max_attempts: int = 3
    min_password_length: int = 6
    code_generator: Callable[[], str] = field(default=generate_otp)

    def signup_init(self, email: str, password: str, client_id: str) -> str:
        """
        Start (or restart) a signup and email a fresh code.

        Args:
            email: User's email address (will be normalized)
            password: Candidate password (hashed here, never stored in plaintext)
            client_id: Originating identity used for rate limiting

        Returns:
            Normalized email address

        Raises:
            RateLimited: Over the per-client limit; storage untouched
            InvalidInput: Malformed email or short password
            EmailAlreadyRegistered: An account already exists
            DeliveryFailed: Code could not be sent; pending record removed
        """
        self._check_rate_limit(SIGNUP_BUCKET, client_id)

        normalized_email = self._require_email(email)
        if not password or len(password) < self.min_password_length:
            raise InvalidInput(
                f"Password must be at least {self.min_password_length} characters long"
            )

        if self.account_store.get(normalized_email) is not None:
            raise EmailAlreadyRegistered()

        code = self.code_generator()
        otp_hash = self.hasher.hash(code)
        self.pending_store.upsert(
            normalized_email,
            otp_hash,
            self.hasher.hash(password),
            self.otp_ttl_seconds,
        )

        if not self._deliver(normalized_email, code):
            # Compensate: nothing should remain that the user never got a code for
            self.pending_store.delete(normalized_email, otp_hash)
            _log_transition(
                normalized_email, SignupState.NONE, "Code delivery failed", logging.WARNING
            )
            raise DeliveryFailed()

        _log_transition(normalized_email, SignupState.PENDING, "Signup initiated")
        return normalized_email

    def verify_signup(self, email: str, code: str) -> AuthResult:
        """
        Check a code against the pending signup and create the account.

        Args:
            email: User's email (will be normalized)
            code: Verification code (surrounding whitespace ignored)

        Returns:
            AuthResult with a bearer token for the new account

        Raises:
            InvalidInput: Email or code missing
            PendingSignupNotFound: No live pending signup (never started, expired, consumed)
            TooManyAttempts: Attempts exhausted; pending record deleted
            InvalidCode: Wrong code; carries attempts_left
            EmailAlreadyRegistered: A concurrent verify created the account first
        """
        normalized_email = normalize_email(email or "")
        code = (code or "").strip()
        if not normalized_email or not code:
            raise InvalidInput("Email and verification code are required")

        pending = self.pending_store.get(normalized_email)
        if pending is None:
            raise PendingSignupNotFound()

        if pending.attempts >= self.max_attempts:
            self._exhaust(normalized_email, pending.otp_hash)

        if not self.hasher.verify(code, pending.otp_hash):
            attempts = self.pending_store.increment_attempts(normalized_email)
            if attempts is None:
                raise PendingSignupNotFound()
            if attempts >= self.max_attempts:
                self._exhaust(normalized_email, pending.otp_hash)
            raise InvalidCode(attempts_left=self.max_attempts - attempts)

        try:
            account = self.account_store.insert_unique(normalized_email, pending.password_hash)
        except AccountAlreadyExists:
            # Known race: the losing verify leaves the pending record to expire
            logger.warning("Concurrent verification lost for %s", normalized_email)
            raise EmailAlreadyRegistered() from None

        # A newer signup written meanwhile carries a different digest and is kept
        self.pending_store.delete(normalized_email, pending.otp_hash)
        _log_transition(normalized_email, SignupState.ACCOUNT_EXISTS, "Account created")
        return AuthResult(token=self._issue_token(account), account=account)

    def resend_otp(self, email: str, client_id: str) -> str:
        """
        Replace the code of a live pending signup and email it.

        The previous code stops working immediately. Delivery failure is
        reported but the reset record is kept: the old code is already gone.

        Returns:
            Normalized email address

        Raises:
            RateLimited: Over the per-client limit; storage untouched
            InvalidInput: Malformed email
            PendingSignupNotFound: No live pending signup to resend for
            DeliveryFailed: New code could not be sent
        """
        self._check_rate_limit(RESEND_BUCKET, client_id)
        normalized_email = self._require_email(email)

        code = self.code_generator()
        reset = self.pending_store.reset_code(
            normalized_email,
            self.hasher.hash(code),
            self.otp_ttl_seconds,
            self.max_attempts,
        )
        if not reset:
            raise PendingSignupNotFound()

        if not self._deliver(normalized_email, code):
            logger.warning("Code resend delivery failed for %s", normalized_email)
            raise DeliveryFailed()

        _log_transition(normalized_email, SignupState.PENDING, "Verification code resent")
        return normalized_email

    def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate with email and password.

        Unknown email and wrong password raise the same InvalidCredentials,
        and both run one bcrypt verification so timing does not differ.
        """
        normalized_email = normalize_email(email or "")
        account = self.account_store.get(normalized_email) if normalized_email else None

        digest = account.password_hash if account is not None else self._dummy_digest
        password_valid = self.hasher.verify(password or "", digest)

        if account is None or not password_valid:
            raise InvalidCredentials()

        logger.info("Login succeeded for %s", normalized_email)
        return AuthResult(token=self._issue_token(account), account=account)

    @cached_property
    def _dummy_digest(self) -> str:
        return self.hasher.hash(secrets.token_urlsafe(16))

    def _require_email(self, email: str) -> str:
        normalized_email = normalize_email(email or "")
        if not is_valid_email(normalized_email):
            raise InvalidInput("Please provide a valid email address")
        return normalized_email

    def _check_rate_limit(self, bucket: str, client_id: str) -> None:
        if not self.rate_limiter.hit(bucket, client_id):
            logger.warning("Rate limit exceeded on %s for client %s", bucket, client_id)
            raise RateLimited()

    def _exhaust(self, email: str, otp_hash: str) -> NoReturn:
        self.pending_store.delete(email, otp_hash)
        _log_transition(
            email, SignupState.EXHAUSTED, "Verification attempts exhausted", logging.WARNING
        )
        raise TooManyAttempts()

    def _deliver(self, email: str, code: str) -> bool:
        try:
            return bool(self.email_sender.send_verification_code(email, code))
        except Exception:
            logger.exception("Email sender raised while sending code to %s", email)
            return False

    def _issue_token(self, account: Account) -> str:
        return self.token_issuer.issue({"sub": account.id, "email": account.email})
