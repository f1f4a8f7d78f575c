"""
FastAPI dependencies - Service wiring and dependency injection factories.

The signup service and its collaborators are built once from Settings
during app startup and kept on app.state; these Depends() factories
hand them to the routes.
"""

from datetime import timedelta

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountStore, InMemoryPendingSignupStore
from src.adapters.repository.postgres import PostgresAccountStore, PostgresPendingSignupStore
from src.adapters.security.hashing import BcryptHasher
from src.adapters.security.rate_limit import LimitsRateLimiter
from src.adapters.security.tokens import JwtTokenIssuer
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import Settings
from src.domain.ports import AccountStore, EmailSender, PendingSignupStore
from src.domain.signup import SignupService


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the email backend named in settings."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.email_from,
            from_name=settings.email_from_name,
            timeout=settings.smtp_timeout,
            ttl_minutes=settings.otp_ttl_seconds // 60,
        )
    return ConsoleEmailSender(ttl_minutes=settings.otp_ttl_seconds // 60)


def build_stores(
    settings: Settings, pool: ConnectionPool | None = None
) -> tuple[PendingSignupStore, AccountStore]:
    """Create the pending-signup and account stores for the configured backend."""
    if settings.storage_backend == "postgres":
        if pool is None:
            raise ValueError("PostgreSQL storage requires a connection pool")
        return PostgresPendingSignupStore(pool), PostgresAccountStore(pool)
    return InMemoryPendingSignupStore(), InMemoryAccountStore()


def build_signup_service(
    settings: Settings,
    pending_store: PendingSignupStore,
    account_store: AccountStore,
    email_sender: EmailSender | None = None,
) -> SignupService:
    """
    Create the signup service with every collaborator injected.

    Wires together stores, hasher, email sender, token issuer and
    rate limiter for the domain service.
    """
    return SignupService(
        pending_store=pending_store,
        account_store=account_store,
        hasher=BcryptHasher(cost=settings.bcrypt_cost),
        email_sender=email_sender or build_email_sender(settings),
        token_issuer=JwtTokenIssuer(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            default_ttl=timedelta(minutes=settings.jwt_expire_minutes),
        ),
        rate_limiter=LimitsRateLimiter(
            limit=settings.rate_limit,
            storage_uri=settings.rate_limit_storage_uri,
        ),
        otp_ttl_seconds=settings.otp_ttl_seconds,
        max_attempts=settings.max_attempts,
        min_password_length=settings.min_password_length,
    )


def get_signup_service(request: Request) -> SignupService:
    """Get the signup service built during app startup."""
    return request.app.state.signup_service


def get_client_id(request: Request) -> str:
    """
    Identify the originating client for rate limiting.

    Uses the peer address; deployments behind a proxy should run uvicorn
    with --proxy-headers so this reflects X-Forwarded-For.
    """
    return request.client.host if request.client else "unknown"
