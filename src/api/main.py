"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, and lifespan events.
"""

import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import psycopg
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import run_migrations
from src.api.dependencies import build_email_sender, build_signup_service, build_stores
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "OTP Signup API v1 - Email-verified signup and password login",
    },
]


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application for the given settings.

    Args:
        settings: Explicit settings; defaults to the cached environment settings
    """
    app_settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        FastAPI lifespan context manager.

        Manages application startup and shutdown:
        - Creates database connection pool and runs migrations (postgres backend)
        - Builds the signup service and its collaborators once
        - Closes connection pool on shutdown
        """
        logger.info("Starting application...")

        pool = None
        if app_settings.storage_backend == "postgres":
            logger.info("Connecting to database...")
            pool = ConnectionPool(
                conninfo=app_settings.database_url,
                min_size=app_settings.pool_min_size,
                max_size=app_settings.pool_max_size,
            )
            logger.info("Running database migrations...")
            run_migrations(pool)

        pending_store, account_store = build_stores(app_settings, pool)
        if app_settings.purge_on_startup:
            pending_store.purge_expired()

        app.state.settings = app_settings
        app.state.pool = pool
        app.state.email_sender = build_email_sender(app_settings)
        app.state.signup_service = build_signup_service(
            app_settings, pending_store, account_store, app.state.email_sender
        )

        logger.info(
            "Application startup complete (storage=%s, email=%s)",
            app_settings.storage_backend,
            app_settings.email_backend,
        )

        yield

        logger.info("Shutting down application...")
        if pool is not None:
            pool.close()
            logger.info("Database connection pool closed")

    app = FastAPI(
        title="otp-signup",
        description="OTP Signup API - Email/password accounts gated by a one-time passcode",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix="/v1")

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Log method, path, status and duration of every request."""
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.get("/")
    async def index() -> dict:
        """Service information and endpoint listing."""
        return {
            "message": "OTP Authentication Server",
            "status": "Running",
            "endpoints": {
                "health": "GET /health",
                "signup": "POST /v1/signup-init",
                "verify": "POST /v1/verify-signup",
                "resend": "POST /v1/resend-otp",
                "login": "POST /v1/login",
            },
        }

    @app.get("/health")
    def health_check(request: Request) -> JSONResponse:
        """
        Health check endpoint with storage validation.

        Returns 200 when storage answers, 503 with "storage": "disconnected"
        when the database check fails. An SMTP failure is reported but does
        not make the service unhealthy.
        """
        storage_status = "connected"
        pool = request.app.state.pool
        if pool is not None:
            try:
                with pool.connection(timeout=5.0) as conn:
                    conn.execute("SELECT 1")
            except (psycopg.Error, PoolTimeout, OSError) as e:
                logger.error("Health check: database unreachable: %s", e)
                storage_status = "disconnected"

        email_status = "configured"
        check_connection = getattr(request.app.state.email_sender, "check_connection", None)
        if check_connection is not None and not check_connection():
            email_status = "error"

        healthy = storage_status == "connected"
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "backend": request.app.state.settings.storage_backend,
                "storage": storage_status,
                "email": email_status,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return app


app = create_app()
