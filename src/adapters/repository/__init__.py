"""Repository adapters - Database and in-memory store implementations."""

from .memory import InMemoryAccountStore, InMemoryPendingSignupStore
from .postgres import PostgresAccountStore, PostgresPendingSignupStore, run_migrations

__all__ = [
    "InMemoryAccountStore",
    "InMemoryPendingSignupStore",
    "PostgresAccountStore",
    "PostgresPendingSignupStore",
    "run_migrations",
]
