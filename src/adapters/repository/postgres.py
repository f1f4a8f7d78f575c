"""
PostgreSQL repository adapters - Implement the domain's store protocols.

This module provides PostgreSQL implementations of the pending-signup
and account store ports using psycopg3 with raw SQL.

Concurrency Design:
------------------
Every operation is a single statement, so atomicity comes from the
database rather than from read-modify-write in Python:

1. **Upsert**: INSERT ... ON CONFLICT (email) DO UPDATE replaces any
   previous pending signup for the email in one statement.

2. **Attempt counting**: UPDATE ... SET attempts = attempts + 1 RETURNING
   serializes concurrent wrong guesses on the row lock; no update is lost.

3. **Expiry**: All reads filter on expires_at > NOW() using database time,
   so an expired row is invisible whether or not it has been purged.

4. **Account uniqueness**: The UNIQUE constraint on accounts.email rejects
   the second of two racing inserts with UniqueViolation.
"""

import logging
from pathlib import Path

from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import AccountAlreadyExists
from src.domain.ports import Account, PendingSignup

logger = logging.getLogger(__name__)

_PENDING_COLUMNS = "email, otp_hash, password_hash, attempts, created_at, expires_at"


def _pending_from_row(row: tuple) -> PendingSignup:
    return PendingSignup(
        email=row[0],
        otp_hash=row[1],
        password_hash=row[2],
        attempts=row[3],
        created_at=row[4],
        expires_at=row[5],
    )


class PostgresPendingSignupStore:
    """
    Implements PendingSignupStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def get(self, email: str) -> PendingSignup | None:
        sql = f"""
            SELECT {_PENDING_COLUMNS}
            FROM pending_signups
            WHERE email = %s AND expires_at > NOW()
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        return _pending_from_row(row) if row is not None else None

    def upsert(
        self, email: str, otp_hash: str, password_hash: str, ttl_seconds: int
    ) -> PendingSignup:
        """
        Atomically create or replace the pending signup for an email.

        Replacement is unconditional: a new signup always restarts the
        challenge, whatever state the previous record was in.
        """
        sql = f"""
            INSERT INTO pending_signups
                (email, otp_hash, password_hash, attempts, created_at, expires_at)
            VALUES (%s, %s, %s, 0, NOW(), NOW() + make_interval(secs => %s))
            ON CONFLICT (email) DO UPDATE
            SET otp_hash = EXCLUDED.otp_hash,
                password_hash = EXCLUDED.password_hash,
                attempts = 0,
                created_at = EXCLUDED.created_at,
                expires_at = EXCLUDED.expires_at
            RETURNING {_PENDING_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, otp_hash, password_hash, ttl_seconds))
            row = cursor.fetchone()
            conn.commit()

        return _pending_from_row(row)

    def reset_code(
        self, email: str, otp_hash: str, ttl_seconds: int, max_attempts: int
    ) -> bool:
        sql = """
            UPDATE pending_signups
            SET otp_hash = %s,
                attempts = 0,
                expires_at = NOW() + make_interval(secs => %s)
            WHERE email = %s
              AND expires_at > NOW()
              AND attempts < %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (otp_hash, ttl_seconds, email, max_attempts))
            conn.commit()
            return cursor.rowcount == 1

    def increment_attempts(self, email: str) -> int | None:
        sql = """
            UPDATE pending_signups
            SET attempts = attempts + 1
            WHERE email = %s AND expires_at > NOW()
            RETURNING attempts
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
            conn.commit()

        return row[0] if row is not None else None

    def delete(self, email: str, otp_hash: str | None = None) -> None:
        with self._pool.connection() as conn:
            if otp_hash is None:
                conn.execute("DELETE FROM pending_signups WHERE email = %s", (email,))
            else:
                conn.execute(
                    "DELETE FROM pending_signups WHERE email = %s AND otp_hash = %s",
                    (email, otp_hash),
                )
            conn.commit()

    def purge_expired(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM pending_signups WHERE expires_at <= NOW()")
            conn.commit()
            purged = cursor.rowcount

        if purged:
            logger.info("Purged %d expired pending signup(s)", purged)
        return purged


class PostgresAccountStore:
    """
    Implements AccountStore protocol via psycopg3.

    Account ids are UUIDs generated by the database.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get(self, email: str) -> Account | None:
        sql = """
            SELECT id, email, password_hash, created_at
            FROM accounts
            WHERE email = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        return Account(id=str(row[0]), email=row[1], password_hash=row[2], created_at=row[3])

    def insert_unique(self, email: str, password_hash: str) -> Account:
        """
        Insert an account, relying on the UNIQUE constraint for exclusivity.

        Raises:
            AccountAlreadyExists: If another account already holds the email
        """
        sql = """
            INSERT INTO accounts (email, password_hash)
            VALUES (%s, %s)
            RETURNING id, email, password_hash, created_at
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email, password_hash))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise AccountAlreadyExists(email) from None

        return Account(id=str(row[0]), email=row[1], password_hash=row[2], created_at=row[3])


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
