"""
SQLite Database Adapter.

Implements the subscription and credential ports using SQLite.
Designed to be Postgres-compatible (uses standard SQL patterns).

Every sqlite3.Error is re-raised as StorageError with the original error
chained, so components never depend on sqlite3.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from types import TracebackType
from typing import Any
from uuid import UUID

from src.components.auth.models import StoredCredentials
from src.components.newsletter.models import Subscriber, SubscriberStatus
from src.core.ports.db import StorageError

DEFAULT_TIMEOUT_SECONDS = 5.0

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def connect(db_path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> sqlite3.Connection:
    """Open a connection in autocommit mode; transactions are explicit."""
    try:
        conn = sqlite3.connect(db_path, timeout=timeout, isolation_level=None)
    except sqlite3.Error as e:
        raise StorageError(f"Failed to connect to database at {db_path}") from e
    try:
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error as e:
        conn.close()
        raise StorageError(f"Failed to configure connection to {db_path}") from e
    return conn


def _map_subscriber(row: dict[str, Any]) -> Subscriber:
    return Subscriber(
        id=UUID(row["id"]),
        email=row["email"],
        name=row["name"],
        status=SubscriberStatus(row["status"]),
        subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
    )


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.db_path = db_path
        self.timeout = timeout
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        return connect(self.db_path, self.timeout)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetchone(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def _fetchall(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...]) -> None:
        conn = self._get_conn()
        try:
            conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"Statement failed: {e}") from e
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Subscriptions Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriptionRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriptionRepoPort."""

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        row = self._fetchone("SELECT * FROM subscriptions WHERE id = ?", (str(subscriber_id),))
        return _map_subscriber(row) if row else None

    def get_subscriber_id_from_token(self, token: str) -> UUID | None:
        row = self._fetchone(
            "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
            (token,),
        )
        return UUID(row["subscriber_id"]) if row else None

    def set_status(self, subscriber_id: UUID, status: SubscriberStatus) -> None:
        self._execute(
            "UPDATE subscriptions SET status = ? WHERE id = ?",
            (status.value, str(subscriber_id)),
        )

    def list_by_status(self, status: SubscriberStatus) -> list[Subscriber]:
        rows = self._fetchall(
            "SELECT * FROM subscriptions WHERE status = ? ORDER BY subscribed_at",
            (status.value,),
        )
        return [_map_subscriber(r) for r in rows]


# -----------------------------------------------------------------------------
# Sign-up Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    One SQLite transaction for the sign-up write pair.

    Opens its own connection on enter and issues BEGIN; commit() makes the
    writes durable. Leaving the block without commit() rolls back.
    """

    def __init__(self, db_path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.db_path = db_path
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._committed = False

    def __enter__(self) -> SQLiteUnitOfWork:
        self._conn = connect(self.db_path, self.timeout)
        self._committed = False
        try:
            self._conn.execute("BEGIN")
        except sqlite3.Error as e:
            self._conn.close()
            self._conn = None
            raise StorageError("Failed to begin transaction") from e
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._conn is None:
            return
        try:
            if not self._committed:
                self._conn.rollback()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to roll back transaction: {e}") from e
        finally:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Unit of work used outside its 'with' block")
        return self._conn

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO subscriptions (id, email, name, subscribed_at, status)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(subscriber.id),
                    subscriber.email,
                    subscriber.name,
                    subscriber.subscribed_at.isoformat(),
                    subscriber.status.value,
                ),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert subscriber: {e}") from e

    def store_token(self, subscriber_id: UUID, token: str) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO subscription_tokens (subscription_token, subscriber_id)
                VALUES (?, ?)
                """,
                (token, str(subscriber_id)),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to store subscription token: {e}") from e

    def commit(self) -> None:
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to commit transaction: {e}") from e
        self._committed = True

    def rollback(self) -> None:
        try:
            self.conn.rollback()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to roll back transaction: {e}") from e


# -----------------------------------------------------------------------------
# Credentials Repository
# -----------------------------------------------------------------------------


class SQLiteCredentialRepo(SQLiteRepoBase):
    """SQLite implementation of CredentialRepoPort."""

    def get_stored_credentials(self, username: str) -> StoredCredentials | None:
        row = self._fetchone(
            "SELECT user_id, username, password_hash FROM users WHERE username = ?",
            (username,),
        )
        if not row:
            return None
        return StoredCredentials(
            user_id=UUID(row["user_id"]),
            username=row["username"],
            password_hash=row["password_hash"],
        )

    def save(self, credentials: StoredCredentials) -> StoredCredentials:
        self._execute(
            "INSERT INTO users (user_id, username, password_hash) VALUES (?, ?, ?)",
            (str(credentials.user_id), credentials.username, credentials.password_hash),
        )
        return credentials
