"""
Database adapter interfaces.

Shared storage contract for repository ports. Repository ports themselves
live with the component that owns them; this module holds what every
storage adapter must honour.

Implementations: SQLite (now), Postgres (future).
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol


class StorageError(Exception):
    """A storage operation failed (connection, constraint, commit)."""

    pass


class UnitOfWorkPort(Protocol):
    """
    Scoped transaction.

    Used as a context manager. Every write made through the unit of work is
    committed by commit(); leaving the block without commit() (including via
    an exception) rolls all of them back.
    """

    def __enter__(self) -> UnitOfWorkPort:
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        ...

    def commit(self) -> None:
        """Commit all writes made in this unit of work."""
        ...

    def rollback(self) -> None:
        """Discard all writes made in this unit of work."""
        ...
