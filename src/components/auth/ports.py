from typing import Protocol
from uuid import UUID

from .models import StoredCredentials


class CredentialRepoPort(Protocol):
    """Port for credential lookup. Raises StorageError on storage failure."""

    def get_stored_credentials(self, username: str) -> StoredCredentials | None:
        """Get user id and password hash for a username."""
        ...

    def save(self, credentials: StoredCredentials) -> StoredCredentials:
        """Insert a new credential row."""
        ...


class PasswordHasherPort(Protocol):
    """Port for password hashing - CPU-bound, call from a worker thread."""

    @property
    def dummy_hash(self) -> str:
        """Hash with the same cost parameters as real ones, matching no password."""
        ...

    def hash_password(self, password: str) -> str: ...

    def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Check password against password_hash.

        Raises PasswordHashFormatError if password_hash cannot be parsed.
        """
        ...
