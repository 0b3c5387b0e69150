import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from src.components.auth.models import PasswordHashFormatError


class Argon2PasswordHasher:
    """Argon2id password hashing; hashes are PHC strings carrying their own parameters."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        """Runs one full Argon2 hash; construct off the event loop."""
        self.ph = hasher or PasswordHasher()
        # Same parameters as real hashes, so a dummy verify costs the same
        self.dummy_hash: str = self.hash_password(secrets.token_urlsafe(32))

    def hash_password(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            self.ph.verify(password_hash, password)
            return True
        except VerifyMismatchError:
            return False
        except InvalidHashError as e:
            raise PasswordHashFormatError("Stored password hash is not in PHC format") from e
        except VerificationError:
            return False
