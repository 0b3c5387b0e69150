from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class Credentials:
    """Username/password pair presented by a publisher."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class StoredCredentials:
    user_id: UUID
    username: str
    password_hash: str = field(repr=False)  # PHC string format


class PasswordHashFormatError(Exception):
    """Stored password hash is not a parseable PHC string."""

    pass
