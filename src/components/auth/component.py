import base64
import binascii
import logging
from uuid import UUID

import anyio

from src.core.errors import AuthError, UnexpectedError
from src.core.ports.db import StorageError

from .models import Credentials, PasswordHashFormatError
from .ports import CredentialRepoPort, PasswordHasherPort

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD_HASH_WORKERS = 4

_default_limiter: anyio.CapacityLimiter | None = None


def default_password_hash_limiter() -> anyio.CapacityLimiter:
    """Process-wide limiter for password hashing, separate from the I/O thread pool."""
    global _default_limiter
    if _default_limiter is None:
        _default_limiter = anyio.CapacityLimiter(DEFAULT_PASSWORD_HASH_WORKERS)
    return _default_limiter


def basic_authentication(authorization: str | None) -> Credentials:
    """
    Parse an HTTP Basic Authorization header value.

    Every failure raises AuthError so callers cannot tell a missing header
    from a malformed one.
    """
    if authorization is None:
        raise AuthError("'Authorization' header missing")

    scheme, _, encoded = authorization.partition(" ")
    if scheme != "Basic" or not encoded:
        raise AuthError("The Authorization scheme was not Basic")

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise AuthError("Failed to decode Basic credentials") from e

    username, sep, password = decoded.partition(":")
    if not sep:
        raise AuthError("A password must be provided in Basic auth")
    return Credentials(username=username, password=password)


async def validate_credentials(
    credentials: Credentials,
    *,
    credential_repo: CredentialRepoPort,
    password_hasher: PasswordHasherPort,
    limiter: anyio.CapacityLimiter | None = None,
) -> UUID:
    """
    Verify credentials and return the account id.

    An unknown username is still checked against the hasher's dummy hash so
    that "unknown user" and "wrong password" take the same time.
    Verification runs on the password hash limiter, not the default pool.
    """
    try:
        stored = await anyio.to_thread.run_sync(
            credential_repo.get_stored_credentials, credentials.username
        )
    except StorageError as e:
        raise UnexpectedError("Failed to fetch stored credentials") from e

    user_id: UUID | None = None
    expected_hash = password_hasher.dummy_hash
    if stored is not None:
        user_id = stored.user_id
        expected_hash = stored.password_hash

    try:
        matched = await anyio.to_thread.run_sync(
            password_hasher.verify_password,
            credentials.password,
            expected_hash,
            limiter=limiter or default_password_hash_limiter(),
        )
    except PasswordHashFormatError as e:
        raise UnexpectedError("Failed to parse stored password hash") from e

    if user_id is None:
        raise AuthError("Unknown username")
    if not matched:
        raise AuthError("Invalid password")
    return user_id
