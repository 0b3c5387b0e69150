"""
Auth component - publisher credential verification.

Parses HTTP Basic credentials and verifies them against stored password
hashes with timing-attack mitigation.
"""

from .component import (
    DEFAULT_PASSWORD_HASH_WORKERS,
    basic_authentication,
    default_password_hash_limiter,
    validate_credentials,
)
from .models import Credentials, PasswordHashFormatError, StoredCredentials
from .ports import CredentialRepoPort, PasswordHasherPort

__all__ = [
    "DEFAULT_PASSWORD_HASH_WORKERS",
    "basic_authentication",
    "default_password_hash_limiter",
    "validate_credentials",
    "Credentials",
    "PasswordHashFormatError",
    "StoredCredentials",
    "CredentialRepoPort",
    "PasswordHasherPort",
]
