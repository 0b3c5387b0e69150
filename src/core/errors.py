"""
Service error family.

Closed set of failures a request can end in. Components raise these (chained
``from`` the lower-level cause); only the HTTP shell maps them to status codes.

- ValidationError: malformed name/email or publish payload -> 400
- AuthError: missing or invalid credentials -> 401 + challenge
- NotFoundError: unknown confirmation token -> 404
- UnexpectedError: storage, commit, or delivery failure -> 500
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base error for the subscription/publishing core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def cause_chain(self) -> list[str]:
        """Messages of this error and every chained cause, outermost first."""
        chain: list[str] = []
        current: BaseException | None = self
        while current is not None:
            chain.append(f"{type(current).__name__}: {current}")
            current = current.__cause__ or current.__context__
        return chain


class ValidationError(ServiceError):
    """Caller supplied malformed input."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        self.reason = reason
        self.field = field
        super().__init__(reason)


class AuthError(ServiceError):
    """Credentials were absent, malformed or wrong."""


class NotFoundError(ServiceError):
    """A referenced record does not exist."""


class UnexpectedError(ServiceError):
    """Non-recoverable failure for this request."""
