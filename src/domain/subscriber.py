"""
Subscriber value objects.

Pure parsing of raw form strings into validated name/email values.
Parsing either returns a value object or raises ValidationFailure with a
human-readable reason; there is no partial success.
"""

from __future__ import annotations

from dataclasses import dataclass

import regex
from email_validator import EmailNotValidError, validate_email

MAX_NAME_GRAPHEMES = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\[]{}')


class ValidationFailure(ValueError):
    """Raw input could not be parsed into a value object."""

    def __init__(self, reason: str, field: str) -> None:
        self.reason = reason
        self.field = field
        super().__init__(reason)


@dataclass(frozen=True)
class SubscriberName:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberEmail:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NewSubscriber:
    """Validated sign-up data, ready to be persisted."""

    name: SubscriberName
    email: SubscriberEmail


def grapheme_count(text: str) -> int:
    """Number of user-perceived characters (extended grapheme clusters)."""
    return len(regex.findall(r"\X", text))


def parse_name(raw: str) -> SubscriberName:
    """
    Parse a subscriber name.

    Rejects names that are blank after trimming, longer than 256 graphemes,
    or contain any of / ( ) " < > \\ [ ] { }.
    """
    is_empty = not raw.strip()
    is_too_long = grapheme_count(raw) > MAX_NAME_GRAPHEMES
    has_forbidden = any(ch in FORBIDDEN_NAME_CHARACTERS for ch in raw)

    if is_empty or is_too_long or has_forbidden:
        raise ValidationFailure(f"{raw!r} is not a valid subscriber name", "name")
    return SubscriberName(raw)


def parse_email(raw: str) -> SubscriberEmail:
    """Parse a subscriber email address (syntax only, no DNS lookup)."""
    try:
        result = validate_email(raw, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationFailure(f"{raw!r} is not a valid subscriber email", "email") from e
    return SubscriberEmail(result.normalized)
