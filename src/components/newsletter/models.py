"""
Newsletter subscription component models.

Data models for the subscriber lifecycle.

State machine (Subscriber): pending_confirmation → confirmed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

# --- State Machine ---


class SubscriberStatus(Enum):
    """
    Newsletter subscriber status.

    State transitions:
    - pending_confirmation → confirmed (via confirmation link)

    Confirmed is terminal; status never moves backwards.
    """

    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"


VALID_TRANSITIONS: dict[SubscriberStatus, set[SubscriberStatus]] = {
    SubscriberStatus.PENDING_CONFIRMATION: {SubscriberStatus.CONFIRMED},
    SubscriberStatus.CONFIRMED: set(),
}


def can_transition(from_status: SubscriberStatus, to_status: SubscriberStatus) -> bool:
    """Check if a status transition is allowed."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


# --- Entity ---


@dataclass
class Subscriber:
    """
    Stored subscriber record.

    name and email hold the strings as persisted; they were validated on the
    way in but are re-parsed by readers that depend on them (stored data may
    predate current validation rules).
    """

    id: UUID
    email: str
    name: str
    status: SubscriberStatus = SubscriberStatus.PENDING_CONFIRMATION
    subscribed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Raw sign-up form fields."""

    name: str
    email: str


@dataclass(frozen=True)
class ConfirmInput:
    """Confirmation request; token is any opaque string."""

    token: str


# --- Output Models ---


@dataclass(frozen=True)
class SubscribeOutput:
    subscriber_id: UUID
    confirmation_link: str


@dataclass(frozen=True)
class ConfirmOutput:
    subscriber_id: UUID
    already_confirmed: bool = False  # Idempotent success


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    """Settings the subscription flow needs from the application shell."""

    base_url: str = "http://127.0.0.1:8000"
    confirmation_path: str = "/subscriptions/confirm"
    confirmation_subject: str = "Welcome!"
