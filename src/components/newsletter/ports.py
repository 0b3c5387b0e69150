"""
Newsletter subscription component ports.

Protocol interfaces for subscription storage. Email delivery uses the shared
EmailPort from src.core.ports.email.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from src.components.newsletter.models import Subscriber, SubscriberStatus
from src.core.ports.db import UnitOfWorkPort


class SubscriptionUnitOfWorkPort(UnitOfWorkPort, Protocol):
    """
    Transaction covering the sign-up write pair.

    A token must never be committed without its subscriber, nor the other
    way round.
    """

    def __enter__(self) -> SubscriptionUnitOfWorkPort:
        ...

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        """Insert a new subscriber row."""
        ...

    def store_token(self, subscriber_id: UUID, token: str) -> None:
        """Insert a confirmation token owned by subscriber_id."""
        ...


UnitOfWorkFactory = Callable[[], SubscriptionUnitOfWorkPort]


class SubscriptionRepoPort(Protocol):
    """
    Subscriber repository interface.

    All methods raise StorageError on storage failure.
    """

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_subscriber_id_from_token(self, token: str) -> UUID | None:
        """Resolve a confirmation token to its owning subscriber id."""
        ...

    def set_status(self, subscriber_id: UUID, status: SubscriberStatus) -> None:
        """Overwrite the subscriber's status."""
        ...

    def list_by_status(self, status: SubscriberStatus) -> list[Subscriber]:
        """List all subscribers with the given status."""
        ...
