"""Publish component ports - protocols for external dependencies."""

from typing import Protocol

from src.components.newsletter.models import Subscriber, SubscriberStatus


class SubscriberReaderPort(Protocol):
    """Read-only subscriber access; the publisher never writes."""

    def list_by_status(self, status: SubscriberStatus) -> list[Subscriber]:
        """List all subscribers with the given status."""
        ...
