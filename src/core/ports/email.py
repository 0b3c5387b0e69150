"""
Email delivery interface.

Protocol-based interface for the outbound delivery provider. Used by the
subscription flow for confirmation messages and by the publisher for
newsletter fan-out.

Key requirements:
- One provider call per send, no retry, no batching
- HTML and plain text body on every message
- Transport failures raise EmailSendError with the provider/network
  exception preserved as __cause__

Implementations:
1. PostmarkEmailClient: HTTP provider (production)
2. DevEmailAdapter: logs and records messages (dev/test)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    SKIPPED = "skipped"  # Dev adapter, nothing left the process


@dataclass
class EmailResult:
    """Result of a successful email send."""

    status: EmailStatus
    recipient: str
    message_id: str | None = None  # Provider's message ID
    sent_at: datetime | None = None

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            recipient=recipient,
            message_id=message_id,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            recipient=recipient,
            message_id=message_id,
        )


class EmailPort(Protocol):
    """Outbound email gateway."""

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        """
        Send one message through the delivery provider.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body content

        Returns:
            EmailResult for the accepted message

        Raises:
            EmailSendError: non-2xx provider response or network failure
        """
        ...

    async def aclose(self) -> None:
        """Release connections held by the gateway."""
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to send email."""

    def __init__(self, recipient: str, error: str, status_code: int | None = None) -> None:
        self.recipient = recipient
        self.error = error
        self.status_code = status_code
        super().__init__(f"Failed to send email to {recipient}: {error}")
