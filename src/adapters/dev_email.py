"""
Dev Email Adapter.

Stands in for the delivery provider when `email_client.base_url` is empty,
and in tests. Messages are logged and kept in memory; nothing leaves the
process, so every result is SKIPPED.

Failure injection: with `fail_with` set, sends after the first `fail_after`
raise EmailSendError, the same error the HTTP client raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult, EmailSendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentEmail:
    """Captured message, for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """Log-only EmailPort implementation."""

    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    fail_with: str | None = None
    fail_after: int = 0
    attempts: int = 0

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        self.attempts += 1
        if self.fail_with is not None and self.attempts > self.fail_after:
            raise EmailSendError(recipient, self.fail_with)

        email = SentEmail(
            id=f"dev-{uuid4().hex[:12]}",
            recipient=recipient,
            subject=subject,
            body_html=body_html,
            body_text=body_text,
            logged_at=datetime.now(UTC),
        )
        self.sent_emails.append(email)

        if self.log_body:
            logger.log(
                self.log_level,
                "EMAIL (dev): To=%s, Subject=%s, Body=%s, MessageID=%s",
                recipient,
                subject,
                self._preview(body_html),
                email.id,
            )
        else:
            logger.log(
                self.log_level,
                "EMAIL (dev): To=%s, Subject=%s, MessageID=%s",
                recipient,
                subject,
                email.id,
            )

        return EmailResult.skipped(recipient, email.id)

    def _preview(self, body: str) -> str:
        if len(body) <= self.body_preview_length:
            return body
        return body[: self.body_preview_length] + "..."

    async def aclose(self) -> None:
        return None

    # --- Test helpers ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        """Forget captured emails and reset the attempt counter."""
        self.sent_emails.clear()
        self.attempts = 0

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
