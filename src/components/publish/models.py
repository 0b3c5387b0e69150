"""Publish component models - frozen dataclass inputs and outputs."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class NewsletterIssue:
    """One newsletter issue; lives only for the duration of a publish call."""

    title: str
    html: str
    text: str


@dataclass(frozen=True)
class PublishInput:
    """Input for a newsletter publish request."""

    issue: NewsletterIssue
    authorization: str | None  # Raw Authorization header value


@dataclass(frozen=True)
class PublishOutput:
    """Output for a completed fan-out."""

    user_id: UUID
    sent: int
    skipped: int
