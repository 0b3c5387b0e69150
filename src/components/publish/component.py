"""
Publish component - newsletter fan-out.

Authenticates the publisher, loads confirmed subscribers and sends one
newsletter issue to each of them.

Failure policy:
- Stored email that no longer parses: skip that subscriber, log a warning
- Delivery transport failure: abort the remaining fan-out
"""

from __future__ import annotations

import logging

import anyio

from src.components.auth.component import basic_authentication, validate_credentials
from src.components.auth.ports import CredentialRepoPort, PasswordHasherPort
from src.components.newsletter.models import Subscriber, SubscriberStatus
from src.components.publish.models import NewsletterIssue, PublishInput, PublishOutput
from src.components.publish.ports import SubscriberReaderPort
from src.core.errors import UnexpectedError
from src.core.ports.db import StorageError
from src.core.ports.email import EmailPort, EmailSendError
from src.domain.subscriber import SubscriberEmail, ValidationFailure, parse_email

logger = logging.getLogger(__name__)


def get_confirmed_subscribers(
    repo: SubscriberReaderPort,
) -> list[SubscriberEmail | ValidationFailure]:
    """
    Load confirmed subscribers and re-parse their stored emails.

    Each entry is either a parsed email or the failure explaining why the
    stored value was rejected.
    """
    results: list[SubscriberEmail | ValidationFailure] = []
    for subscriber in repo.list_by_status(SubscriberStatus.CONFIRMED):
        results.append(_parse_stored_email(subscriber))
    return results


def _parse_stored_email(subscriber: Subscriber) -> SubscriberEmail | ValidationFailure:
    try:
        return parse_email(subscriber.email)
    except ValidationFailure as e:
        return e


async def deliver_issue(
    issue: NewsletterIssue,
    recipients: list[SubscriberEmail | ValidationFailure],
    email_sender: EmailPort,
) -> tuple[int, int]:
    """
    Send issue to each parsed recipient, in order.

    Returns (sent, skipped). The first transport failure aborts the loop.
    """
    sent = 0
    skipped = 0
    for recipient in recipients:
        if isinstance(recipient, ValidationFailure):
            skipped += 1
            logger.warning(
                "Skipping a confirmed subscriber, invalid stored email: %s", recipient.reason
            )
            continue

        try:
            await email_sender.send_email(recipient.value, issue.title, issue.html, issue.text)
        except EmailSendError as e:
            raise UnexpectedError(f"Failed to send newsletter issue to {recipient.value}") from e
        sent += 1
    return sent, skipped


async def run_publish(
    inp: PublishInput,
    *,
    credential_repo: CredentialRepoPort,
    password_hasher: PasswordHasherPort,
    subscriber_repo: SubscriberReaderPort,
    email_sender: EmailPort,
    limiter: anyio.CapacityLimiter | None = None,
) -> PublishOutput:
    """
    Publish a newsletter issue to every confirmed subscriber.

    Raises:
        AuthError: credentials absent, malformed, unknown or wrong
        UnexpectedError: storage failure or delivery failure
    """
    credentials = basic_authentication(inp.authorization)
    user_id = await validate_credentials(
        credentials,
        credential_repo=credential_repo,
        password_hasher=password_hasher,
        limiter=limiter,
    )
    logger.info("Publisher %s authenticated", user_id)

    try:
        recipients = await anyio.to_thread.run_sync(get_confirmed_subscribers, subscriber_repo)
    except StorageError as e:
        raise UnexpectedError("Failed to load confirmed subscribers") from e

    sent, skipped = await deliver_issue(inp.issue, recipients, email_sender)
    logger.info(
        "Newsletter issue %r sent to %d subscribers (%d skipped)", inp.issue.title, sent, skipped
    )
    return PublishOutput(user_id=user_id, sent=sent, skipped=skipped)
