"""
Newsletter subscription component.

Functional core for newsletter sign-up and confirmation.
Implements double opt-in: a subscriber starts as pending_confirmation and is
confirmed through a link mailed to them.

Key behaviors:
- Name/email validated before anything is written
- Subscriber row and confirmation token written in one transaction
- Transaction committed before the confirmation email is sent
- 25-char alphanumeric tokens from a CSPRNG (secrets)
- Confirmation is idempotent

Storage ports are synchronous and run on worker threads
(anyio.to_thread.run_sync); email delivery is awaited directly.
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import UTC, datetime
from uuid import UUID, uuid4

import anyio

from src.components.newsletter.models import (
    ConfirmInput,
    ConfirmOutput,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriberStatus,
    SubscriptionConfig,
    can_transition,
)
from src.components.newsletter.ports import SubscriptionRepoPort, UnitOfWorkFactory
from src.core.errors import NotFoundError, UnexpectedError, ValidationError
from src.core.ports.db import StorageError
from src.core.ports.email import EmailPort, EmailSendError
from src.domain.subscriber import (
    NewSubscriber,
    SubscriberEmail,
    ValidationFailure,
    parse_email,
    parse_name,
)

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 25


# --- Pure Functions (Functional Core) ---


def generate_subscription_token(length: int = TOKEN_LENGTH) -> str:
    """
    Generate a confirmation token.

    Characters are drawn uniformly from [A-Za-z0-9]. No uniqueness check is
    made against stored tokens.
    """
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def parse_new_subscriber(inp: SubscribeInput) -> NewSubscriber:
    """Validate raw form fields; raises ValidationError on the first bad field."""
    try:
        name = parse_name(inp.name)
        email = parse_email(inp.email)
    except ValidationFailure as e:
        raise ValidationError(e.reason, e.field) from e
    return NewSubscriber(name=name, email=email)


def create_subscriber(new_subscriber: NewSubscriber, now: datetime | None = None) -> Subscriber:
    """Build a pending subscriber record with a fresh id."""
    return Subscriber(
        id=uuid4(),
        email=new_subscriber.email.value,
        name=new_subscriber.name.value,
        status=SubscriberStatus.PENDING_CONFIRMATION,
        subscribed_at=now or datetime.now(UTC),
    )


def build_confirmation_link(
    base_url: str,
    token: str,
    path: str = "/subscriptions/confirm",
) -> str:
    """Full confirmation URL for the email body."""
    base = base_url.rstrip("/")
    return f"{base}{path}?subscription_token={token}"


def build_confirmation_bodies(confirmation_link: str) -> tuple[str, str]:
    """HTML and plain text bodies; both carry the same link."""
    html_body = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{confirmation_link}">here</a> to confirm your subscription.'
    )
    text_body = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_link} to confirm your subscription."
    )
    return html_body, text_body


# --- Storage Steps (run on worker threads) ---


def persist_subscriber(uow_factory: UnitOfWorkFactory, subscriber: Subscriber, token: str) -> None:
    """Insert subscriber and token in one transaction."""
    with uow_factory() as uow:
        uow.insert_subscriber(subscriber)
        uow.store_token(subscriber.id, token)
        uow.commit()


def confirm_by_token(repo: SubscriptionRepoPort, token: str) -> tuple[UUID, bool] | None:
    """
    Resolve token and mark its subscriber confirmed.

    Returns (subscriber_id, already_confirmed), or None for an unknown token.
    """
    subscriber_id = repo.get_subscriber_id_from_token(token)
    if subscriber_id is None:
        return None

    subscriber = repo.get_by_id(subscriber_id)
    if subscriber is None:
        return None

    if subscriber.status == SubscriberStatus.CONFIRMED:
        return subscriber_id, True

    if not can_transition(subscriber.status, SubscriberStatus.CONFIRMED):
        raise UnexpectedError(
            f"Subscriber {subscriber_id} cannot be confirmed from {subscriber.status.value}"
        )

    repo.set_status(subscriber_id, SubscriberStatus.CONFIRMED)
    return subscriber_id, False


# --- Run Handlers ---


async def send_confirmation_email(
    email_sender: EmailPort,
    recipient: SubscriberEmail,
    confirmation_link: str,
    subject: str = "Welcome!",
) -> None:
    html_body, text_body = build_confirmation_bodies(confirmation_link)
    await email_sender.send_email(recipient.value, subject, html_body, text_body)


async def run_subscribe(
    inp: SubscribeInput,
    *,
    uow_factory: UnitOfWorkFactory,
    email_sender: EmailPort,
    config: SubscriptionConfig | None = None,
) -> SubscribeOutput:
    """
    Handle a sign-up.

    Raises:
        ValidationError: name or email rejected; nothing persisted
        UnexpectedError: storage failure, or delivery failure after commit
            (rows stay committed)
    """
    cfg = config or SubscriptionConfig()

    new_subscriber = parse_new_subscriber(inp)
    token = generate_subscription_token()
    subscriber = create_subscriber(new_subscriber)

    try:
        await anyio.to_thread.run_sync(persist_subscriber, uow_factory, subscriber, token)
    except StorageError as e:
        logger.error("Failed to store new subscriber: %s", e)
        raise UnexpectedError("Failed to store a new subscriber") from e

    link = build_confirmation_link(cfg.base_url, token, cfg.confirmation_path)
    try:
        await send_confirmation_email(
            email_sender,
            new_subscriber.email,
            link,
            cfg.confirmation_subject,
        )
    except EmailSendError as e:
        logger.error("Failed to send confirmation email to subscriber %s: %s", subscriber.id, e)
        raise UnexpectedError("Failed to send a confirmation email") from e

    logger.info("New subscriber %s saved, confirmation email sent", subscriber.id)
    return SubscribeOutput(subscriber_id=subscriber.id, confirmation_link=link)


async def run_confirm(
    inp: ConfirmInput,
    *,
    repo: SubscriptionRepoPort,
) -> ConfirmOutput:
    """
    Handle a confirmation link.

    Raises:
        NotFoundError: token unknown; nothing mutated
        UnexpectedError: storage failure
    """
    try:
        result = await anyio.to_thread.run_sync(confirm_by_token, repo, inp.token)
    except StorageError as e:
        raise UnexpectedError("Failed to confirm subscriber") from e

    if result is None:
        raise NotFoundError("Unknown subscription token")

    subscriber_id, already_confirmed = result
    if already_confirmed:
        logger.info("Subscriber %s was already confirmed", subscriber_id)
    else:
        logger.info("Subscriber %s confirmed", subscriber_id)
    return ConfirmOutput(subscriber_id=subscriber_id, already_confirmed=already_confirmed)
