"""
Newsletter publishing endpoint.

Endpoints:
- POST /newsletter - Send an issue to every confirmed subscriber
  (HTTP Basic auth, realm "publish")
"""

from __future__ import annotations

from typing import Annotated

import anyio
from fastapi import APIRouter, Depends, Header

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.sqlite_db import SQLiteCredentialRepo, SQLiteSubscriptionRepo
from src.api.deps import (
    get_credential_repo,
    get_email_client,
    get_password_hash_limiter,
    get_password_hasher,
    get_subscription_repo,
)
from src.api.schemas import ErrorResponse, PublishNewsletterRequest, PublishNewsletterResponse
from src.components.publish.component import run_publish
from src.components.publish.models import NewsletterIssue, PublishInput
from src.core.ports.email import EmailPort

router = APIRouter()


@router.post(
    "",
    response_model=PublishNewsletterResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing title or content fields"},
        401: {"description": "Missing or invalid credentials"},
        500: {"description": "Storage or delivery failure"},
    },
    summary="Publish a newsletter issue",
    description=(
        "Deliver one issue to every confirmed subscriber. "
        "Stops at the first delivery failure."
    ),
)
async def publish_newsletter(
    body: PublishNewsletterRequest,
    authorization: Annotated[str | None, Header()] = None,
    credential_repo: SQLiteCredentialRepo = Depends(get_credential_repo),
    password_hasher: Argon2PasswordHasher = Depends(get_password_hasher),
    subscriber_repo: SQLiteSubscriptionRepo = Depends(get_subscription_repo),
    email_client: EmailPort = Depends(get_email_client),
    limiter: anyio.CapacityLimiter = Depends(get_password_hash_limiter),
) -> PublishNewsletterResponse:
    issue = NewsletterIssue(
        title=body.title,
        html=body.content.html,
        text=body.content.text,
    )
    result = await run_publish(
        PublishInput(issue=issue, authorization=authorization),
        credential_repo=credential_repo,
        password_hasher=password_hasher,
        subscriber_repo=subscriber_repo,
        email_sender=email_client,
        limiter=limiter,
    )
    return PublishNewsletterResponse(sent=result.sent, skipped=result.skipped)
