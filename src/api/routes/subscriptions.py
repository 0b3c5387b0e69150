"""
Public subscription endpoints.

Endpoints:
- POST /subscriptions - Sign up (form fields: name, email)
- GET /subscriptions/confirm - Confirm via emailed token
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Query

from src.adapters.sqlite_db import SQLiteSubscriptionRepo
from src.api.deps import (
    get_email_client,
    get_subscription_config,
    get_subscription_repo,
    get_unit_of_work_factory,
)
from src.api.schemas import ConfirmResponse, ErrorResponse, SubscribeResponse
from src.components.newsletter.component import run_confirm, run_subscribe
from src.components.newsletter.models import ConfirmInput, SubscribeInput, SubscriptionConfig
from src.components.newsletter.ports import UnitOfWorkFactory
from src.core.ports.email import EmailPort

router = APIRouter()


@router.post(
    "",
    response_model=SubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or email"},
        500: {"description": "Storage or delivery failure"},
    },
    summary="Subscribe to the newsletter",
    description="Store a pending subscriber and email them a confirmation link.",
)
async def subscribe(
    name: Annotated[str, Form()],
    email: Annotated[str, Form()],
    uow_factory: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
    email_client: EmailPort = Depends(get_email_client),
    config: SubscriptionConfig = Depends(get_subscription_config),
) -> SubscribeResponse:
    result = await run_subscribe(
        SubscribeInput(name=name, email=email),
        uow_factory=uow_factory,
        email_sender=email_client,
        config=config,
    )
    return SubscribeResponse(
        subscriber_id=result.subscriber_id,
        message="Please check your email to confirm your subscription",
    )


@router.get(
    "/confirm",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing subscription_token"},
        404: {"model": ErrorResponse, "description": "Unknown token"},
        500: {"description": "Storage failure"},
    },
    summary="Confirm a subscription",
    description="Mark the token's subscriber as confirmed. Idempotent.",
)
async def confirm(
    subscription_token: Annotated[str, Query()],
    repo: SQLiteSubscriptionRepo = Depends(get_subscription_repo),
) -> ConfirmResponse:
    result = await run_confirm(ConfirmInput(token=subscription_token), repo=repo)

    if result.already_confirmed:
        message = "Your subscription was already confirmed"
    else:
        message = "Your subscription is now confirmed. Welcome!"
    return ConfirmResponse(subscriber_id=result.subscriber_id, message=message)
