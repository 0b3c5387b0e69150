"""
Newsletter subscription component.

Double opt-in sign-up and confirmation.
"""

from src.components.newsletter.component import (
    TOKEN_ALPHABET,
    TOKEN_LENGTH,
    build_confirmation_bodies,
    build_confirmation_link,
    confirm_by_token,
    create_subscriber,
    generate_subscription_token,
    parse_new_subscriber,
    persist_subscriber,
    run_confirm,
    run_subscribe,
)
from src.components.newsletter.models import (
    VALID_TRANSITIONS,
    ConfirmInput,
    ConfirmOutput,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriberStatus,
    SubscriptionConfig,
    can_transition,
)
from src.components.newsletter.ports import (
    SubscriptionRepoPort,
    SubscriptionUnitOfWorkPort,
    UnitOfWorkFactory,
)

__all__ = [
    # Handlers
    "run_subscribe",
    "run_confirm",
    # Pure functions
    "generate_subscription_token",
    "parse_new_subscriber",
    "create_subscriber",
    "build_confirmation_link",
    "build_confirmation_bodies",
    "persist_subscriber",
    "confirm_by_token",
    # Constants
    "TOKEN_ALPHABET",
    "TOKEN_LENGTH",
    # Models
    "Subscriber",
    "SubscriberStatus",
    "VALID_TRANSITIONS",
    "can_transition",
    "SubscriptionConfig",
    # Input/Output
    "SubscribeInput",
    "SubscribeOutput",
    "ConfirmInput",
    "ConfirmOutput",
    # Ports
    "SubscriptionRepoPort",
    "SubscriptionUnitOfWorkPort",
    "UnitOfWorkFactory",
]
