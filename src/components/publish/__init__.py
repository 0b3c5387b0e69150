"""Publish component - newsletter issue fan-out to confirmed subscribers."""

from src.components.publish.component import (
    deliver_issue,
    get_confirmed_subscribers,
    run_publish,
)
from src.components.publish.models import NewsletterIssue, PublishInput, PublishOutput
from src.components.publish.ports import SubscriberReaderPort

__all__ = [
    # Entry point
    "run_publish",
    # Steps
    "get_confirmed_subscribers",
    "deliver_issue",
    # Models
    "NewsletterIssue",
    "PublishInput",
    "PublishOutput",
    # Ports
    "SubscriberReaderPort",
]
