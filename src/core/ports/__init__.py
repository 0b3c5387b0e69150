# newsletter-service: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import StorageError, UnitOfWorkPort
from src.core.ports.email import (
    EmailError,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

__all__ = [
    # Storage
    "StorageError",
    "UnitOfWorkPort",
    # Email
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
]
