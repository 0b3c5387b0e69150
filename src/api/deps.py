import os
from functools import lru_cache, partial
from pathlib import Path

import anyio
from fastapi import Depends, Request

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.sqlite_db import SQLiteCredentialRepo, SQLiteSubscriptionRepo, SQLiteUnitOfWork
from src.components.newsletter.models import SubscriptionConfig
from src.components.newsletter.ports import UnitOfWorkFactory
from src.config.loader import load_settings
from src.config.models import Settings
from src.core.ports.email import EmailPort

CONFIG_PATH_ENV = "APP_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "config.yaml"


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    """Load settings once per process from APP_CONFIG_PATH (default ./config.yaml)."""
    return load_settings(Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)))


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    settings: Settings = request.app.state.settings
    return settings


def get_subscription_config(settings: Settings = Depends(get_app_settings)) -> SubscriptionConfig:
    return SubscriptionConfig(base_url=settings.application.base_url)


# --- Repos ---
def get_subscription_repo(settings: Settings = Depends(get_app_settings)) -> SQLiteSubscriptionRepo:
    return SQLiteSubscriptionRepo(settings.database.path, timeout=settings.database.timeout_seconds)


def get_credential_repo(settings: Settings = Depends(get_app_settings)) -> SQLiteCredentialRepo:
    return SQLiteCredentialRepo(settings.database.path, timeout=settings.database.timeout_seconds)


def get_unit_of_work_factory(settings: Settings = Depends(get_app_settings)) -> UnitOfWorkFactory:
    return partial(
        SQLiteUnitOfWork, settings.database.path, timeout=settings.database.timeout_seconds
    )


# --- Adapters ---
def get_email_client(request: Request) -> EmailPort:
    """Email gateway shared by all requests; created in the app lifespan."""
    client: EmailPort = request.app.state.email_client
    return client


def get_password_hasher(request: Request) -> Argon2PasswordHasher:
    """Shared hasher; built with its dummy hash in the app lifespan."""
    hasher: Argon2PasswordHasher = request.app.state.password_hasher
    return hasher


def get_password_hash_limiter(request: Request) -> anyio.CapacityLimiter:
    """Bounded pool for password verification, separate from the I/O thread pool."""
    limiter: anyio.CapacityLimiter = request.app.state.password_hash_limiter
    return limiter
