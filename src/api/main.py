import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import anyio
from fastapi import FastAPI

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.postmark_email import PostmarkEmailClient
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_settings
from src.api.errors import register_error_handlers
from src.api.routes import health, newsletter, subscriptions
from src.app_shell.logging_setup import configure_logging
from src.config.models import Settings
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)


def build_email_client(settings: Settings) -> EmailPort:
    """HTTP provider client, or the log-only dev adapter when no provider URL is set."""
    cfg = settings.email_client
    if not cfg.base_url:
        logger.warning("No email provider configured; emails will be logged, not sent")
        return DevEmailAdapter()
    return PostmarkEmailClient(
        base_url=cfg.base_url,
        sender=cfg.sender_email,
        authorization_token=cfg.authorization_token.get_secret_value(),
        timeout_seconds=cfg.timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    configure_logging()

    # Migrate on startup (fail-fast)
    Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.database.path, settings.database.migrations_dir)
    await anyio.to_thread.run_sync(migrator.run_migrations)
    logger.info("Database ready at %s", settings.database.path)

    app.state.password_hash_limiter = anyio.CapacityLimiter(settings.auth.password_hash_workers)
    if getattr(app.state, "password_hasher", None) is None:
        # Hashes the dummy password; keep it off the event loop
        app.state.password_hasher = await anyio.to_thread.run_sync(
            Argon2PasswordHasher, limiter=app.state.password_hash_limiter
        )
    if getattr(app.state, "email_client", None) is None:
        app.state.email_client = build_email_client(settings)

    yield

    await app.state.email_client.aclose()


def create_app(
    settings: Settings | None = None,
    email_client: EmailPort | None = None,
    password_hasher: Argon2PasswordHasher | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; loaded from APP_CONFIG_PATH when omitted
        email_client: Email gateway to use instead of the configured one
        password_hasher: Hasher to use instead of a default-cost Argon2 one

    Serve with: uvicorn src.api.main:create_app --factory
    """
    app = FastAPI(
        title="Newsletter API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings or get_settings()
    app.state.email_client = email_client
    app.state.password_hasher = password_hasher

    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health.router, tags=["Health"])
    app.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
    app.include_router(newsletter.router, prefix="/newsletter", tags=["Newsletter"])

    return app
