from src.config.loader import apply_env_overrides, load_settings
from src.config.models import (
    ApplicationSettings,
    AuthSettings,
    DatabaseSettings,
    EmailClientSettings,
    Settings,
)

__all__ = [
    "load_settings",
    "apply_env_overrides",
    "Settings",
    "ApplicationSettings",
    "DatabaseSettings",
    "EmailClientSettings",
    "AuthSettings",
]
