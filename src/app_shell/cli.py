import argparse
import getpass
import logging
import os
import sys
from pathlib import Path
from uuid import uuid4

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteCredentialRepo
from src.app_shell.logging_setup import configure_logging
from src.components.auth.models import StoredCredentials
from src.config.loader import load_settings
from src.config.models import Settings
from src.core.ports.db import StorageError

logger = logging.getLogger("cli")

DEFAULT_CONFIG_PATH = "config.yaml"


def get_settings(config_path: str) -> Settings:
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Configuration file {path} not found.")
        sys.exit(1)
    return load_settings(path)


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    db_dir = os.path.dirname(settings.database.path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    migrator = SQLiteMigrator(settings.database.path, settings.database.migrations_dir)
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    if not password:
        logger.error("A password is required.")
        sys.exit(1)

    repo = SQLiteCredentialRepo(settings.database.path, timeout=settings.database.timeout_seconds)
    if repo.get_stored_credentials(args.username) is not None:
        logger.error(f"User {args.username} already exists.")
        sys.exit(1)

    credentials = StoredCredentials(
        user_id=uuid4(),
        username=args.username,
        password_hash=Argon2PasswordHasher().hash_password(password),
    )
    try:
        repo.save(credentials)
    except StorageError as e:
        logger.error(f"Failed to create user: {e}")
        sys.exit(1)

    print(f"Created publisher '{credentials.username}'.")
    print(f"User ID: {credentials.user_id}")


def main(argv: list[str] | None = None) -> None:
    configure_logging()

    parser = argparse.ArgumentParser(description="Newsletter service CLI")
    parser.add_argument(
        "--config",
        default=os.environ.get("APP_CONFIG_PATH", DEFAULT_CONFIG_PATH),
        help="Path to config.yaml",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Provision a publisher credential")
    user_parser.add_argument("username", help="Publisher username")
    user_parser.add_argument("--password", help="Password (prompted when omitted)")

    args = parser.parse_args(argv)
    settings = get_settings(args.config)

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "create-user":
        handle_create_user(settings, args)


if __name__ == "__main__":
    main()
