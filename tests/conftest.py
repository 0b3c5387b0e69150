from collections.abc import Generator
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteCredentialRepo, SQLiteSubscriptionRepo
from src.api.main import create_app
from src.components.auth.models import StoredCredentials
from src.components.newsletter.models import Subscriber
from src.config.models import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    Settings,
)

MIGRATIONS_DIR = str(Path(__file__).resolve().parent.parent / "migrations")

PUBLISHER_USERNAME = "publisher"
PUBLISHER_PASSWORD = "correct horse battery staple"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_db_path(tmp_path) -> str:
    """Migrated SQLite database in a temp dir."""
    db_path = str(tmp_path / "newsletter.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return db_path


@pytest.fixture
def test_settings(test_db_path: str) -> Settings:
    return Settings(
        application=ApplicationSettings(base_url="http://127.0.0.1:8000"),
        database=DatabaseSettings(path=test_db_path, migrations_dir=MIGRATIONS_DIR),
        email_client=EmailClientSettings(sender_email="newsletter@example.com"),
    )


@pytest.fixture
def fast_hasher() -> Argon2PasswordHasher:
    """Argon2 with minimal cost parameters; keeps the suite fast."""
    return Argon2PasswordHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


class InspectableSubscriptionRepo(SQLiteSubscriptionRepo):
    """Subscription repo with the lookups only assertions need."""

    def get_by_email(self, email: str) -> Subscriber | None:
        row = self._fetchone("SELECT id FROM subscriptions WHERE email = ?", (email,))
        return self.get_by_id(UUID(row["id"])) if row else None

    def list_tokens(self, subscriber_id: UUID) -> list[str]:
        rows = self._fetchall(
            "SELECT subscription_token FROM subscription_tokens WHERE subscriber_id = ?",
            (str(subscriber_id),),
        )
        return [r["subscription_token"] for r in rows]

    def count_all(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS n FROM subscriptions", ())
        return int(row["n"]) if row else 0


@pytest.fixture
def subscription_repo(test_db_path: str) -> InspectableSubscriptionRepo:
    return InspectableSubscriptionRepo(test_db_path)


@pytest.fixture
def credential_repo(test_db_path: str) -> SQLiteCredentialRepo:
    return SQLiteCredentialRepo(test_db_path)


@pytest.fixture
def publisher(credential_repo: SQLiteCredentialRepo, fast_hasher) -> StoredCredentials:
    """A stored publisher account; its password is PUBLISHER_PASSWORD."""
    return credential_repo.save(
        StoredCredentials(
            user_id=uuid4(),
            username=PUBLISHER_USERNAME,
            password_hash=fast_hasher.hash_password(PUBLISHER_PASSWORD),
        )
    )


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def client(
    test_settings: Settings,
    email_adapter: DevEmailAdapter,
    fast_hasher: Argon2PasswordHasher,
) -> Generator[TestClient, None, None]:
    """Test client with the lifespan running against the temp database."""
    app = create_app(test_settings, email_client=email_adapter, password_hasher=fast_hasher)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def publisher_auth(publisher: StoredCredentials) -> tuple[str, str]:
    """(username, password) for the stored publisher, as accepted by httpx `auth=`."""
    return publisher.username, PUBLISHER_PASSWORD
