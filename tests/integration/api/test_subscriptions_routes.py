"""
API tests for POST /subscriptions and GET /subscriptions/confirm.

Run against a migrated temp database with the dev email adapter capturing
outbound messages.
"""

import re
import sqlite3
from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite_db import SQLiteSubscriptionRepo
from src.components.newsletter.models import SubscriberStatus

VALID_FORM = {"name": "le guin", "email": "ursula_le_guin@gmail.com"}


def confirmation_path(email_adapter: DevEmailAdapter) -> str:
    """Path and query of the link in the last email sent."""
    email = email_adapter.get_last_email()
    assert email is not None
    link = re.search(r"https?://\S+", email.body_text).group(0)
    parts = urlsplit(link)
    return f"{parts.path}?{parts.query}"


def row_counts(db_path: str) -> tuple[int, int]:
    conn = sqlite3.connect(db_path)
    try:
        subs = conn.execute("SELECT COUNT(*) FROM subscriptions").fetchone()[0]
        tokens = conn.execute("SELECT COUNT(*) FROM subscription_tokens").fetchone()[0]
    finally:
        conn.close()
    return subs, tokens


class TestSubscribe:
    def test_returns_200_for_valid_form_data(self, client: TestClient) -> None:
        response = client.post("/subscriptions", data=VALID_FORM)

        assert response.status_code == 200
        assert "check your email" in response.json()["message"].lower()

    def test_persists_new_pending_subscriber(
        self, client: TestClient, subscription_repo: SQLiteSubscriptionRepo
    ) -> None:
        client.post("/subscriptions", data=VALID_FORM)

        saved = subscription_repo.get_by_email("ursula_le_guin@gmail.com")
        assert saved is not None
        assert saved.name == "le guin"
        assert saved.status == SubscriberStatus.PENDING_CONFIRMATION
        assert len(subscription_repo.list_tokens(saved.id)) == 1

    def test_sends_one_confirmation_email_with_a_link(
        self, client: TestClient, email_adapter: DevEmailAdapter
    ) -> None:
        client.post("/subscriptions", data=VALID_FORM)

        assert email_adapter.email_count == 1
        email = email_adapter.get_last_email()
        assert email.recipient == "ursula_le_guin@gmail.com"
        html_links = re.findall(r'href="([^"]+)"', email.body_html)
        text_links = re.findall(r"https?://\S+", email.body_text)
        assert len(html_links) == 1
        assert html_links == text_links
        assert "subscription_token=" in html_links[0]

    @pytest.mark.parametrize(
        "form",
        [
            {"name": "le guin"},
            {"email": "ursula_le_guin@gmail.com"},
            {},
        ],
    )
    def test_returns_400_when_data_is_missing(self, client: TestClient, form) -> None:
        response = client.post("/subscriptions", data=form)

        assert response.status_code == 400

    def test_missing_field_400_names_the_field(self, client: TestClient) -> None:
        response = client.post("/subscriptions", data={"email": "ursula_le_guin@gmail.com"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert isinstance(detail, str)
        assert detail.startswith("name: ")

    @pytest.mark.parametrize(
        "form",
        [
            {"name": "", "email": "ursula_le_guin@gmail.com"},
            {"name": "   ", "email": "ursula_le_guin@gmail.com"},
            {"name": "a" * 257, "email": "ursula_le_guin@gmail.com"},
            {"name": "Ursula{}", "email": "ursula_le_guin@gmail.com"},
            {"name": "Ursula", "email": ""},
            {"name": "Ursula", "email": "definitely-not-an-email"},
        ],
    )
    def test_returns_400_when_fields_are_present_but_invalid(
        self,
        client: TestClient,
        email_adapter: DevEmailAdapter,
        test_db_path: str,
        form,
    ) -> None:
        response = client.post("/subscriptions", data=form)

        assert response.status_code == 400
        assert row_counts(test_db_path) == (0, 0)
        assert email_adapter.attempts == 0

    def test_400_body_carries_validation_reason(self, client: TestClient) -> None:
        response = client.post(
            "/subscriptions", data={"name": "Ursula(admin)", "email": "ursula@domain.com"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "'Ursula(admin)' is not a valid subscriber name"

    def test_delivery_failure_returns_500_and_keeps_rows(
        self, client: TestClient, email_adapter: DevEmailAdapter, test_db_path: str
    ) -> None:
        email_adapter.fail_with = "provider unavailable"

        response = client.post("/subscriptions", data=VALID_FORM)

        assert response.status_code == 500
        assert response.content == b""
        assert row_counts(test_db_path) == (1, 1)

    def test_duplicate_email_returns_500(
        self, client: TestClient, email_adapter: DevEmailAdapter, test_db_path: str
    ) -> None:
        assert client.post("/subscriptions", data=VALID_FORM).status_code == 200

        response = client.post("/subscriptions", data=VALID_FORM)

        assert response.status_code == 500
        assert row_counts(test_db_path) == (1, 1)
        assert email_adapter.email_count == 1


class TestConfirm:
    def test_link_returned_by_subscribe_confirms_a_subscriber(
        self,
        client: TestClient,
        email_adapter: DevEmailAdapter,
        subscription_repo: SQLiteSubscriptionRepo,
    ) -> None:
        client.post("/subscriptions", data={"name": "Bruce Wayne", "email": "bruce@wayne.com"})

        response = client.get(confirmation_path(email_adapter))

        assert response.status_code == 200
        saved = subscription_repo.get_by_email("bruce@wayne.com")
        assert saved is not None
        assert saved.name == "Bruce Wayne"
        assert saved.status == SubscriberStatus.CONFIRMED
        assert response.json()["subscriber_id"] == str(saved.id)

    def test_confirming_twice_is_idempotent(
        self,
        client: TestClient,
        email_adapter: DevEmailAdapter,
        subscription_repo: SQLiteSubscriptionRepo,
    ) -> None:
        client.post("/subscriptions", data=VALID_FORM)
        path = confirmation_path(email_adapter)

        first = client.get(path)
        second = client.get(path)

        assert first.status_code == second.status_code == 200
        assert "already confirmed" in second.json()["message"]
        saved = subscription_repo.get_by_email(VALID_FORM["email"])
        assert saved.status == SubscriberStatus.CONFIRMED

    def test_confirmation_without_token_is_rejected_with_400(self, client: TestClient) -> None:
        response = client.get("/subscriptions/confirm")

        assert response.status_code == 400
        assert response.json() == {"detail": "subscription_token: Field required"}

    def test_unknown_token_returns_404_and_changes_nothing(
        self, client: TestClient, subscription_repo: SQLiteSubscriptionRepo
    ) -> None:
        client.post("/subscriptions", data=VALID_FORM)

        response = client.get(
            "/subscriptions/confirm", params={"subscription_token": "aaaaaaaaaaaaaaaaaaaaaaaaa"}
        )

        assert response.status_code == 404
        saved = subscription_repo.get_by_email(VALID_FORM["email"])
        assert saved.status == SubscriberStatus.PENDING_CONFIRMATION
