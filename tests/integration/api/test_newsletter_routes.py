"""
API tests for POST /newsletter.

Subscribers are created through the public endpoints; the publisher account
comes from the `publisher` fixture.
"""

import re
import sqlite3
from urllib.parse import urlsplit
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.adapters.dev_email import DevEmailAdapter
from src.api.errors import PUBLISH_CHALLENGE

ISSUE = {
    "title": "Newsletter title",
    "content": {
        "text": "Newsletter body as plain text",
        "html": "<p>Newsletter body as HTML</p>",
    },
}


def create_unconfirmed_subscriber(
    client: TestClient, email_adapter: DevEmailAdapter, email: str
) -> str:
    """Subscribe; returns the confirmation path from the emailed link."""
    response = client.post("/subscriptions", data={"name": "reader", "email": email})
    assert response.status_code == 200

    text = email_adapter.get_last_email().body_text
    parts = urlsplit(re.search(r"https?://\S+", text).group(0))
    return f"{parts.path}?{parts.query}"


def create_confirmed_subscriber(
    client: TestClient, email_adapter: DevEmailAdapter, email: str
) -> None:
    path = create_unconfirmed_subscriber(client, email_adapter, email)
    assert client.get(path).status_code == 200


@pytest.fixture
def auth(publisher_auth) -> tuple[str, str]:
    return publisher_auth


class TestPublishNewsletter:
    def test_newsletters_are_not_delivered_to_unconfirmed_subscribers(
        self, client: TestClient, email_adapter: DevEmailAdapter, auth
    ) -> None:
        create_unconfirmed_subscriber(client, email_adapter, "pending@example.com")
        email_adapter.clear()

        response = client.post("/newsletter", json=ISSUE, auth=auth)

        assert response.status_code == 200
        assert response.json() == {"sent": 0, "skipped": 0}
        assert email_adapter.attempts == 0

    def test_newsletters_are_delivered_to_confirmed_subscribers(
        self, client: TestClient, email_adapter: DevEmailAdapter, auth
    ) -> None:
        create_confirmed_subscriber(client, email_adapter, "one@example.com")
        create_confirmed_subscriber(client, email_adapter, "two@example.com")
        create_unconfirmed_subscriber(client, email_adapter, "pending@example.com")
        email_adapter.clear()

        response = client.post("/newsletter", json=ISSUE, auth=auth)

        assert response.status_code == 200
        assert response.json() == {"sent": 2, "skipped": 0}
        assert sorted(e.recipient for e in email_adapter.sent_emails) == [
            "one@example.com",
            "two@example.com",
        ]
        email = email_adapter.get_emails_to("one@example.com")[0]
        assert email.subject == ISSUE["title"]
        assert email.body_html == ISSUE["content"]["html"]
        assert email.body_text == ISSUE["content"]["text"]

    def test_confirmed_subscriber_with_invalid_stored_email_is_skipped(
        self,
        client: TestClient,
        email_adapter: DevEmailAdapter,
        test_db_path: str,
        auth,
    ) -> None:
        create_confirmed_subscriber(client, email_adapter, "ok@example.com")
        conn = sqlite3.connect(test_db_path)
        conn.execute(
            "INSERT INTO subscriptions (id, email, name, subscribed_at, status) "
            "VALUES (?, 'not-an-email', 'legacy', '2020-01-01T00:00:00+00:00', 'CONFIRMED')",
            (str(uuid4()),),
        )
        conn.commit()
        conn.close()
        email_adapter.clear()

        response = client.post("/newsletter", json=ISSUE, auth=auth)

        assert response.status_code == 200
        assert response.json() == {"sent": 1, "skipped": 1}
        assert [e.recipient for e in email_adapter.sent_emails] == ["ok@example.com"]

    def test_delivery_failure_returns_500_and_stops(
        self, client: TestClient, email_adapter: DevEmailAdapter, auth
    ) -> None:
        for i in range(3):
            create_confirmed_subscriber(client, email_adapter, f"r{i}@example.com")
        email_adapter.clear()
        email_adapter.fail_with = "provider unavailable"
        email_adapter.fail_after = 1

        response = client.post("/newsletter", json=ISSUE, auth=auth)

        assert response.status_code == 500
        assert response.content == b""
        assert email_adapter.attempts == 2
        assert email_adapter.email_count == 1

    @pytest.mark.parametrize(
        "body",
        [
            {"content": {"text": "plain", "html": "<p>html</p>"}},
            {"title": "Newsletter!"},
            {"title": "Newsletter!", "content": {"text": "plain"}},
            {"title": "Newsletter!", "content": {"html": "<p>html</p>"}},
        ],
    )
    def test_newsletters_returns_400_for_invalid_data(
        self, client: TestClient, email_adapter: DevEmailAdapter, auth, body
    ) -> None:
        response = client.post("/newsletter", json=body, auth=auth)

        assert response.status_code == 400
        assert email_adapter.attempts == 0

    def test_missing_title_400_names_the_field(self, client: TestClient, auth) -> None:
        body = {"content": ISSUE["content"]}

        response = client.post("/newsletter", json=body, auth=auth)

        assert response.status_code == 400
        assert response.json() == {"detail": "title: Field required"}


class TestPublishAuthentication:
    def test_requests_missing_authorization_are_rejected(
        self, client: TestClient, email_adapter: DevEmailAdapter
    ) -> None:
        response = client.post("/newsletter", json=ISSUE)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == 'Basic realm="publish"'
        assert response.headers["WWW-Authenticate"] == PUBLISH_CHALLENGE
        assert email_adapter.attempts == 0

    def test_non_existing_user_is_rejected(self, client: TestClient, auth) -> None:
        response = client.post("/newsletter", json=ISSUE, auth=(str(uuid4()), "password"))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == PUBLISH_CHALLENGE

    def test_invalid_password_is_rejected(self, client: TestClient, auth) -> None:
        response = client.post("/newsletter", json=ISSUE, auth=(auth[0], "wrong-password"))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == PUBLISH_CHALLENGE

    def test_all_auth_failures_look_the_same(self, client: TestClient, auth) -> None:
        missing = client.post("/newsletter", json=ISSUE)
        wrong = client.post("/newsletter", json=ISSUE, auth=(auth[0], "nope"))
        unknown = client.post("/newsletter", json=ISSUE, auth=("nobody", "nope"))
        malformed = client.post(
            "/newsletter", json=ISSUE, headers={"Authorization": "Basic %%%"}
        )

        for response in (wrong, unknown, malformed):
            assert response.status_code == missing.status_code == 401
            assert response.content == missing.content
            assert response.headers["WWW-Authenticate"] == missing.headers["WWW-Authenticate"]
