"""
Postmark-style HTTP Email Adapter.

Sends one message per call to `POST {base_url}/email` with a JSON body
`{From, To, Subject, HtmlBody, TextBody}` and the provider server token in
the `X-Postmark-Server-Token` header.

Key behaviors:
- Bounded timeout (10 seconds by default)
- Any 2xx status is success
- Non-2xx or network failure raises EmailSendError, httpx error chained
- No retries, no batching
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.core.ports.email import EmailResult, EmailSendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
SERVER_TOKEN_HEADER = "X-Postmark-Server-Token"


class PostmarkEmailClient:
    """
    Delivery provider client.

    Implements EmailPort. Pass an `http_client` to share a connection pool
    (or a mock transport in tests); otherwise one is created and owned here.
    """

    def __init__(
        self,
        base_url: str,
        sender: str,
        authorization_token: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self.timeout = httpx.Timeout(timeout_seconds)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

    def __repr__(self) -> str:
        return f"PostmarkEmailClient(base_url={self.base_url!r}, sender={self.sender!r})"

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        url = f"{self.base_url}/email"
        payload = {
            "From": self.sender,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": body_html,
            "TextBody": body_text,
        }
        headers = {SERVER_TOKEN_HEADER: self._authorization_token}

        try:
            response = await self._client.post(
                url, json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise EmailSendError(
                recipient, f"provider responded with status {status_code}", status_code
            ) from e
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, str(e) or type(e).__name__) from e

        message_id = _message_id(response)
        logger.debug("Provider accepted message %s", message_id)
        return EmailResult.success(recipient, message_id)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()


def _message_id(response: httpx.Response) -> str | None:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("MessageID") is not None:
        return str(body["MessageID"])
    return None
