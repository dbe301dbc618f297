from __future__ import annotations

from typing import Optional

import httpx

from gatekeeper.domain.entities import OutgoingEmail
from gatekeeper.domain.ports.mailer import MailerPort


class HttpMailer(MailerPort):
    """Posts messages to an HTTP mail relay: POST {base_url}/send {to, subject, body}."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._url = base_url.rstrip("/") + (
            send_path if send_path.startswith("/") else f"/{send_path}"
        )
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, message: OutgoingEmail) -> None:
        payload = {"to": message.to, "subject": message.subject, "body": message.body}
        try:
            resp = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise RuntimeError(f"mail relay HTTP error: {e}") from e
        if not resp.is_success:
            raise RuntimeError(
                f"mail relay responded {resp.status_code}: {resp.text[:200]}"
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
