from __future__ import annotations

from typing import Protocol

from gatekeeper.domain.entities import OutgoingEmail


class MailerPort(Protocol):
    async def send(self, message: OutgoingEmail) -> None:
        """Hand the message to the mail relay. Raise RuntimeError on failure."""
