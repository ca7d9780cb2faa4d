from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod

import httpx

from creatorpulse.core.config import settings

logger = logging.getLogger(__name__)

NEWSLETTER_SUBJECT = "Your CreatorPulse newsletter"


class EmailSender(ABC):
    """Outbound email collaborator."""

    @abstractmethod
    async def send_newsletter(self, email: str, name: str | None, content: str) -> bool:
        """Deliver a newsletter; return True only when the provider accepted it."""
        raise NotImplementedError


def render_newsletter_html(name: str | None, content: str) -> str:
    """Escape the plain-text newsletter and keep its paragraph breaks."""
    greeting = f"<p>Hi {html.escape(name)},</p>" if name else ""
    paragraphs = [
        "<p>" + html.escape(block).replace("\n", "<br>") + "</p>"
        for block in content.split("\n\n")
        if block.strip()
    ]
    return greeting + "\n".join(paragraphs)


class ResendEmailSender(EmailSender):
    """Sends through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        sender: str | None = None,
        api_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or settings.resend_api_key
        self._sender = sender or settings.email_from
        self._api_url = api_url or settings.resend_api_url
        self._client = client

    async def send_newsletter(self, email: str, name: str | None, content: str) -> bool:
        payload = {
            "from": self._sender,
            "to": [email],
            "subject": NEWSLETTER_SUBJECT,
            "html": render_newsletter_html(name, content),
            "text": content,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            if self._client is not None:
                response = await self._client.post(self._api_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error(f"Email provider request failed. Error: {exc}")
            return False

        if response.is_success:
            logger.info("Newsletter email accepted", extra={"status_code": response.status_code})
            return True
        logger.error(
            "Email provider rejected newsletter",
            extra={"status_code": response.status_code, "body": response.text[:500]},
        )
        return False
