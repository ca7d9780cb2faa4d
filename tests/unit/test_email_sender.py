"""Unit tests for the Resend email sender."""

from __future__ import annotations

import json

import httpx
import pytest

from creatorpulse.mail.sender import (
    NEWSLETTER_SUBJECT,
    ResendEmailSender,
    render_newsletter_html,
)

API_URL = "https://mail.test/emails"


def _sender(transport: httpx.MockTransport) -> tuple[ResendEmailSender, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=transport)
    sender = ResendEmailSender(
        "re_key", sender="Pulse <hi@pulse.test>", api_url=API_URL, client=client
    )
    return sender, client


@pytest.mark.asyncio
async def test_send_posts_newsletter_and_reports_success() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    sender, client = _sender(httpx.MockTransport(handler))
    async with client:
        sent = await sender.send_newsletter("reader@example.com", "Ada", "Hello\n\nBye <3")

    assert sent is True
    assert str(requests[0].url) == API_URL
    assert requests[0].headers["Authorization"] == "Bearer re_key"
    payload = json.loads(requests[0].content)
    assert payload["to"] == ["reader@example.com"]
    assert payload["from"] == "Pulse <hi@pulse.test>"
    assert payload["subject"] == NEWSLETTER_SUBJECT
    assert "Bye &lt;3" in payload["html"]


@pytest.mark.asyncio
async def test_send_returns_false_when_provider_rejects() -> None:
    sender, client = _sender(
        httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "bad"}))
    )
    async with client:
        assert await sender.send_newsletter("reader@example.com", None, "Hi") is False


@pytest.mark.asyncio
async def test_send_returns_false_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    sender, client = _sender(httpx.MockTransport(handler))
    async with client:
        assert await sender.send_newsletter("reader@example.com", None, "Hi") is False


def test_render_html_keeps_paragraphs_and_line_breaks() -> None:
    html = render_newsletter_html("Ada & co", "Line one\nLine two\n\nNext <b>para</b>")

    assert html.startswith("<p>Hi Ada &amp; co,</p>")
    assert "<p>Line one<br>Line two</p>" in html
    assert "<p>Next &lt;b&gt;para&lt;/b&gt;</p>" in html
