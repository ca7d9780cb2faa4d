"""Pytest configuration and shared fixtures.

Tests run against a throwaway SQLite database (via aiosqlite) and replace the
LLM, email provider and feed fetchers with in-memory fakes.
"""

from __future__ import annotations

import os

# Settings are validated at import time, so the environment must be complete
# before anything from creatorpulse is imported.
os.environ.setdefault("POSTGRES_USER", "creatorpulse")
os.environ.setdefault("POSTGRES_PASSWORD", "creatorpulse")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "creatorpulse")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("RESEND_API_KEY", "re_test")
os.environ.setdefault("JWT_SECRET_KEY", "Test-Secret-Key-For-CreatorPulse-0123456789!")
os.environ.setdefault("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URL"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"

from collections.abc import AsyncIterator, Callable  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from creatorpulse.db import models  # noqa: E402,F401
from creatorpulse.db.base import Base  # noqa: E402
from creatorpulse.db.models.source import SourceType  # noqa: E402
from creatorpulse.db.session import make_session_maker  # noqa: E402
from creatorpulse.fetchers.base import FetchedItem, SourceDescriptor, SourceFetcher  # noqa: E402
from creatorpulse.llm.client import LLMClient  # noqa: E402
from creatorpulse.mail.sender import EmailSender  # noqa: E402
from creatorpulse.main import create_app  # noqa: E402


class FakeLLMClient(LLMClient):
    """Returns queued responses in order, then `default_response`; records every call."""

    def __init__(self) -> None:
        self.responses: list[str] = []
        self.default_response = "[]"
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []
        self.temperatures: list[float] = []

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append((system_prompt, user_prompt))
        self.temperatures.append(temperature)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return self.default_response


class FakeEmailSender(EmailSender):
    """Accepts (or rejects) every email according to `succeed`."""

    def __init__(self) -> None:
        self.succeed = True
        self.sent: list[tuple[str, str | None, str]] = []

    async def send_newsletter(self, email: str, name: str | None, content: str) -> bool:
        self.sent.append((email, name, content))
        return self.succeed


class StaticFetcher(SourceFetcher):
    """Serves canned items (or raises a canned error) per source handle."""

    source_type = SourceType.FEED

    def __init__(self) -> None:
        self.items_by_handle: dict[str, list[FetchedItem] | Exception] = {}
        self.calls: list[SourceDescriptor] = []

    async def fetch(self, source: SourceDescriptor) -> list[FetchedItem]:
        self.calls.append(source)
        result = self.items_by_handle.get(source.handle, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


def make_fetched_item(native_id: str, **overrides: Any) -> FetchedItem:
    fields: dict[str, Any] = {
        "native_id": native_id,
        "title": f"Title {native_id}",
        "content": f"Body of {native_id}",
        "url": f"https://example.com/{native_id}",
        "published_at": datetime.now(UTC),
        "engagement_metrics": {},
    }
    fields.update(overrides)
    return FetchedItem(**fields)


@pytest.fixture
def fetched_item_factory() -> Callable[..., FetchedItem]:
    return make_fetched_item


@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """File-backed SQLite engine with savepoints and foreign keys enabled."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'creatorpulse.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        # Let SQLAlchemy emit BEGIN itself so SAVEPOINT works.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_maker(test_engine)


@pytest_asyncio.fixture
async def db_session(
    test_session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with test_session_maker() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_email() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def static_fetcher() -> StaticFetcher:
    return StaticFetcher()


@pytest.fixture
def fetchers(static_fetcher: StaticFetcher) -> dict[SourceType, SourceFetcher]:
    return {source_type: static_fetcher for source_type in SourceType}


@pytest.fixture
def app(
    test_session_maker: async_sessionmaker[AsyncSession],
    fake_llm: FakeLLMClient,
    fake_email: FakeEmailSender,
    fetchers: dict[SourceType, SourceFetcher],
) -> FastAPI:
    return create_app(
        session_maker=test_session_maker,
        llm_client=fake_llm,
        email_sender=fake_email,
        fetchers=fetchers,
    )


@pytest_asyncio.fixture
async def async_http_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Creates an async http client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def signup(async_http_client: AsyncClient) -> Callable[..., Any]:
    """Create an account through the API and return `(user, auth headers)`."""

    async def _signup(
        email: str = "creator@example.com", password: str = "Password123!", **extra: Any
    ) -> tuple[dict[str, Any], dict[str, str]]:
        response = await async_http_client.post(
            "/api/auth/signup", json={"email": email, "password": password, **extra}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        headers = {"Authorization": f"Bearer {body['session']['access_token']}"}
        return body["user"], headers

    return _signup
