"""Integration tests for the scheduled batch jobs."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from creatorpulse.db.models import ContentItem, Newsletter, Source, Trend, User
from creatorpulse.jobs.tasks import (
    generate_and_send_newsletters,
    prune_old_content,
    prune_old_trends,
    refresh_content_and_trends,
)
from creatorpulse.llm.client import LLMUnavailableError
from creatorpulse.main import build_services
from creatorpulse.services.content_service import make_content_id


@pytest.fixture
def services(fake_llm, fake_email, fetchers):
    return build_services(fake_llm, fake_email, fetchers)


async def _seed_users(
    session_maker: async_sessionmaker[AsyncSession], *handles: str | None
) -> list[int]:
    """Create one user per entry; a handle gives the user a feed source with that handle."""
    ids: list[int] = []
    async with session_maker() as session, session.begin():
        for index, handle in enumerate(handles):
            user = User(email=f"user{index}@example.com", hashed_password="x")
            session.add(user)
            await session.flush()
            if handle is not None:
                session.add(Source(user_id=user.id, type="feed", handle=handle))
            ids.append(user.id)
    return ids


async def _all(session_maker: async_sessionmaker[AsyncSession], model) -> list:
    async with session_maker() as session:
        return list((await session.execute(select(model))).scalars().all())


class TestRefreshContentAndTrends:
    @pytest.mark.asyncio
    async def test_every_user_gets_content_and_trends(
        self, test_session_maker, services, fake_llm, static_fetcher, fetched_item_factory
    ) -> None:
        first, second = await _seed_users(test_session_maker, "alpha", "beta")
        static_fetcher.items_by_handle["alpha"] = [fetched_item_factory("a1")]
        static_fetcher.items_by_handle["beta"] = [fetched_item_factory("b1")]
        fake_llm.default_response = json.dumps([{"title": "Agents", "keywords": ["ai"]}])

        report = await refresh_content_and_trends(test_session_maker, services)

        assert [(o.key, o.value) for o in report.succeeded] == [(first, 1), (second, 1)]
        assert report.failed == []
        assert len(await _all(test_session_maker, ContentItem)) == 2
        assert {trend.user_id for trend in await _all(test_session_maker, Trend)} == {
            first,
            second,
        }

    @pytest.mark.asyncio
    async def test_one_failing_user_does_not_stop_the_rest(
        self, test_session_maker, services, fake_llm, static_fetcher, fetched_item_factory
    ) -> None:
        failing, quiet = await _seed_users(test_session_maker, "alpha", None)
        static_fetcher.items_by_handle["alpha"] = [fetched_item_factory("a1")]
        fake_llm.error = LLMUnavailableError("LLM service unreachable. Try again shortly.")

        report = await refresh_content_and_trends(test_session_maker, services)

        assert [o.key for o in report.failed] == [failing]
        assert [(o.key, o.value) for o in report.succeeded] == [(quiet, 0)]
        # The failed user's transaction is rolled back as a whole.
        assert await _all(test_session_maker, ContentItem) == []


class TestGenerateAndSendNewsletters:
    @pytest.mark.asyncio
    async def test_newsletters_are_generated_and_sent(
        self, test_session_maker, services, fake_llm, fake_email
    ) -> None:
        await _seed_users(test_session_maker, None, None)
        fake_llm.default_response = "Weekly digest"

        report = await generate_and_send_newsletters(test_session_maker, services)

        assert report.values() == [True, True]
        assert [email for email, _, _ in fake_email.sent] == [
            "user0@example.com",
            "user1@example.com",
        ]
        newsletters = await _all(test_session_maker, Newsletter)
        assert len(newsletters) == 2
        assert all(newsletter.sent_at is not None for newsletter in newsletters)

    @pytest.mark.asyncio
    async def test_draft_survives_failed_delivery(
        self, test_session_maker, services, fake_llm, fake_email
    ) -> None:
        await _seed_users(test_session_maker, None)
        fake_llm.default_response = "Weekly digest"
        fake_email.succeed = False

        report = await generate_and_send_newsletters(test_session_maker, services)

        assert report.values() == [False]
        [newsletter] = await _all(test_session_maker, Newsletter)
        assert newsletter.content == "Weekly digest"
        assert newsletter.sent_at is None

    @pytest.mark.asyncio
    async def test_generation_failure_is_reported_per_user(
        self, test_session_maker, services, fake_llm, fake_email
    ) -> None:
        user_ids = await _seed_users(test_session_maker, None, None)
        fake_llm.error = LLMUnavailableError("LLM rate limit exceeded. Try again later.")

        report = await generate_and_send_newsletters(test_session_maker, services)

        assert [o.key for o in report.failed] == user_ids
        assert fake_email.sent == []
        assert await _all(test_session_maker, Newsletter) == []


class TestRetentionJobs:
    @pytest.mark.asyncio
    async def test_prune_jobs_delete_expired_rows(self, test_session_maker, services) -> None:
        [user_id] = await _seed_users(test_session_maker, "alpha")
        now = datetime.now(UTC)
        async with test_session_maker() as session, session.begin():
            source_id = (await session.execute(select(Source.id))).scalar_one()
            session.add_all(
                [
                    ContentItem(
                        id=make_content_id(source_id, native_id),
                        source_id=source_id,
                        title=native_id,
                        published_at=published_at,
                        engagement_metrics={},
                    )
                    for native_id, published_at in (
                        ("ancient", now - timedelta(days=45)),
                        ("current", now - timedelta(days=2)),
                    )
                ]
            )
            session.add_all(
                [
                    Trend(
                        user_id=user_id,
                        title="stale",
                        summary="",
                        created_at=now - timedelta(days=9),
                    ),
                    Trend(user_id=user_id, title="fresh", summary="", created_at=now),
                ]
            )

        assert await prune_old_content(test_session_maker, services) == 1
        assert await prune_old_trends(test_session_maker, services) == 1
        assert [item.title for item in await _all(test_session_maker, ContentItem)] == ["current"]
        assert [trend.title for trend in await _all(test_session_maker, Trend)] == ["fresh"]
