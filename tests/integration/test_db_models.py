"""Integration tests for database models.

These tests verify:
- CASCADE delete behavior
- Check and uniqueness constraints
- Default values
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import Text, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.db.models import (
    ContentItem,
    Feedback,
    Newsletter,
    Source,
    Trend,
    User,
    WritingSample,
)


async def _count(session: AsyncSession, model: type) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestDefaults:
    """Test column defaults."""

    @pytest.mark.asyncio
    async def test_user_defaults(self, db_session: AsyncSession) -> None:
        """Test that new users start in UTC with token version 0."""
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)

        assert user.timezone == "UTC"
        assert user.token_version == 0
        assert user.created_at is not None

    @pytest.mark.asyncio
    async def test_newsletter_starts_as_draft(self, db_session: AsyncSession) -> None:
        """Test that a newsletter without sent_at is a draft."""
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.flush()
        newsletter = Newsletter(user_id=user.id, content="Hi")
        db_session.add(newsletter)
        await db_session.commit()
        await db_session.refresh(newsletter)

        assert newsletter.sent_at is None
        assert newsletter.is_sent is False


    @pytest.mark.asyncio
    async def test_content_url_has_no_length_cap(self, db_session: AsyncSession) -> None:
        """Test that entry links of any length are stored unchanged."""
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.flush()
        source = Source(user_id=user.id, type="feed", handle="long")
        db_session.add(source)
        await db_session.flush()
        url = "https://example.test/" + "a" * 5000
        db_session.add(
            ContentItem(
                id="long-url",
                source_id=source.id,
                url=url,
                published_at=datetime.now(UTC),
            )
        )
        await db_session.commit()

        stored = await db_session.get(ContentItem, "long-url")

        assert isinstance(ContentItem.__table__.c.url.type, Text)
        assert stored is not None
        assert stored.url == url


class TestConstraints:
    """Test database constraints."""

    @pytest.mark.asyncio
    async def test_email_is_unique(self, db_session: AsyncSession) -> None:
        """Test that two users cannot share an email."""
        db_session.add(User(email="same@example.com", hashed_password="hashed"))
        await db_session.commit()

        db_session.add(User(email="same@example.com", hashed_password="hashed"))
        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_source_type_is_checked(self, db_session: AsyncSession) -> None:
        """Test that unknown source types are rejected by the database."""
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.flush()

        db_session.add(Source(user_id=user.id, type="podcast", handle="x"))
        with pytest.raises(IntegrityError):
            await db_session.flush()

    @pytest.mark.asyncio
    async def test_feedback_rating_is_checked(self, db_session: AsyncSession) -> None:
        """Test that ratings other than positive/negative are rejected."""
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.flush()
        newsletter = Newsletter(user_id=user.id, content="Hi")
        db_session.add(newsletter)
        await db_session.flush()

        db_session.add(Feedback(newsletter_id=newsletter.id, user_id=user.id, rating="meh"))
        with pytest.raises(IntegrityError):
            await db_session.flush()


class TestCascadeDelete:
    """Test that deleting a user removes everything they own."""

    @pytest.mark.asyncio
    async def test_deleting_user_removes_owned_rows(self, db_session: AsyncSession) -> None:
        """Test CASCADE from users through sources, newsletters and feedback."""
        # Arrange
        user = User(email="a@example.com", hashed_password="hashed")
        db_session.add(user)
        await db_session.flush()
        source = Source(user_id=user.id, type="feed", handle="blog")
        newsletter = Newsletter(user_id=user.id, content="Hi")
        db_session.add_all([source, newsletter])
        await db_session.flush()
        db_session.add_all(
            [
                ContentItem(
                    id="item-1",
                    source_id=source.id,
                    title="Post",
                    published_at=datetime.now(UTC),
                    engagement_metrics={},
                ),
                Trend(user_id=user.id, title="Trend", summary=""),
                WritingSample(user_id=user.id, content="Sample"),
                Feedback(newsletter_id=newsletter.id, user_id=user.id, rating="positive"),
            ]
        )
        await db_session.commit()

        # Act
        await db_session.execute(delete(User).where(User.id == user.id))
        await db_session.commit()

        # Assert
        for model in (Source, ContentItem, Trend, WritingSample, Newsletter, Feedback):
            assert await _count(db_session, model) == 0, model.__name__
