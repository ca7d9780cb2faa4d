"""Newsletter composition, delivery, and stats."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from creatorpulse.db.models.feedback import Feedback, FeedbackRating
from creatorpulse.db.models.newsletter import Newsletter
from creatorpulse.db.models.user import User
from creatorpulse.llm.client import LLMClient, LLMServiceError
from creatorpulse.llm.prompts import get_newsletter_prompt, get_newsletter_system_prompt
from creatorpulse.mail.sender import EmailSender
from creatorpulse.services.content_service import ContentService
from creatorpulse.services.errors import ResourceNotFoundError, ServiceError
from creatorpulse.services.style_service import StyleExtractor
from creatorpulse.services.trend_service import TrendService
from creatorpulse.services.writing_sample_service import WritingSampleService

logger = logging.getLogger(__name__)

CONTENT_WINDOW_DAYS = 7
MAX_PROMPT_TRENDS = 5
MAX_PROMPT_ITEMS = 5


class NewsletterNotFoundError(ResourceNotFoundError):
    def __init__(self, newsletter_id: int) -> None:
        super().__init__("Newsletter", newsletter_id)


class NewsletterAlreadySentError(ServiceError):
    def __init__(self, newsletter_id: int) -> None:
        super().__init__(
            f"Newsletter {newsletter_id} has already been sent", "newsletter_already_sent"
        )


class NewsletterGenerationError(ServiceError):
    """Raised when any stage of composing a draft fails; nothing is stored."""


@dataclass(frozen=True)
class NewsletterStats:
    total: int
    sent: int
    drafts: int
    positive_feedback: int
    negative_feedback: int
    # Not tracked yet; always zero.
    open_rate: float = 0
    click_rate: float = 0


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the named zone, or UTC when the name is missing or unknown."""
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using UTC", name)
        return UTC


def format_current_date(tz_name: str | None, now: datetime | None = None) -> str:
    """Format today's date in the user's zone, e.g. `Monday, October 19, 2026`."""
    moment = (now or datetime.now(UTC)).astimezone(resolve_timezone(tz_name))
    return f"{moment:%A}, {moment:%B} {moment.day}, {moment.year}"


class NewsletterService:
    """Composes drafts from trends, recent content and writing style; delivers them by email."""

    def __init__(
        self,
        session: AsyncSession,
        llm_client: LLMClient,
        email_sender: EmailSender,
        *,
        content_service: ContentService,
        trend_service: TrendService,
        style_extractor: StyleExtractor,
        sample_service: WritingSampleService,
    ) -> None:
        self._session = session
        self._llm_client = llm_client
        self._email_sender = email_sender
        self._content_service = content_service
        self._trend_service = trend_service
        self._style_extractor = style_extractor
        self._sample_service = sample_service

    async def generate_newsletter(self, user_id: int, *, now: datetime | None = None) -> Newsletter:
        """Compose and store a draft for the user.

        Raises:
            NewsletterGenerationError: When loading inputs, generating, or storing fails.
        """
        try:
            return await self._compose(user_id, now)
        except NewsletterGenerationError:
            raise
        except (LLMServiceError, ServiceError) as exc:
            raise NewsletterGenerationError(str(exc), exc.error_code) from exc
        except SQLAlchemyError as exc:
            raise NewsletterGenerationError(
                "Could not store the newsletter draft.", "newsletter_storage_failed"
            ) from exc

    async def _compose(self, user_id: int, now: datetime | None) -> Newsletter:
        user = await self._session.get(User, user_id)
        if user is None:
            raise NewsletterGenerationError(f"User {user_id} not found", "user_not_found")

        items = await self._content_service.get_recent_content(
            user_id, CONTENT_WINDOW_DAYS, now=now
        )
        trends = await self._trend_service.get_latest_trends(user_id, MAX_PROMPT_TRENDS)
        samples = await self._sample_service.list_sample_texts(user_id)
        style = await self._style_extractor.extract_writing_style(samples)

        system_prompt = get_newsletter_system_prompt(
            style.samples,
            style.tone,
            style.structure,
            format_current_date(user.timezone, now),
        )
        user_prompt = get_newsletter_prompt(
            [f"- {trend.title}: {trend.summary}" for trend in trends[:MAX_PROMPT_TRENDS]],
            [
                f"- {item.title}: {(item.content or '')[:200]}..."
                for item in items[:MAX_PROMPT_ITEMS]
            ],
        )
        content = await self._llm_client.generate(
            system_prompt, user_prompt, temperature=0.7, max_tokens=2000
        )

        newsletter = Newsletter(user_id=user_id, content=content)
        self._session.add(newsletter)
        await self._session.flush()
        await self._session.refresh(newsletter)
        logger.info(
            "Generated newsletter draft",
            extra={"user_id": user_id, "newsletter_id": newsletter.id, "trends": len(trends)},
        )
        return newsletter

    async def send_newsletter(self, newsletter_id: int, user_id: int | None = None) -> bool:
        """Email a draft to its owner and mark it sent.

        `sent_at` is stamped only after the sender confirms delivery. Returns
        whether the email was accepted.

        Raises:
            NewsletterNotFoundError: If the newsletter does not exist (for this owner).
            NewsletterAlreadySentError: If it was delivered before.
        """
        stmt = (
            select(Newsletter)
            .options(selectinload(Newsletter.user))
            .where(Newsletter.id == newsletter_id)
        )
        if user_id is not None:
            stmt = stmt.where(Newsletter.user_id == user_id)
        newsletter = (await self._session.execute(stmt)).scalar_one_or_none()
        if newsletter is None:
            raise NewsletterNotFoundError(newsletter_id)
        if newsletter.is_sent:
            raise NewsletterAlreadySentError(newsletter_id)

        owner: User = newsletter.user
        sent = await self._email_sender.send_newsletter(owner.email, owner.name, newsletter.content)
        if not sent:
            logger.warning("Newsletter delivery failed", extra={"newsletter_id": newsletter_id})
            return False

        try:
            async with self._session.begin_nested():
                newsletter.sent_at = datetime.now(UTC)
                await self._session.flush()
        except SQLAlchemyError:
            logger.exception(
                "Newsletter delivered but could not be marked sent",
                extra={"newsletter_id": newsletter_id},
            )
        return True

    async def get_newsletter_stats(self, user_id: int) -> NewsletterStats:
        counts = await self._session.execute(
            select(func.count(Newsletter.id), func.count(Newsletter.sent_at)).where(
                Newsletter.user_id == user_id
            )
        )
        total, sent = counts.one()

        ratings = await self._session.execute(
            select(Feedback.rating, func.count(Feedback.id))
            .join(Newsletter, Feedback.newsletter_id == Newsletter.id)
            .where(Newsletter.user_id == user_id)
            .group_by(Feedback.rating)
        )
        tally = {rating: count for rating, count in ratings.all()}

        return NewsletterStats(
            total=total,
            sent=sent,
            drafts=total - sent,
            positive_feedback=tally.get(FeedbackRating.POSITIVE.value, 0),
            negative_feedback=tally.get(FeedbackRating.NEGATIVE.value, 0),
        )

    async def list_newsletters(self, user_id: int) -> list[Newsletter]:
        result = await self._session.execute(
            select(Newsletter)
            .where(Newsletter.user_id == user_id)
            .order_by(Newsletter.created_at.desc(), Newsletter.id.desc())
        )
        return list(result.scalars().all())

    async def get_newsletter(self, newsletter_id: int, user_id: int) -> Newsletter:
        result = await self._session.execute(
            select(Newsletter).where(Newsletter.id == newsletter_id, Newsletter.user_id == user_id)
        )
        newsletter = result.scalar_one_or_none()
        if newsletter is None:
            raise NewsletterNotFoundError(newsletter_id)
        return newsletter

    async def update_newsletter(self, newsletter_id: int, user_id: int, content: str) -> Newsletter:
        newsletter = await self.get_newsletter(newsletter_id, user_id)
        newsletter.content = content
        await self._session.flush()
        return newsletter

    async def delete_newsletter(self, newsletter_id: int, user_id: int) -> None:
        newsletter = await self.get_newsletter(newsletter_id, user_id)
        await self._session.delete(newsletter)
        await self._session.flush()


def newsletter_service_factory_provider(
    llm_client: LLMClient,
    email_sender: EmailSender,
    content_factory: Callable[[AsyncSession], ContentService],
) -> Callable[[AsyncSession], NewsletterService]:
    style_extractor = StyleExtractor(llm_client)

    def factory(session: AsyncSession) -> NewsletterService:
        content_service = content_factory(session)
        return NewsletterService(
            session,
            llm_client,
            email_sender,
            content_service=content_service,
            trend_service=TrendService(session, llm_client, content_service),
            style_extractor=style_extractor,
            sample_service=WritingSampleService(session),
        )

    return factory
