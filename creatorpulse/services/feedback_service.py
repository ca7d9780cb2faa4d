from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.db.models.feedback import Feedback, FeedbackRating
from creatorpulse.db.models.newsletter import Newsletter
from creatorpulse.services.errors import ResourceNotFoundError
from creatorpulse.services.newsletter_service import NewsletterNotFoundError


class FeedbackNotFoundError(ResourceNotFoundError):
    def __init__(self, feedback_id: int) -> None:
        super().__init__("Feedback", feedback_id)


class FeedbackService:
    """Ratings on the caller's newsletters. Several entries per newsletter are allowed."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _ensure_newsletter_owned(self, newsletter_id: int, user_id: int) -> None:
        result = await self._session.execute(
            select(Newsletter.id).where(
                Newsletter.id == newsletter_id, Newsletter.user_id == user_id
            )
        )
        if result.scalar_one_or_none() is None:
            raise NewsletterNotFoundError(newsletter_id)

    async def list_for_newsletter(self, newsletter_id: int, user_id: int) -> list[Feedback]:
        await self._ensure_newsletter_owned(newsletter_id, user_id)
        result = await self._session.execute(
            select(Feedback)
            .where(Feedback.newsletter_id == newsletter_id, Feedback.user_id == user_id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        )
        return list(result.scalars().all())

    async def get_feedback(self, feedback_id: int, user_id: int) -> Feedback:
        result = await self._session.execute(
            select(Feedback).where(Feedback.id == feedback_id, Feedback.user_id == user_id)
        )
        feedback = result.scalar_one_or_none()
        if feedback is None:
            raise FeedbackNotFoundError(feedback_id)
        return feedback

    async def create_feedback(
        self,
        user_id: int,
        newsletter_id: int,
        rating: FeedbackRating,
        comment: str | None = None,
    ) -> Feedback:
        await self._ensure_newsletter_owned(newsletter_id, user_id)
        feedback = Feedback(
            user_id=user_id, newsletter_id=newsletter_id, rating=str(rating), comment=comment
        )
        self._session.add(feedback)
        await self._session.flush()
        await self._session.refresh(feedback)
        return feedback

    async def update_feedback(
        self,
        feedback_id: int,
        user_id: int,
        *,
        rating: FeedbackRating | None = None,
        comment: str | None = None,
    ) -> Feedback:
        feedback = await self.get_feedback(feedback_id, user_id)
        if rating is not None:
            feedback.rating = str(rating)
        if comment is not None:
            feedback.comment = comment
        await self._session.flush()
        return feedback

    async def delete_feedback(self, feedback_id: int, user_id: int) -> None:
        feedback = await self.get_feedback(feedback_id, user_id)
        await self._session.delete(feedback)
        await self._session.flush()


def feedback_service_factory_provider() -> Callable[[AsyncSession], FeedbackService]:
    def factory(session: AsyncSession) -> FeedbackService:
        return FeedbackService(session)

    return factory
