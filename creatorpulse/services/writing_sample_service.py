from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.core.prompt_sanitizer import sanitize_writing_sample
from creatorpulse.db.models.writing_sample import WritingSample
from creatorpulse.services.errors import ResourceNotFoundError


class WritingSampleNotFoundError(ResourceNotFoundError):
    def __init__(self, sample_id: int) -> None:
        super().__init__("Writing sample", sample_id)


class WritingSampleService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_samples(self, user_id: int) -> list[WritingSample]:
        result = await self._session.execute(
            select(WritingSample)
            .where(WritingSample.user_id == user_id)
            .order_by(WritingSample.created_at.desc(), WritingSample.id.desc())
        )
        return list(result.scalars().all())

    async def list_sample_texts(self, user_id: int) -> list[str]:
        return [sample.content for sample in await self.list_samples(user_id)]

    async def create_sample(self, user_id: int, content: str) -> WritingSample:
        """Store a writing sample.

        Raises:
            PromptValidationError: If the text is empty or unsafe to embed in prompts.
        """
        sample = WritingSample(user_id=user_id, content=sanitize_writing_sample(content))
        self._session.add(sample)
        await self._session.flush()
        await self._session.refresh(sample)
        return sample

    async def delete_sample(self, sample_id: int, user_id: int) -> None:
        result = await self._session.execute(
            select(WritingSample).where(
                WritingSample.id == sample_id, WritingSample.user_id == user_id
            )
        )
        sample = result.scalar_one_or_none()
        if sample is None:
            raise WritingSampleNotFoundError(sample_id)
        await self._session.delete(sample)
        await self._session.flush()


def writing_sample_service_factory_provider() -> Callable[[AsyncSession], WritingSampleService]:
    def factory(session: AsyncSession) -> WritingSampleService:
        return WritingSampleService(session)

    return factory
