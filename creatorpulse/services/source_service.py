from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.db.models.source import Source, SourceType
from creatorpulse.services.errors import ResourceNotFoundError


class SourceNotFoundError(ResourceNotFoundError):
    def __init__(self, source_id: int) -> None:
        super().__init__("Source", source_id)


class SourceService:
    """CRUD over the caller's configured sources."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_sources(self, user_id: int) -> list[Source]:
        result = await self._session.execute(
            select(Source)
            .where(Source.user_id == user_id)
            .order_by(Source.created_at.desc(), Source.id.desc())
        )
        return list(result.scalars().all())

    async def get_source(self, source_id: int, user_id: int) -> Source:
        result = await self._session.execute(
            select(Source).where(Source.id == source_id, Source.user_id == user_id)
        )
        source = result.scalar_one_or_none()
        if source is None:
            raise SourceNotFoundError(source_id)
        return source

    async def create_source(
        self, user_id: int, type: SourceType, handle: str, url: str | None = None
    ) -> Source:
        source = Source(user_id=user_id, type=str(type), handle=handle, url=url)
        self._session.add(source)
        await self._session.flush()
        await self._session.refresh(source)
        return source

    async def update_source(
        self,
        source_id: int,
        user_id: int,
        *,
        type: SourceType | None = None,
        handle: str | None = None,
        url: str | None = None,
    ) -> Source:
        """Apply the provided fields; omitted (None) fields keep their value."""
        source = await self.get_source(source_id, user_id)
        if type is not None:
            source.type = str(type)
        if handle is not None:
            source.handle = handle
        if url is not None:
            source.url = url
        await self._session.flush()
        return source

    async def delete_source(self, source_id: int, user_id: int) -> None:
        source = await self.get_source(source_id, user_id)
        await self._session.delete(source)
        await self._session.flush()


def source_service_factory_provider() -> Callable[[AsyncSession], SourceService]:
    def factory(session: AsyncSession) -> SourceService:
        return SourceService(session)

    return factory
