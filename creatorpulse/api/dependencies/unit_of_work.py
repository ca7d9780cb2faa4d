"""Unit of Work: one transaction per request, session-scoped services from registry."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, cast

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from creatorpulse.services.auth_service import AuthService
from creatorpulse.services.content_service import ContentService
from creatorpulse.services.feedback_service import FeedbackService
from creatorpulse.services.newsletter_service import NewsletterService
from creatorpulse.services.source_service import SourceService
from creatorpulse.services.trend_service import TrendService
from creatorpulse.services.writing_sample_service import WritingSampleService


class UnitOfWork:
    """Holds the request's session and exposes session-scoped services from the registry."""

    def __init__(
        self, session: AsyncSession, services: Mapping[str, Callable[[AsyncSession], Any]]
    ) -> None:
        self._session = session
        self._services = services
        self._resolved: dict[str, Any] = {}

    def _resolve(self, key: str) -> Any:
        if key not in self._resolved:
            self._resolved[key] = self._services[key](self._session)
        return self._resolved[key]

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def auth_service(self) -> AuthService:
        """Session-scoped auth service."""
        return cast(AuthService, self._resolve("auth_service"))

    @property
    def source_service(self) -> SourceService:
        return cast(SourceService, self._resolve("source_service"))

    @property
    def content_service(self) -> ContentService:
        return cast(ContentService, self._resolve("content_service"))

    @property
    def trend_service(self) -> TrendService:
        return cast(TrendService, self._resolve("trend_service"))

    @property
    def newsletter_service(self) -> NewsletterService:
        return cast(NewsletterService, self._resolve("newsletter_service"))

    @property
    def feedback_service(self) -> FeedbackService:
        return cast(FeedbackService, self._resolve("feedback_service"))

    @property
    def writing_sample_service(self) -> WritingSampleService:
        return cast(WritingSampleService, self._resolve("writing_sample_service"))


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception."""
    session_maker: async_sessionmaker[AsyncSession] = request.app.state.session_maker
    async with session_maker() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
