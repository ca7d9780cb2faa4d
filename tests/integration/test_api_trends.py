"""Integration tests for the trend endpoints."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from creatorpulse.api.schemas import TrendListResponse
from creatorpulse.llm.client import LLMUnavailableError


async def _user_with_content(
    client: AsyncClient,
    signup: Callable[..., Any],
    static_fetcher: Any,
    fetched_item_factory: Callable[..., Any],
) -> dict[str, str]:
    _, headers = await signup()
    await client.post("/api/sources", json={"type": "video", "handle": "chan"}, headers=headers)
    static_fetcher.items_by_handle["chan"] = [
        fetched_item_factory("v1"),
        fetched_item_factory("v2"),
    ]
    await client.post("/api/sources/refresh", headers=headers)
    return headers


class TestTrendsApi:
    """Test trend derivation and listing."""

    @pytest.mark.asyncio
    async def test_fetch_then_latest(
        self,
        async_http_client: AsyncClient,
        signup: Callable[..., Any],
        static_fetcher: Any,
        fetched_item_factory: Callable[..., Any],
        fake_llm: Any,
    ) -> None:
        """Test that derived trends are stored and served newest first."""
        # Arrange
        headers = await _user_with_content(
            async_http_client, signup, static_fetcher, fetched_item_factory
        )
        fake_llm.responses.append(
            json.dumps(
                [
                    {"title": "Short-form video", "summary": "Up.", "keywords": ["video"]},
                    {"title": "Live coding", "summary": "Also up.", "keywords": ["live"]},
                ]
            )
        )

        # Act
        fetched = await async_http_client.post("/api/trends/fetch", headers=headers)
        latest = await async_http_client.get("/api/trends/latest?limit=1", headers=headers)
        listed = await async_http_client.get("/api/trends", headers=headers)

        # Assert
        assert fetched.status_code == status.HTTP_201_CREATED
        trends = TrendListResponse.model_validate(fetched.json()).trends
        assert [t.title for t in trends] == ["Short-form video", "Live coding"]
        assert all(t.id is not None for t in trends)
        assert len(latest.json()["trends"]) == 1
        assert len(listed.json()["trends"]) == 2

    @pytest.mark.asyncio
    async def test_fetch_without_content_returns_empty(
        self, async_http_client: AsyncClient, signup: Callable[..., Any], fake_llm: Any
    ) -> None:
        """Test that a user with no recent content gets no trends and no generator call."""
        _, headers = await signup()

        response = await async_http_client.post("/api/trends/fetch", headers=headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {"trends": []}
        assert fake_llm.calls == []

    @pytest.mark.asyncio
    async def test_generator_failure_returns_error(
        self,
        async_http_client: AsyncClient,
        signup: Callable[..., Any],
        static_fetcher: Any,
        fetched_item_factory: Callable[..., Any],
        fake_llm: Any,
    ) -> None:
        """Test that an unreachable generator surfaces as a 500 with its error code."""
        # Arrange
        headers = await _user_with_content(
            async_http_client, signup, static_fetcher, fetched_item_factory
        )
        fake_llm.error = LLMUnavailableError("LLM service unreachable. Try again shortly.")

        # Act
        response = await async_http_client.post("/api/trends/fetch", headers=headers)

        # Assert
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "llm_unavailable"
        listed = await async_http_client.get("/api/trends", headers=headers)
        assert listed.json() == {"trends": []}

    @pytest.mark.asyncio
    async def test_storage_failure_still_returns_trends(
        self,
        async_http_client: AsyncClient,
        signup: Callable[..., Any],
        static_fetcher: Any,
        fetched_item_factory: Callable[..., Any],
        fake_llm: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that trends are served unsaved when they cannot be stored."""
        # Arrange
        headers = await _user_with_content(
            async_http_client, signup, static_fetcher, fetched_item_factory
        )
        fake_llm.responses.append("not json")

        async def failing_flush(*args: Any, **kwargs: Any) -> None:
            raise OperationalError("INSERT INTO trends", {}, Exception("disk I/O error"))

        monkeypatch.setattr(AsyncSession, "flush", failing_flush)

        # Act
        response = await async_http_client.post("/api/trends/fetch", headers=headers)

        # Assert
        assert response.status_code == status.HTTP_201_CREATED
        trends = TrendListResponse.model_validate(response.json()).trends
        assert len(trends) == 2
        assert all(t.id is None and t.title and t.created_at for t in trends)
        listed = await async_http_client.get("/api/trends", headers=headers)
        assert listed.json() == {"trends": []}

    @pytest.mark.asyncio
    async def test_latest_limit_is_validated(
        self, async_http_client: AsyncClient, signup: Callable[..., Any]
    ) -> None:
        """Test that the limit must be positive."""
        _, headers = await signup()

        response = await async_http_client.get("/api/trends/latest?limit=0", headers=headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"].startswith("limit: ")
