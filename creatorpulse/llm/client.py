from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Final

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from creatorpulse.core.config import settings

logger = logging.getLogger(__name__)


class LLMServiceError(Exception):
    """The text generator could not produce a completion."""

    error_code: str = "llm_error"

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code


class LLMUnavailableError(LLMServiceError):
    """Timeouts, rate limits and upstream outages; retrying later may succeed."""

    error_code = "llm_unavailable"


class LLMAuthenticationError(LLMServiceError):
    error_code = "llm_auth_failed"


class LLMInvalidResponseError(LLMServiceError):
    error_code = "llm_response_invalid"


# First match wins: APITimeoutError subclasses APIConnectionError, and the
# status errors subclass APIError.
_SDK_ERRORS: Final[tuple[tuple[type[Exception], type[LLMServiceError], str], ...]] = (
    (APITimeoutError, LLMUnavailableError, "LLM request timed out. Try again."),
    (APIConnectionError, LLMUnavailableError, "LLM service unreachable. Try again shortly."),
    (RateLimitError, LLMUnavailableError, "LLM rate limit exceeded. Try again later."),
    (AuthenticationError, LLMAuthenticationError, "LLM authentication failed."),
    (APIError, LLMUnavailableError, "LLM service error. Try again later."),
    (IndexError, LLMInvalidResponseError, "LLM returned an unexpected response."),
    (AttributeError, LLMInvalidResponseError, "LLM returned an unexpected response."),
)


def translate_sdk_error(error: Exception) -> LLMServiceError:
    for sdk_error, service_error, message in _SDK_ERRORS:
        if isinstance(error, sdk_error):
            logger.error("Completion failed with %s: %s", type(error).__name__, error)
            return service_error(message)
    logger.error("Unexpected error generating completion: %s", error)
    return LLMServiceError("LLM request failed. Try again later.")


class LLMClient(ABC):
    """Abstract text generator: a system and a user prompt in, completion text out."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """Return the completion text for the prompts.

        Raises:
            LLMServiceError: When the completion cannot be produced.
        """
        raise NotImplementedError


class OpenAIClient(LLMClient):
    """Chat-completions client; any OpenAI-compatible host works when `base_url` is set."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.model = model or settings.llm_model
        self.client = AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            base_url=base_url or settings.llm_base_url,
        )

    async def _complete(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int | None
    ) -> str | None:
        response: ChatCompletion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        try:
            content = await self._complete(system_prompt, user_prompt, temperature, max_tokens)
        except Exception as exc:
            raise translate_sdk_error(exc) from exc
        if not content or not content.strip():
            raise LLMInvalidResponseError("LLM returned an empty response.")
        return content
