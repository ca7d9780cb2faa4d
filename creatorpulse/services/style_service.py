from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from creatorpulse.llm.client import LLMClient, LLMServiceError
from creatorpulse.llm.prompts import STYLE_ANALYSIS_SYSTEM_PROMPT, get_style_analysis_prompt
from creatorpulse.llm.schemas import DEFAULT_STRUCTURE, DEFAULT_TONE, StyleProfile

logger = logging.getLogger(__name__)

_TONE_PATTERN = re.compile(r"Tone:[ \t]*(.+)", re.IGNORECASE)
_STRUCTURE_PATTERN = re.compile(r"Structure:[ \t]*(.+)", re.IGNORECASE)


def _first_match(pattern: re.Pattern[str], text: str, default: str) -> str:
    match = pattern.search(text)
    if match is None:
        return default
    value = match.group(1).strip().strip("*").strip()
    return value or default


class StyleExtractor:
    """Infers tone and structure from writing samples. Never raises."""

    def __init__(self, llm_client: LLMClient) -> None:
        self._llm_client = llm_client

    async def extract_writing_style(self, samples: Sequence[str]) -> StyleProfile:
        samples = list(samples)
        if not samples:
            return StyleProfile()

        try:
            response = await self._llm_client.generate(
                STYLE_ANALYSIS_SYSTEM_PROMPT,
                get_style_analysis_prompt(samples),
                temperature=0.3,
                max_tokens=500,
            )
        except LLMServiceError as exc:
            logger.warning(
                "Style extraction failed; using default style",
                extra={"error_code": exc.error_code},
            )
            return StyleProfile(samples=samples)
        except Exception:
            # Clients outside this package may not wrap their errors.
            logger.exception("Unexpected error from text generator; using default style")
            return StyleProfile(samples=samples)

        return StyleProfile(
            tone=_first_match(_TONE_PATTERN, response, DEFAULT_TONE),
            structure=_first_match(_STRUCTURE_PATTERN, response, DEFAULT_STRUCTURE),
            samples=samples,
        )
