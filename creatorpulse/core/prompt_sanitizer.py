from __future__ import annotations

import html
import logging
import re

logger = logging.getLogger(__name__)

_HTML_TAG_PATTERN = re.compile(r"<[^>]+>")
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_INJECTION_PATTERNS = [
    re.compile(r"ignore (all|previous|prior) instructions", re.IGNORECASE),
    re.compile(r"system prompt", re.IGNORECASE),
    re.compile(r"developer message", re.IGNORECASE),
    re.compile(r"jailbreak", re.IGNORECASE),
]


class PromptValidationError(ValueError):
    """Raised when user text cannot be embedded in a prompt."""

    error_code: str = "invalid_prompt_text"


def sanitize_writing_sample(sample: str) -> str:
    """Validate a writing sample before it is stored and later embedded in prompts.

    Samples keep their line structure (it is part of the writer's style), so only
    surrounding whitespace is trimmed.
    """
    if _CONTROL_CHARS_PATTERN.search(sample):
        raise PromptValidationError("Writing sample contains unsupported control characters.")
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(sample):
            raise PromptValidationError("Writing sample contains disallowed instruction patterns.")

    sanitized = sample.strip()
    if not sanitized:
        raise PromptValidationError("Writing sample must include text.")
    return sanitized


def clean_feed_text(text: str | None) -> str:
    """Reduce feed markup to plain single-line text."""
    if not text:
        return ""
    cleaned = _HTML_TAG_PATTERN.sub(" ", text)
    cleaned = html.unescape(cleaned)
    cleaned = _CONTROL_CHARS_PATTERN.sub("", cleaned)
    cleaned = " ".join(cleaned.split())

    if len(cleaned) != len(text):
        logger.debug(
            "Cleaned feed text",
            extra={"original_length": len(text), "cleaned_length": len(cleaned)},
        )
    return cleaned
