from creatorpulse.llm.client import LLMClient, LLMServiceError, OpenAIClient
from creatorpulse.llm.schemas import StyleProfile, TrendDraft, parse_trend_response

__all__ = [
    "LLMClient",
    "LLMServiceError",
    "OpenAIClient",
    "StyleProfile",
    "TrendDraft",
    "parse_trend_response",
]
