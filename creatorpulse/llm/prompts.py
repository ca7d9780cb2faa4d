"""Prompt templates for LLM interactions."""

from __future__ import annotations

TREND_ANALYSIS_SYSTEM_PROMPT = """You are a trend analysis AI. Analyze the provided content and
identify the top 3-5 trending topics.

For each trend, provide:
- A clear, engaging title
- A 2-3 sentence summary
- 3-5 relevant keywords, most relevant first

Focus on topics that are gaining momentum, have high engagement, or represent emerging themes.
Respond with the JSON array only, without any surrounding text or code fences.
"""


def get_trend_analysis_prompt(content_text: str) -> str:
    """Generate the user prompt for trend analysis."""
    return f"""Analyze this content for trends:

{content_text}

Identify the top trends and format them as JSON:
[
  {{
    "title": "Trend Title",
    "summary": "Brief description of the trend",
    "keywords": ["keyword1", "keyword2", "keyword3"]
  }}
]"""


STYLE_ANALYSIS_SYSTEM_PROMPT = """You are a writing style analyzer. Analyze the provided writing
samples and extract:
1. The overall tone (e.g., professional, casual, conversational, formal)
2. The typical structure (e.g., bullet points, paragraphs, lists)
3. Key characteristics of the writing style

Provide a concise analysis."""


def get_style_analysis_prompt(samples: list[str]) -> str:
    """Generate the user prompt for writing style analysis."""
    joined = "\n\n---\n\n".join(samples)
    return f"""Analyze these writing samples:

{joined}

Please provide:
- Tone: [tone description]
- Structure: [structure description]
- Key characteristics: [brief list]"""


def get_newsletter_system_prompt(
    samples: list[str], tone: str, structure: str, current_date: str
) -> str:
    """Generate the system prompt that carries the writer's voice and today's date."""
    examples = "\n\n".join(samples) if samples else "(no samples provided)"
    return f"""You are CreatorPulse, an AI writing assistant for newsletter creators.
Using the user's writing style (provided examples) and latest trends,
draft a newsletter that includes:
- a short intro paragraph (match tone)
- 3-5 curated content summaries (1-2 sentences each)
- a "Trends to Watch" section with the top trends.
Keep the tone consistent with the user's past writing.

User's writing style examples:
{examples}

Tone: {tone}
Structure: {structure}

Current date: {current_date}"""


def get_newsletter_prompt(trend_lines: list[str], content_lines: list[str]) -> str:
    """Generate the user prompt listing the trends and curated content."""
    trends_section = "\n".join(trend_lines) if trend_lines else "- No trends identified yet."
    content_section = "\n".join(content_lines) if content_lines else "- No recent content."
    return f"""Please create a newsletter with the following content:

TRENDS TO WATCH:
{trends_section}

CURATED CONTENT:
{content_section}

Please format this as a professional newsletter that matches the user's writing style."""
