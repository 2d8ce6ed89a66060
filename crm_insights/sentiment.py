"""Structured sentiment extraction from meeting transcripts."""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from .config import Settings
from .llm_client import LLMClient, extract_json
from .models import SentimentResult
from .prompts import NO_TRANSCRIPTS_SENTINEL, SENTIMENT_SCHEMA, SENTIMENT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

SENTIMENT_TOOL_NAME = "record_sentiment"


class SentimentGenerationError(RuntimeError):
    """Raised in strict mode when the sentiment model call fails."""


def parse_sentiment_payload(payload: Any) -> Optional[SentimentResult]:
    """
    Validate a model response against the sentiment shape.

    Args:
        payload: Tool input dict, or raw JSON text

    Returns:
        SentimentResult, or None if the payload is malformed
    """
    if payload is None:
        return None

    try:
        if isinstance(payload, str):
            payload = extract_json(payload)
        return SentimentResult.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Failed to parse sentiment response: %s", e)
        return None


class SentimentExtractor:
    """Scores overall sentiment and picks key moments across transcripts."""

    def __init__(self, llm_client: LLMClient, settings: Optional[Settings] = None):
        self.llm_client = llm_client
        self.max_tokens = settings.llm_sentiment_max_tokens if settings else None

    async def analyze_sentiment(
        self, context: str, strict: bool = False
    ) -> Optional[SentimentResult]:
        """
        Analyze sentiment of formatted meeting transcripts.

        Sentiment is supplementary: missing transcripts, a missing API key and
        malformed output all return None without raising.

        Args:
            context: Output of format_sentiment_context
            strict: Raise SentimentGenerationError on call failure instead of
                returning None

        Returns:
            SentimentResult, or None when no sentiment is available
        """
        if context == NO_TRANSCRIPTS_SENTINEL:
            return None

        if not self.llm_client.is_configured:
            return None

        try:
            payload = await self.llm_client.generate_structured(
                system=SENTIMENT_SYSTEM_PROMPT,
                content=f"Analyze these transcripts:\n{context}",
                schema=SENTIMENT_SCHEMA,
                tool_name=SENTIMENT_TOOL_NAME,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            if strict:
                raise SentimentGenerationError(
                    "Failed to get a response from the AI model for sentiment analysis."
                ) from e
            logger.warning("Sentiment analysis call failed: %s", e)
            return None

        return parse_sentiment_payload(payload)
