"""Streaming insight generation over aggregated CRM context."""

from typing import AsyncIterator

from .llm_client import LLMClient
from .prompts import NO_DATA_SENTINEL, build_insight_system_prompt

NOT_CONFIGURED_MESSAGE = (
    "Error: API key not configured for this environment. "
    "The application cannot connect to the AI service."
)
NO_DATA_MESSAGE = (
    "No data was found for the selected filters. "
    "Please expand your search criteria and try again."
)
GENERATION_FAILED_MESSAGE = (
    "Failed to get a response from the AI model. Check your network connection "
    "and that the configured API key is valid and has permissions."
)


class InsightGenerationError(RuntimeError):
    """Raised when the model call for an insight fails."""


class InsightGenerator:
    """Answers a strategic question over formatted CRM context."""

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def generate_insights(self, context: str, question: str) -> AsyncIterator[str]:
        """
        Stream a markdown answer to a question.

        The no-data sentinel and a missing API key each short-circuit to a
        single explanatory fragment without a remote call.

        Args:
            context: Output of format_full_context
            question: The user's free-text question

        Yields:
            Markdown fragments in arrival order

        Raises:
            InsightGenerationError: If the model call fails. Fragments already
                yielded stay valid.
        """
        if context == NO_DATA_SENTINEL:
            yield NO_DATA_MESSAGE
            return

        if not self.llm_client.is_configured:
            yield NOT_CONFIGURED_MESSAGE
            return

        system = build_insight_system_prompt(context)
        try:
            async for fragment in self.llm_client.stream_text(system, question):
                if fragment:
                    yield fragment
        except Exception as e:
            raise InsightGenerationError(GENERATION_FAILED_MESSAGE) from e
