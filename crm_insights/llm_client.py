"""LLM client for streaming text and schema-constrained output."""

import json
import re
from typing import Any, AsyncIterator, Optional, Union

from anthropic import AsyncAnthropic

from .config import Settings


class LLMNotConfiguredError(RuntimeError):
    """Raised when a remote call is attempted without an API key."""


class LLMClient:
    """Client for interacting with LLM APIs."""

    def __init__(self, settings: Settings, client: Optional[AsyncAnthropic] = None):
        """
        Initialize the LLM client.

        Args:
            settings: Application settings
            client: Pre-built SDK client (tests pass a fake here)
        """
        self.provider = settings.llm_provider
        self.model = settings.llm_model
        self.max_tokens = settings.llm_max_tokens

        if self.provider != "anthropic":
            raise ValueError(f"Unsupported LLM provider: {self.provider}")

        if client is not None:
            self.client = client
        elif settings.llm_api_key:
            self.client = AsyncAnthropic(api_key=settings.llm_api_key)
        else:
            self.client = None

    @property
    def is_configured(self) -> bool:
        """Whether remote calls can be made."""
        return self.client is not None

    def _require_client(self) -> AsyncAnthropic:
        if self.client is None:
            raise LLMNotConfiguredError("LLM API key is not configured")
        return self.client

    async def stream_text(
        self, system: str, content: str, max_tokens: Optional[int] = None
    ) -> AsyncIterator[str]:
        """
        Stream a text response fragment by fragment.

        Args:
            system: System instruction
            content: User message
            max_tokens: Override for the configured token limit

        Yields:
            Text fragments in arrival order
        """
        client = self._require_client()
        async with client.messages.stream(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": content}],
        ) as stream:
            async for text in stream.text_stream:
                yield text

    async def generate_structured(
        self,
        system: str,
        content: str,
        schema: dict[str, Any],
        tool_name: str,
        max_tokens: Optional[int] = None,
    ) -> Union[dict[str, Any], str, None]:
        """
        Request output constrained to a JSON schema.

        The schema is offered as the input schema of a single tool the model
        is forced to call.

        Args:
            system: System instruction
            content: User message
            schema: JSON schema the output must follow
            tool_name: Name of the recording tool
            max_tokens: Override for the configured token limit

        Returns:
            The tool input dict, the raw text if the model answered in text
            instead, or None for an empty response
        """
        client = self._require_client()
        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            temperature=0,
            system=system,
            tools=[
                {
                    "name": tool_name,
                    "description": "Record the structured analysis result.",
                    "input_schema": schema,
                }
            ],
            tool_choice={"type": "tool", "name": tool_name},
            messages=[{"role": "user", "content": content}],
        )

        text_parts = []
        for block in response.content:
            if block.type == "tool_use" and block.name == tool_name:
                return block.input
            if block.type == "text":
                text_parts.append(block.text)

        return "".join(text_parts) or None


def extract_json(content: str) -> Any:
    """
    Parse JSON from a model's text answer.

    Strips a surrounding markdown code block and trailing commas.

    Raises:
        json.JSONDecodeError: If the content is not valid JSON
    """
    fence = "```json" if "```json" in content else "```"
    if fence in content:
        json_start = content.find(fence) + len(fence)
        json_end = content.find("```", json_start)
        if json_end == -1:
            json_end = len(content)
        content = content[json_start:json_end].strip()

    # Remove trailing commas before closing braces/brackets
    content = re.sub(r",(\s*[}\]])", r"\1", content)
    return json.loads(content)
