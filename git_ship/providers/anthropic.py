"""Anthropic messages API provider.

Structured output is obtained by forcing a single tool call whose input
schema is the payload schema; the tool input is the answer.
"""

from typing import Any

from git_ship.exceptions import GenerationError
from git_ship.providers.base import DEFAULT_TIMEOUT, HTTPGenerationProvider

ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_DEFAULT_MODEL = "claude-haiku-4-5"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HTTPGenerationProvider):
    """Generation provider backed by ``POST /v1/messages``."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_tokens: int = 1024,
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model override (default: claude-haiku-4-5)
            base_url: API base URL override
            timeout: Request timeout in seconds
            max_tokens: Output token limit per request
        """
        super().__init__(
            model=model or ANTHROPIC_DEFAULT_MODEL,
            timeout=timeout,
            headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
        )
        self.base_url = (base_url or ANTHROPIC_BASE_URL).rstrip("/")
        self.max_tokens = max_tokens

    async def _request_json(
        self,
        system_prompt: str,
        user_content: str,
        schema_name: str,
        schema: dict[str, Any],
    ) -> Any:
        response = await self.client.post(
            f"{self.base_url}/v1/messages",
            json={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "system": system_prompt,
                "tools": [
                    {
                        "name": schema_name,
                        "description": "Generate git metadata from a diff",
                        "input_schema": schema,
                    }
                ],
                "tool_choice": {"type": "tool", "name": schema_name},
                "messages": [{"role": "user", "content": user_content}],
            },
        )
        response.raise_for_status()

        for block in response.json().get("content", []):
            if block.get("type") == "tool_use" and block.get("input") is not None:
                return block["input"]
        raise GenerationError("Response contained no tool_use block", provider=self.name)
