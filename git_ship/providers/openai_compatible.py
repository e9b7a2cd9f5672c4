"""OpenAI-compatible provider (Groq, OpenAI, vLLM, LM Studio, ...)."""

from typing import Any

import structlog

from git_ship.providers.base import DEFAULT_TIMEOUT, HTTPGenerationProvider, decode_json

log = structlog.get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "moonshotai/kimi-k2-instruct-0905"
OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"


class OpenAICompatibleProvider(HTTPGenerationProvider):
    """Generation provider for servers implementing the OpenAI chat API.

    Structured output is requested with ``response_format`` of type
    ``json_schema``; the answer arrives as JSON text in the first choice.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/v1",
        model: str = "default",
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        name: str = "openai-compatible",
    ):
        """Initialize OpenAI-compatible provider.

        Args:
            base_url: API base URL (e.g., http://localhost:8000/v1)
            model: Model identifier to use
            api_key: Optional API key, sent as a bearer token
            timeout: Request timeout in seconds
            name: Provider name used in logs
        """
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        super().__init__(model=model, timeout=timeout, headers=headers)
        self.base_url = base_url.rstrip("/")
        self.name = name

    async def _request_json(
        self,
        system_prompt: str,
        user_content: str,
        schema_name: str,
        schema: dict[str, Any],
    ) -> Any:
        response = await self.client.post(
            f"{self.base_url}/chat/completions",
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                "response_format": {
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "strict": False, "schema": schema},
                },
            },
        )
        response.raise_for_status()

        result = response.json()
        usage = result.get("usage", {})
        log.debug("completion_received", provider=self.name, tokens=usage.get("total_tokens"))
        return decode_json(result["choices"][0]["message"]["content"])
