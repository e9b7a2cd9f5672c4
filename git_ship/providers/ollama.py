"""Ollama provider for local text generation."""

from typing import Any

from git_ship.providers.base import DEFAULT_TIMEOUT, HTTPGenerationProvider, decode_json

OLLAMA_BASE_URL = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL = "llama3.1:8b"


class OllamaProvider(HTTPGenerationProvider):
    """Generation provider that uses a local Ollama server.

    The payload schema is passed as ``format`` so Ollama constrains the
    model's output to it.
    """

    name = "ollama"

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        model: str = OLLAMA_DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize Ollama provider.

        Args:
            base_url: Ollama API base URL
            model: Model to use (e.g., llama3.1:8b, qwen2.5-coder, mistral)
            timeout: Request timeout in seconds
        """
        super().__init__(model=model, timeout=timeout)
        self.base_url = base_url.rstrip("/")

    async def _request_json(
        self,
        system_prompt: str,
        user_content: str,
        schema_name: str,
        schema: dict[str, Any],
    ) -> Any:
        response = await self.client.post(
            f"{self.base_url}/api/chat",
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                "format": schema,
                "stream": False,
            },
        )
        response.raise_for_status()
        return decode_json(response.json()["message"]["content"])
