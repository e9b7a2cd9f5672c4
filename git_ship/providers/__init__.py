"""Text-generation providers.

Key Components:
    - GenerationProvider: Abstract contract used by the effect executor
    - OpenAICompatibleProvider: Groq, OpenAI and self-hosted OpenAI-style APIs
    - AnthropicProvider: Anthropic messages API with forced tool use
    - OllamaProvider: Local Ollama server
    - ManualProvider: The user types every field
    - create_generation_provider: Picks one from settings and run mode

Example:
    >>> from git_ship.providers import create_generation_provider
    >>> provider = create_generation_provider(settings, RunMode(), Prompter())
    >>> details = await provider.generate_commit_details(diff)
    >>> await provider.aclose()
"""

from git_ship.providers.base import GenerationProvider, HTTPGenerationProvider
from git_ship.providers.factory import create_generation_provider

__all__ = ["GenerationProvider", "HTTPGenerationProvider", "create_generation_provider"]
