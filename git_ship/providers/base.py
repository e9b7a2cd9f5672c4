"""
Text-generation provider interfaces.

``GenerationProvider`` is the contract the effect executor depends on: three
operations that each return a result or ``None``. Failures never propagate
past this boundary.

``HTTPGenerationProvider`` implements the contract for services reached
over HTTP. Subclasses only describe the wire format in ``_request_json``;
validation, normalization, logging and failure handling live here.

Example:
    >>> class EchoProvider(HTTPGenerationProvider):
    ...     name = "echo"
    ...     async def _request_json(self, system_prompt, user_content, schema_name, schema):
    ...         response = await self.client.post("https://echo.test", json={...})
    ...         return response.json()
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from git_ship.engine.models import CommitDetails, FileEntry, PrDetails, StackPlan
from git_ship.exceptions import GenerationError
from git_ship.providers.prompts import (
    COMMIT_SYSTEM_PROMPT,
    PR_SYSTEM_PROMPT,
    STACK_SYSTEM_PROMPT,
    stack_plan_message,
)
from git_ship.providers.schemas import CommitDetailsPayload, PrDetailsPayload, StackPlanPayload

log = structlog.get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

DEFAULT_TIMEOUT = 60.0


class GenerationProvider(ABC):
    """Produces branch names, commit messages, PR text and stack plans.

    Implementations must return ``None`` (never raise) when they cannot
    produce a usable result.
    """

    name: str = "provider"

    @abstractmethod
    async def generate_commit_details(self, diff: str) -> CommitDetails | None:
        """Generate branch name, commit message and PR text for a staged diff.

        Args:
            diff: Output of ``git diff --cached``

        Returns:
            Generated details, or None on failure
        """
        pass

    @abstractmethod
    async def generate_pr_details(self, diff: str) -> PrDetails | None:
        """Generate PR title and body for a branch diff.

        Args:
            diff: Diff of the branch against trunk

        Returns:
            Generated PR details, or None on failure
        """
        pass

    @abstractmethod
    async def generate_stack_plan(self, files: Sequence[FileEntry], diff: str) -> StackPlan | None:
        """Split a change set into an ordered series of atomic commits.

        Args:
            files: The working change set
            diff: Diff of all files in ``files``

        Returns:
            A plan, or None on failure or when unsupported
        """
        pass

    async def aclose(self) -> None:
        """Release network resources. Safe to call more than once."""
        return None


class HTTPGenerationProvider(GenerationProvider):
    """Base class for providers that call a structured-output HTTP API.

    Attributes:
        model: Model identifier sent with each request
        timeout: Per-request timeout in seconds
        client: Shared ``httpx.AsyncClient``
    """

    def __init__(self, model: str, timeout: float = DEFAULT_TIMEOUT, headers: dict[str, str] | None = None):
        """Initialize the HTTP client.

        Args:
            model: Model identifier
            timeout: Request timeout in seconds
            headers: Headers sent with every request
        """
        self.model = model
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    @abstractmethod
    async def _request_json(
        self,
        system_prompt: str,
        user_content: str,
        schema_name: str,
        schema: dict[str, Any],
    ) -> Any:
        """Ask the service for a JSON object matching ``schema``.

        Args:
            system_prompt: Instructions for the model
            user_content: Diff (and file list) to work on
            schema_name: Short identifier for the schema
            schema: JSON schema the answer must follow

        Returns:
            The decoded JSON object

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
            GenerationError: If the response does not contain an answer
            ValueError: If the answer is not valid JSON
        """
        pass

    async def generate_commit_details(self, diff: str) -> CommitDetails | None:
        payload = await self._generate(COMMIT_SYSTEM_PROMPT, diff, "commit_details", CommitDetailsPayload)
        return payload.to_details() if payload else None

    async def generate_pr_details(self, diff: str) -> PrDetails | None:
        payload = await self._generate(PR_SYSTEM_PROMPT, diff, "pr_details", PrDetailsPayload)
        return payload.to_details() if payload else None

    async def generate_stack_plan(self, files: Sequence[FileEntry], diff: str) -> StackPlan | None:
        payload = await self._generate(
            STACK_SYSTEM_PROMPT,
            stack_plan_message(files, diff),
            "stack_plan",
            StackPlanPayload,
        )
        return payload.to_plan() if payload else None

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _generate(
        self,
        system_prompt: str,
        user_content: str,
        schema_name: str,
        payload_type: type[PayloadT],
    ) -> PayloadT | None:
        """Request, decode and validate one structured answer.

        Returns:
            The validated payload, or None if anything went wrong
        """
        schema = payload_type.response_schema()  # type: ignore[attr-defined]
        log.debug("generation_requested", provider=self.name, model=self.model, schema=schema_name)

        try:
            raw = await self._request_json(system_prompt, user_content, schema_name, schema)
            payload = payload_type.model_validate(raw)
        except httpx.HTTPStatusError as e:
            log.warning(
                "generation_failed",
                provider=self.name,
                schema=schema_name,
                status_code=e.response.status_code,
                error=e.response.text[:200],
            )
            return None
        except (httpx.HTTPError, GenerationError, ValidationError, ValueError, KeyError, IndexError, TypeError) as e:
            log.warning("generation_failed", provider=self.name, schema=schema_name, error=str(e))
            return None

        log.info("generation_succeeded", provider=self.name, schema=schema_name)
        return payload


def decode_json(content: Any) -> Any:
    """Decode a JSON document returned as message text.

    Raises:
        GenerationError: If the content is not a string
        ValueError: If the string is not valid JSON
    """
    if not isinstance(content, str):
        raise GenerationError("Response content is not text")
    return json.loads(content)
