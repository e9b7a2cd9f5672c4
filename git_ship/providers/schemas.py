"""
Structured-output schemas for text generation.

Each payload model is both the JSON schema sent to the service (so it
answers in the right shape) and the validator for what comes back.
Validated payloads convert to the workflow's immutable models with text
normalized.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from git_ship.engine.models import CommitDetails, PrDetails, StackGroup, StackPlan
from git_ship.utils.helpers import normalize_branch_name, normalize_text


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @classmethod
    def response_schema(cls) -> dict[str, Any]:
        """JSON schema with every ``$ref`` inlined.

        Some services reject ``$defs``; inlining keeps the schema portable.
        """
        schema = cls.model_json_schema()
        definitions = schema.pop("$defs", {})
        return _inline_refs(schema, definitions)


class CommitDetailsPayload(_Payload):
    branch_name: str = Field(min_length=1, description="kebab-case branch name")
    commit_message: str = Field(min_length=1, description="Conventional commit message")
    pr_title: str = Field(min_length=1, description="PR title under 70 chars")
    pr_body: str = Field(description="Markdown PR description")

    def to_details(self) -> CommitDetails:
        return CommitDetails(
            branch_name=normalize_branch_name(self.branch_name),
            commit_message=normalize_text(self.commit_message),
            pr_title=normalize_text(self.pr_title),
            pr_body=normalize_text(self.pr_body),
        )


class PrDetailsPayload(_Payload):
    pr_title: str = Field(min_length=1, description="PR title under 70 chars")
    pr_body: str = Field(description="Markdown PR description")

    def to_details(self) -> PrDetails:
        return PrDetails(pr_title=normalize_text(self.pr_title), pr_body=normalize_text(self.pr_body))


class StackGroupPayload(_Payload):
    files: list[str] = Field(min_length=1, description="Paths committed together")
    commit_message: str = Field(min_length=1, description="Conventional commit message")


class StackPlanPayload(_Payload):
    groups: list[StackGroupPayload] = Field(min_length=1, description="Commits in order")
    branch_name: str = Field(min_length=1, description="kebab-case branch name")
    pr_title: str = Field(min_length=1, description="PR title under 70 chars")
    pr_body: str = Field(description="Markdown PR description")

    def to_plan(self) -> StackPlan:
        return StackPlan(
            groups=tuple(
                StackGroup(files=tuple(group.files), commit_message=normalize_text(group.commit_message))
                for group in self.groups
            ),
            branch_name=normalize_branch_name(self.branch_name),
            pr_title=normalize_text(self.pr_title),
            pr_body=normalize_text(self.pr_body),
        )


def _inline_refs(node: Any, definitions: dict[str, Any]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/$defs/"):
            return _inline_refs(definitions[ref.removeprefix("#/$defs/")], definitions)
        return {key: _inline_refs(value, definitions) for key, value in node.items()}
    if isinstance(node, list):
        return [_inline_refs(item, definitions) for item in node]
    return node
