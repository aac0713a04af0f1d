"""
catalog_guard.auth.policy_file

JSON policy documents.

Responsibilities:
- Parse `{"policies": {"<name>": [<requirement>, ...]}}` into requirement variants.
- Reject malformed documents as `PolicyConfigurationError` at start-up.

Example:
    {"policies": {"EditCatalog": [{"kind": "claim", "claim_type": "EditAlbums"}]}}
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, ValidationError

from catalog_guard.auth.requirements import (
    AssertionRequirement,
    ClaimRequirement,
    DomainRequirement,
    Requirement,
    RoleRequirement,
)
from catalog_guard.errors import PolicyConfigurationError


class _RoleSpec(BaseModel):
    kind: Literal["role"]
    role_name: str = Field(min_length=1)

    def build(self) -> Requirement:
        return RoleRequirement(self.role_name)


class _ClaimSpec(BaseModel):
    kind: Literal["claim"]
    claim_type: str = Field(min_length=1)
    value: str | None = None

    def build(self) -> Requirement:
        return ClaimRequirement(self.claim_type, self.value)


class _AssertionSpec(BaseModel):
    kind: Literal["assertion"]
    predicate_tag: str = Field(min_length=1)

    def build(self) -> Requirement:
        return AssertionRequirement(self.predicate_tag)


class _DomainSpec(BaseModel):
    kind: Literal["domain"]
    suffix: str = Field(min_length=1)

    def build(self) -> Requirement:
        return DomainRequirement(self.suffix)


_RequirementSpec = Annotated[
    _RoleSpec | _ClaimSpec | _AssertionSpec | _DomainSpec,
    Field(discriminator="kind"),
]


class PolicyDocument(BaseModel):
    policies: dict[str, list[_RequirementSpec]]

    def requirements(self) -> dict[str, list[Requirement]]:
        return {name: [spec.build() for spec in specs] for name, specs in self.policies.items()}


def parse_policy_document(raw: str | bytes) -> dict[str, list[Requirement]]:
    try:
        doc = PolicyDocument.model_validate_json(raw)
    except ValidationError as e:
        raise PolicyConfigurationError(f"Invalid policy document: {e}") from e
    return doc.requirements()


def load_policy_file(path: Path) -> dict[str, list[Requirement]]:
    return parse_policy_document(path.read_bytes())
