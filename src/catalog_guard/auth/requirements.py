"""
catalog_guard.auth.requirements

Requirement variants a policy can demand.

Responsibilities:
- Define the built-in variants (role, claim, assertion, domain).
- Give every variant a stable string tag used as the handler dispatch key.

New variants only need a `kind` tag and a `label`; the evaluator dispatches on the tag
and never inspects the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

ROLE = "RoleRequirement"
CLAIM = "ClaimRequirement"
ASSERTION = "AssertionRequirement"
DOMAIN = "DomainRequirement"


@runtime_checkable
class Requirement(Protocol):
    kind: ClassVar[str]

    @property
    def label(self) -> str: ...


@dataclass(frozen=True, slots=True)
class RoleRequirement:
    kind: ClassVar[str] = ROLE

    role_name: str

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.role_name}"


@dataclass(frozen=True, slots=True)
class ClaimRequirement:
    kind: ClassVar[str] = CLAIM

    claim_type: str
    value: str | None = None

    @property
    def label(self) -> str:
        if self.value is None:
            return f"{self.kind}:{self.claim_type}"
        return f"{self.kind}:{self.claim_type}={self.value}"


@dataclass(frozen=True, slots=True)
class AssertionRequirement:
    """Opaque predicate; the meaning of `predicate_tag` is defined by its handlers."""

    kind: ClassVar[str] = ASSERTION

    predicate_tag: str

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.predicate_tag}"


@dataclass(frozen=True, slots=True)
class DomainRequirement:
    """Caller's email address must end with `suffix` (e.g. "@126.com")."""

    kind: ClassVar[str] = DOMAIN

    suffix: str

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.suffix}"
