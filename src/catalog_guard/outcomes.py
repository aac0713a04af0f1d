"""
catalog_guard.outcomes

Caller-facing result values.

Responsibilities:
- Authorization decisions: `Allow`, `Deny(reasons)`, `Cancelled`.
- Membership results: `Success`, `Failure(kind, reason)`, `Cancelled`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Final


class ReasonKind(enum.StrEnum):
    failed = "FAILED"
    unsatisfiable = "UNSATISFIABLE"
    handler_error = "HANDLER_ERROR"
    principal_not_found = "PRINCIPAL_NOT_FOUND"


@dataclass(frozen=True, slots=True)
class DenyReason:
    kind: ReasonKind
    requirement: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.kind is ReasonKind.failed:
            return self.requirement
        if self.kind is ReasonKind.unsatisfiable:
            return f"Unsatisfiable:{self.requirement}"
        if self.kind is ReasonKind.handler_error:
            return f"HandlerError:{self.requirement}: {self.detail}"
        return f"PrincipalNotFound:{self.detail}"


@dataclass(frozen=True, slots=True)
class Allow:
    allowed: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class Deny:
    details: tuple[DenyReason, ...]
    allowed: bool = field(default=False, init=False)

    @property
    def reasons(self) -> list[str]:
        return [str(r) for r in self.details]


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The operation was abandoned (cancel signal or deadline); not a negative verdict."""

    allowed: bool = field(default=False, init=False)
    succeeded: bool = field(default=False, init=False)


CANCELLED: Final = Cancelled()

Decision = Allow | Deny | Cancelled


class FailureKind(enum.StrEnum):
    duplicate_role = "DuplicateRole"
    role_not_found = "RoleNotFound"
    not_a_member = "NotAMember"
    principal_not_found = "PrincipalNotFound"
    invalid_name = "InvalidName"
    directory_failure = "DirectoryFailure"


@dataclass(frozen=True, slots=True)
class Success:
    succeeded: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    reason: str
    succeeded: bool = field(default=False, init=False)


SUCCESS: Final = Success()

MembershipOutcome = Success | Failure | Cancelled


# --- Module Notes -----------------------------------------------------------
# `Cancelled` is shared by both result families so callers never read it as Deny/Failure.
