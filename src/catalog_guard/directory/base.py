"""
catalog_guard.directory.base

Principal directory protocol.

Responsibilities:
- Describe the read and mutation operations the core consumes.
- Define the structured mutation outcome (`DirectoryResult`).

Every method is a suspension point (an out-of-process dependency in production).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from catalog_guard.auth.models import Principal, Role


@dataclass(frozen=True, slots=True)
class DirectoryResult:
    succeeded: bool
    errors: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls) -> DirectoryResult:
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> DirectoryResult:
        return cls(succeeded=False, errors=tuple(errors) or ("unknown directory error",))

    @property
    def reason(self) -> str:
        return "; ".join(self.errors)


class PrincipalDirectory(Protocol):
    async def find_principal(self, principal_id: str) -> Principal | None: ...

    async def list_principals(self) -> list[Principal]: ...

    async def roles(self) -> list[Role]: ...

    async def find_role(self, role_id: str) -> Role | None: ...

    async def find_role_by_name(self, name: str) -> Role | None: ...

    async def create_role(self, name: str) -> DirectoryResult: ...

    async def rename_role(self, role_id: str, name: str) -> DirectoryResult: ...

    async def delete_role(self, role_id: str) -> DirectoryResult: ...

    async def is_member(self, principal_id: str, role_id: str) -> bool: ...

    async def add_member(self, principal_id: str, role_id: str) -> DirectoryResult: ...

    async def remove_member(self, principal_id: str, role_id: str) -> DirectoryResult: ...

    async def attach_claim(self, principal_id: str, claim_type: str, claim_value: str) -> DirectoryResult: ...

    async def detach_claim(self, principal_id: str, claim_type: str) -> DirectoryResult: ...


# --- Module Notes -----------------------------------------------------------
# Atomicity of concurrent edits to the same principal is whatever the implementation
# provides; callers add no locking of their own.
