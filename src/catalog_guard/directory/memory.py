"""
catalog_guard.directory.memory

In-process `PrincipalDirectory`.

Responsibilities:
- Hold users, roles, memberships, and claims in dictionaries.
- Yield to the event loop on every call so concurrency behaves like a remote directory.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field

from catalog_guard.auth.models import Claim, Principal, Role
from catalog_guard.directory.base import DirectoryResult


@dataclass(slots=True)
class _UserRecord:
    id: str
    name: str
    email: str = ""
    role_ids: set[str] = field(default_factory=set)
    claims: list[Claim] = field(default_factory=list)


class InMemoryPrincipalDirectory:
    def __init__(self) -> None:
        self._users: dict[str, _UserRecord] = {}
        self._roles: dict[str, Role] = {}

    # Seeding helpers (synchronous; used by tests and local bootstrap).

    def add_user(self, name: str, *, email: str = "", user_id: str | None = None) -> str:
        uid = user_id or str(uuid.uuid4())
        self._users[uid] = _UserRecord(id=uid, name=name, email=email)
        return uid

    def seed_role(self, name: str, *, role_id: str | None = None) -> str:
        rid = role_id or str(uuid.uuid4())
        self._roles[rid] = Role(id=rid, name=name)
        return rid

    # PrincipalDirectory

    async def find_principal(self, principal_id: str) -> Principal | None:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        return self._snapshot(user) if user is not None else None

    async def list_principals(self) -> list[Principal]:
        await asyncio.sleep(0)
        return [self._snapshot(u) for u in sorted(self._users.values(), key=lambda u: u.name)]

    async def roles(self) -> list[Role]:
        await asyncio.sleep(0)
        return sorted(self._roles.values(), key=lambda r: r.name)

    async def find_role(self, role_id: str) -> Role | None:
        await asyncio.sleep(0)
        return self._roles.get(role_id)

    async def find_role_by_name(self, name: str) -> Role | None:
        await asyncio.sleep(0)
        return next((r for r in self._roles.values() if r.name == name), None)

    async def create_role(self, name: str) -> DirectoryResult:
        await asyncio.sleep(0)
        if any(r.name == name for r in self._roles.values()):
            return DirectoryResult.failed(f"Role name '{name}' is already taken.")
        self.seed_role(name)
        return DirectoryResult.ok()

    async def rename_role(self, role_id: str, name: str) -> DirectoryResult:
        await asyncio.sleep(0)
        if role_id not in self._roles:
            return DirectoryResult.failed(f"Role '{role_id}' does not exist.")
        if any(r.name == name and r.id != role_id for r in self._roles.values()):
            return DirectoryResult.failed(f"Role name '{name}' is already taken.")
        self._roles[role_id] = Role(id=role_id, name=name)
        return DirectoryResult.ok()

    async def delete_role(self, role_id: str) -> DirectoryResult:
        await asyncio.sleep(0)
        if self._roles.pop(role_id, None) is None:
            return DirectoryResult.failed(f"Role '{role_id}' does not exist.")
        for user in self._users.values():
            user.role_ids.discard(role_id)
        return DirectoryResult.ok()

    async def is_member(self, principal_id: str, role_id: str) -> bool:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        return user is not None and role_id in user.role_ids

    async def add_member(self, principal_id: str, role_id: str) -> DirectoryResult:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        if user is None or role_id not in self._roles:
            return DirectoryResult.failed("User or role not found.")
        if role_id in user.role_ids:
            return DirectoryResult.failed(f"User already in role '{self._roles[role_id].name}'.")
        user.role_ids.add(role_id)
        return DirectoryResult.ok()

    async def remove_member(self, principal_id: str, role_id: str) -> DirectoryResult:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        if user is None or role_id not in user.role_ids:
            return DirectoryResult.failed("User is not in role.")
        user.role_ids.discard(role_id)
        return DirectoryResult.ok()

    async def attach_claim(self, principal_id: str, claim_type: str, claim_value: str) -> DirectoryResult:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        if user is None:
            return DirectoryResult.failed("User not found.")
        user.claims.append(Claim(type=claim_type, value=claim_value))
        return DirectoryResult.ok()

    async def detach_claim(self, principal_id: str, claim_type: str) -> DirectoryResult:
        await asyncio.sleep(0)
        user = self._users.get(principal_id)
        if user is None:
            return DirectoryResult.failed("User not found.")
        user.claims = [c for c in user.claims if c.type != claim_type]
        return DirectoryResult.ok()

    def _snapshot(self, user: _UserRecord) -> Principal:
        return Principal(
            id=user.id,
            name=user.name,
            email=user.email,
            roles=frozenset(self._roles[r] for r in user.role_ids if r in self._roles),
            claims=tuple(user.claims),
        )


# --- Module Notes -----------------------------------------------------------
# Snapshots are copies: mutating the directory never changes a Principal already handed out.
