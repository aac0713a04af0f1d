"""
catalog_guard.membership.reconciler

Membership reconciler.

Responsibilities:
- Role lifecycle: add (unique name), rename, remove.
- Role membership as a goal state (`present=True`) or a statement about an existing fact
  (`present=False` requires prior membership).
- Claim attach (no type uniqueness) and detach-all-of-type (idempotent).
- Translate directory results into one uniform `Success | Failure | Cancelled`.

Consistency under concurrent edits is delegated to the directory collaborator: the
reconciler issues single directory mutations per call and holds no locks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence

from catalog_guard.auth.models import Principal, Role
from catalog_guard.cancellation import OperationCancelled, guarded
from catalog_guard.directory.base import DirectoryResult, PrincipalDirectory
from catalog_guard.observability.logging import get_logger
from catalog_guard.outcomes import (
    CANCELLED,
    SUCCESS,
    Failure,
    FailureKind,
    MembershipOutcome,
)

log = get_logger(__name__)


class MembershipReconciler:
    def __init__(
        self,
        directory: PrincipalDirectory,
        *,
        claim_types: Sequence[str] = (),
        timeout: float | None = None,
    ) -> None:
        self._directory = directory
        self._claim_types = tuple(claim_types)
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def add_role(self, name: str, *, cancel: asyncio.Event | None = None) -> MembershipOutcome:
        return await self._run("add_role", self._add_role(name), cancel)

    async def rename_role(
        self, role_id: str, name: str, *, cancel: asyncio.Event | None = None
    ) -> MembershipOutcome:
        return await self._run("rename_role", self._rename_role(role_id, name), cancel)

    async def remove_role(self, role_id: str, *, cancel: asyncio.Event | None = None) -> MembershipOutcome:
        return await self._run("remove_role", self._remove_role(role_id), cancel)

    async def role_exists(self, name: str) -> bool:
        return await self._directory.find_role_by_name(name) is not None

    async def list_roles(self) -> list[Role]:
        return await self._directory.roles()

    async def role_members(self, role_id: str) -> list[Principal]:
        return [p for p in await self._directory.list_principals() if role_id in p.role_ids]

    async def membership_candidates(self, role_id: str) -> list[Principal]:
        """Principals that could be added to the role (not yet members)."""

        return [p for p in await self._directory.list_principals() if role_id not in p.role_ids]

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def set_role_membership(
        self,
        principal_id: str,
        role_id: str,
        present: bool,
        *,
        cancel: asyncio.Event | None = None,
    ) -> MembershipOutcome:
        return await self._run(
            "set_role_membership",
            self._set_role_membership(principal_id, role_id, present),
            cancel,
        )

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    async def attach_claim(
        self,
        principal_id: str,
        claim_type: str,
        claim_value: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> MembershipOutcome:
        return await self._run(
            "attach_claim", self._attach_claim(principal_id, claim_type, claim_value), cancel
        )

    async def detach_claim(
        self, principal_id: str, claim_type: str, *, cancel: asyncio.Event | None = None
    ) -> MembershipOutcome:
        return await self._run("detach_claim", self._detach_claim(principal_id, claim_type), cancel)

    async def available_claim_types(self, principal_id: str) -> list[str] | None:
        """
        Configured claim types the principal does not hold yet; None for unknown principals.

        Holding a type once or several times is the same here (claims are not deduplicated
        on attach, so a type offered earlier may already be present more than once).
        """

        principal = await self._directory.find_principal(principal_id)
        if principal is None:
            return None
        held = set(principal.claim_types())
        return [t for t in self._claim_types if t not in held]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(
        self,
        operation: str,
        work: Awaitable[MembershipOutcome],
        cancel: asyncio.Event | None,
    ) -> MembershipOutcome:
        try:
            outcome = await guarded(work, cancel=cancel, timeout=self._timeout)
        except OperationCancelled as e:
            log.info("membership.cancelled", operation=operation, detail=str(e))
            return CANCELLED
        if isinstance(outcome, Failure):
            log.info(
                "membership.failure",
                operation=operation,
                kind=outcome.kind.value,
                reason=outcome.reason,
            )
        return outcome

    async def _add_role(self, name: str) -> MembershipOutcome:
        if not name or not name.strip():
            return Failure(FailureKind.invalid_name, "Role name is required.")
        if await self._directory.find_role_by_name(name) is not None:
            return Failure(FailureKind.duplicate_role, f"Role '{name}' already exists.")
        result = await self._directory.create_role(name)
        if not result.succeeded and await self._directory.find_role_by_name(name) is not None:
            # Lost a race with a concurrent creator of the same name.
            return Failure(FailureKind.duplicate_role, f"Role '{name}' already exists.")
        return _translate(result)

    async def _rename_role(self, role_id: str, name: str) -> MembershipOutcome:
        if not name or not name.strip():
            return Failure(FailureKind.invalid_name, "Role name is required.")
        role = await self._directory.find_role(role_id)
        if role is None:
            return Failure(FailureKind.role_not_found, f"Role '{role_id}' not found.")
        if role.name == name:
            return SUCCESS
        existing = await self._directory.find_role_by_name(name)
        if existing is not None and existing.id != role_id:
            return Failure(FailureKind.duplicate_role, f"Role '{name}' already exists.")
        return _translate(await self._directory.rename_role(role_id, name))

    async def _remove_role(self, role_id: str) -> MembershipOutcome:
        if await self._directory.find_role(role_id) is None:
            return Failure(FailureKind.role_not_found, f"Role '{role_id}' not found.")
        return _translate(await self._directory.delete_role(role_id))

    async def _set_role_membership(
        self, principal_id: str, role_id: str, present: bool
    ) -> MembershipOutcome:
        if await self._directory.find_role(role_id) is None:
            return Failure(FailureKind.role_not_found, f"Role '{role_id}' not found.")
        if await self._directory.find_principal(principal_id) is None:
            return Failure(FailureKind.principal_not_found, f"User '{principal_id}' not found.")

        is_member = await self._directory.is_member(principal_id, role_id)
        if present:
            if is_member:
                return SUCCESS
            result = await self._directory.add_member(principal_id, role_id)
            if not result.succeeded and await self._directory.is_member(principal_id, role_id):
                # A concurrent add got there first; the goal state holds.
                return SUCCESS
            return _translate(result)

        if not is_member:
            return Failure(FailureKind.not_a_member, "User is not in role.")
        return _translate(await self._directory.remove_member(principal_id, role_id))

    async def _attach_claim(self, principal_id: str, claim_type: str, claim_value: str) -> MembershipOutcome:
        if await self._directory.find_principal(principal_id) is None:
            return Failure(FailureKind.principal_not_found, f"User '{principal_id}' not found.")
        return _translate(await self._directory.attach_claim(principal_id, claim_type, claim_value))

    async def _detach_claim(self, principal_id: str, claim_type: str) -> MembershipOutcome:
        if await self._directory.find_principal(principal_id) is None:
            return Failure(FailureKind.principal_not_found, f"User '{principal_id}' not found.")
        return _translate(await self._directory.detach_claim(principal_id, claim_type))


def _translate(result: DirectoryResult) -> MembershipOutcome:
    if result.succeeded:
        return SUCCESS
    return Failure(FailureKind.directory_failure, result.reason)


# --- Module Notes -----------------------------------------------------------
# Pre-checks (role exists, membership) and the mutation are separate directory calls; a
# concurrent edit between them is resolved by the directory, not here.
