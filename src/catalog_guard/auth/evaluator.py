"""
catalog_guard.auth.evaluator

Policy evaluator.

Responsibilities:
- Resolve a policy by name and judge each requirement with its eligible handlers.
- Aggregate: AND across requirements, OR across handlers of one requirement.
- Isolate handler faults (Fail for that handler, reported as `HandlerError`).
- Honor an external cancel signal / deadline, returning `Cancelled`.
"""

from __future__ import annotations

import asyncio
import inspect

from catalog_guard.auth.config import AuthorizationConfig, Policy
from catalog_guard.auth.handlers import Verdict
from catalog_guard.auth.models import Principal
from catalog_guard.auth.requirements import Requirement
from catalog_guard.cancellation import OperationCancelled, guarded
from catalog_guard.directory.base import PrincipalDirectory
from catalog_guard.errors import UnknownPolicy
from catalog_guard.observability.logging import get_logger
from catalog_guard.outcomes import (
    CANCELLED,
    Allow,
    Decision,
    Deny,
    DenyReason,
    ReasonKind,
)

log = get_logger(__name__)


class PolicyEvaluator:
    def __init__(self, config: AuthorizationConfig) -> None:
        self._config = config

    async def evaluate(
        self,
        principal: Principal,
        policy_name: str,
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> Decision:
        """
        Judge `principal` against `policy_name`.

        Pure read over the snapshot: nothing is re-fetched during the decision.
        Raises `UnknownPolicy` for an unregistered name.
        """

        policy = self._resolve(policy_name)
        try:
            reasons = await guarded(self._judge(principal, policy), cancel=cancel, timeout=timeout)
        except OperationCancelled as e:
            log.info("authz.cancelled", policy=policy_name, principal=principal.id, detail=str(e))
            return CANCELLED

        decision: Decision = Deny(details=tuple(reasons)) if reasons else Allow()
        log.info(
            "authz.decision",
            policy=policy_name,
            principal=principal.id,
            allowed=decision.allowed,
            reasons=[str(r) for r in reasons],
        )
        return decision

    async def authorize(
        self,
        directory: PrincipalDirectory,
        principal_id: str,
        policy_name: str,
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> Decision:
        """Fetch the caller's snapshot exactly once, then evaluate it."""

        self._resolve(policy_name)
        try:
            principal = await guarded(
                directory.find_principal(principal_id), cancel=cancel, timeout=timeout
            )
        except OperationCancelled:
            return CANCELLED
        if principal is None:
            return Deny(
                details=(
                    DenyReason(
                        kind=ReasonKind.principal_not_found,
                        requirement=policy_name,
                        detail=principal_id,
                    ),
                )
            )
        return await self.evaluate(principal, policy_name, cancel=cancel, timeout=timeout)

    def _resolve(self, policy_name: str) -> Policy:
        policy = self._config.policy(policy_name)
        if policy is None:
            raise UnknownPolicy(policy_name)
        return policy

    async def _judge(self, principal: Principal, policy: Policy) -> list[DenyReason]:
        reasons: list[DenyReason] = []
        for requirement in policy.requirements:
            reasons.extend(await self._judge_requirement(principal, policy, requirement))
        return reasons

    async def _judge_requirement(
        self, principal: Principal, policy: Policy, requirement: Requirement
    ) -> list[DenyReason]:
        handlers = self._config.handlers_for(requirement.kind)
        if not handlers:
            log.error(
                "authz.unsatisfiable_requirement",
                policy=policy.name,
                requirement=requirement.label,
            )
            return [DenyReason(kind=ReasonKind.unsatisfiable, requirement=requirement.label)]

        errors: list[DenyReason] = []
        for handler in handlers:
            try:
                verdict = handler.evaluate(principal, requirement)
                if inspect.isawaitable(verdict):
                    verdict = await verdict
            except Exception as e:
                log.warning(
                    "authz.handler_error",
                    policy=policy.name,
                    handler=handler.name,
                    requirement=requirement.label,
                    error=repr(e),
                )
                errors.append(
                    DenyReason(
                        kind=ReasonKind.handler_error,
                        requirement=f"{handler.name}:{requirement.label}",
                        detail=repr(e),
                    )
                )
                continue
            if verdict == Verdict.succeed:
                return []

        return [DenyReason(kind=ReasonKind.failed, requirement=requirement.label), *errors]


# --- Module Notes -----------------------------------------------------------
# Handlers of one requirement are alternative grounds, not a chain: the first Succeed wins
# and later handlers are not consulted.
