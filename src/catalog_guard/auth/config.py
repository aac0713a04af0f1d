"""
catalog_guard.auth.config

Policy registry + requirement/handler registry.

Responsibilities:
- Collect policies and handlers at start-up (`AuthorizationConfigBuilder`).
- Validate them (non-empty policies, unique names) and freeze them into an immutable
  `AuthorizationConfig` that is passed explicitly into the evaluator.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from catalog_guard.auth.handlers import Handler, default_handlers
from catalog_guard.auth.requirements import (
    AssertionRequirement,
    ClaimRequirement,
    Requirement,
    RoleRequirement,
)
from catalog_guard.errors import PolicyConfigurationError
from catalog_guard.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Policy:
    name: str
    requirements: tuple[Requirement, ...]


@dataclass(frozen=True, slots=True)
class AuthorizationConfig:
    """Read-only after construction; safe to share across concurrent requests."""

    policies: Mapping[str, Policy]
    handlers: Mapping[str, tuple[Handler, ...]]

    def policy(self, name: str) -> Policy | None:
        return self.policies.get(name)

    def handlers_for(self, kind: str) -> tuple[Handler, ...]:
        return self.handlers.get(kind, ())

    def unsatisfiable(self) -> list[tuple[str, str]]:
        """(policy, requirement label) pairs that no registered handler can judge."""

        return [
            (p.name, r.label)
            for p in self.policies.values()
            for r in p.requirements
            if not self.handlers_for(r.kind)
        ]


class AuthorizationConfigBuilder:
    def __init__(self) -> None:
        self._policies: dict[str, Policy] = {}
        self._handlers: dict[str, list[Handler]] = {}

    def add_policy(self, name: str, requirements: Iterable[Requirement]) -> AuthorizationConfigBuilder:
        reqs = tuple(requirements)
        if not name:
            raise PolicyConfigurationError("Policy name must be non-empty")
        if name in self._policies:
            raise PolicyConfigurationError(f"Duplicate policy '{name}'")
        if not reqs:
            raise PolicyConfigurationError(f"Policy '{name}' has no requirements")
        self._policies[name] = Policy(name=name, requirements=reqs)
        return self

    def add_handler(self, handler: Handler) -> AuthorizationConfigBuilder:
        if not handler.handles:
            raise PolicyConfigurationError(f"Handler '{handler.name}' declares no requirement kinds")
        for kind in sorted(handler.handles):
            self._handlers.setdefault(kind, []).append(handler)
        return self

    def add_handlers(self, handlers: Iterable[Handler]) -> AuthorizationConfigBuilder:
        for h in handlers:
            self.add_handler(h)
        return self

    def build(self) -> AuthorizationConfig:
        config = AuthorizationConfig(
            policies=MappingProxyType(dict(self._policies)),
            handlers=MappingProxyType({k: tuple(v) for k, v in self._handlers.items()}),
        )
        for policy_name, label in config.unsatisfiable():
            # Not fatal: such a requirement always fails, and says so at evaluation time.
            log.warning("authz.unsatisfiable_requirement", policy=policy_name, requirement=label)
        return config


def default_policies() -> dict[str, list[Requirement]]:
    return {
        "AdministratorsOnly": [RoleRequirement("Administrators")],
        "EditAlbums": [ClaimRequirement("EditAlbums")],
        "EditAlbumsAssertion": [AssertionRequirement("has_edit_albums_claim")],
        "QualifiedUser": [AssertionRequirement("qualified_user")],
    }


def build_default_config(
    extra_policies: Mapping[str, Iterable[Requirement]] | None = None,
) -> AuthorizationConfig:
    builder = AuthorizationConfigBuilder().add_handlers(default_handlers())
    policies: dict[str, Iterable[Requirement]] = dict(default_policies())
    policies.update(extra_policies or {})
    for name, reqs in policies.items():
        builder.add_policy(name, reqs)
    return builder.build()


# --- Module Notes -----------------------------------------------------------
# There is no module-level "current config": the composition root builds one and hands it
# to `PolicyEvaluator`, which keeps evaluation free of hidden global lookups.
