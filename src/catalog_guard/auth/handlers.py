"""
catalog_guard.auth.handlers

Requirement handlers.

Responsibilities:
- Define the handler contract (`Handler`) and its three-valued verdict.
- Provide handlers for the built-in requirement variants.
- Provide the predicate handlers backing the default assertion requirements.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from typing import Protocol

from catalog_guard.auth.models import Principal
from catalog_guard.auth.requirements import (
    ASSERTION,
    CLAIM,
    DOMAIN,
    ROLE,
    AssertionRequirement,
    ClaimRequirement,
    DomainRequirement,
    Requirement,
    RoleRequirement,
)


class Verdict(enum.StrEnum):
    succeed = "SUCCEED"
    fail = "FAIL"
    abstain = "ABSTAIN"


class Handler(Protocol):
    """
    Judges one or more requirement kinds against a principal snapshot.

    `evaluate` may return the verdict directly or an awaitable of it.
    """

    name: str
    handles: frozenset[str]

    def evaluate(
        self, principal: Principal, requirement: Requirement
    ) -> Verdict | Awaitable[Verdict]: ...


def _verdict(ok: bool) -> Verdict:
    return Verdict.succeed if ok else Verdict.fail


class RoleHandler:
    name = "RoleHandler"
    handles = frozenset({ROLE})

    def evaluate(self, principal: Principal, requirement: Requirement) -> Verdict:
        if not isinstance(requirement, RoleRequirement):
            return Verdict.abstain
        return _verdict(principal.has_role(requirement.role_name))


class ClaimHandler:
    name = "ClaimHandler"
    handles = frozenset({CLAIM})

    def evaluate(self, principal: Principal, requirement: Requirement) -> Verdict:
        if not isinstance(requirement, ClaimRequirement):
            return Verdict.abstain
        return _verdict(principal.has_claim(requirement.claim_type, requirement.value))


class DomainHandler:
    name = "DomainHandler"
    handles = frozenset({DOMAIN})

    def evaluate(self, principal: Principal, requirement: Requirement) -> Verdict:
        if not isinstance(requirement, DomainRequirement):
            return Verdict.abstain
        if not principal.email:
            return Verdict.fail
        return _verdict(principal.email.lower().endswith(requirement.suffix.lower()))


Predicate = Callable[[Principal], bool | Awaitable[bool]]


class PredicateHandler:
    """
    Backs `AssertionRequirement(tag)` with a predicate.

    Abstains on any other tag, so several predicate handlers can be registered for the
    assertion kind and each only speaks to its own tag.
    """

    handles = frozenset({ASSERTION})

    def __init__(self, tag: str, predicate: Predicate, *, name: str | None = None) -> None:
        self.tag = tag
        self._predicate = predicate
        self.name = name or f"PredicateHandler[{tag}]"

    async def evaluate(self, principal: Principal, requirement: Requirement) -> Verdict:
        if not isinstance(requirement, AssertionRequirement) or requirement.predicate_tag != self.tag:
            return Verdict.abstain
        result = self._predicate(principal)
        if isinstance(result, Awaitable):
            result = await result
        return _verdict(bool(result))


ADMINISTRATORS_ROLE = "Administrators"
EDIT_ALBUMS_CLAIM = "EditAlbums"


def has_edit_albums_claim(principal: Principal) -> bool:
    return principal.has_claim(EDIT_ALBUMS_CLAIM)


def is_administrator(principal: Principal) -> bool:
    return principal.has_role(ADMINISTRATORS_ROLE)


def default_handlers() -> list[Handler]:
    # "qualified_user" has two independent grounds: the edit claim OR the admin role.
    return [
        RoleHandler(),
        ClaimHandler(),
        DomainHandler(),
        PredicateHandler("has_edit_albums_claim", has_edit_albums_claim),
        PredicateHandler("qualified_user", has_edit_albums_claim, name="CanEditAlbumHandler"),
        PredicateHandler("qualified_user", is_administrator, name="AdministratorsHandler"),
    ]


# --- Module Notes -----------------------------------------------------------
# Handlers must not fetch anything about the caller: they only read the snapshot.
