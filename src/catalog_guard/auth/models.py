"""
catalog_guard.auth.models

Auth domain models.

Responsibilities:
- Define the principal snapshot (`Principal`) evaluated by policies.
- Define `Role` and `Claim` value types shared with the directory and reconciler.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Role:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Claim:
    type: str
    value: str


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Immutable snapshot of an authenticated caller.

    Roles are unique by id. Claims keep insertion order and may repeat a type.
    """

    id: str
    name: str
    email: str = ""
    roles: frozenset[Role] = frozenset()
    claims: tuple[Claim, ...] = field(default_factory=tuple)

    @property
    def role_ids(self) -> frozenset[str]:
        return frozenset(r.id for r in self.roles)

    @property
    def role_names(self) -> frozenset[str]:
        return frozenset(r.name for r in self.roles)

    def has_role(self, name: str) -> bool:
        return name in self.role_names

    def has_claim(self, claim_type: str, value: str | None = None) -> bool:
        # "At least one" semantics: duplicate claim types are legal.
        return any(
            c.type == claim_type and (value is None or c.value == value) for c in self.claims
        )

    def claim_types(self) -> list[str]:
        return list(dict.fromkeys(c.type for c in self.claims))


# --- Module Notes -----------------------------------------------------------
# Snapshots are built by a `PrincipalDirectory` and never refreshed during a decision.
