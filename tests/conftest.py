"""
tests.conftest

Shared fixtures.

Responsibilities:
- A controllable clock for cache freshness tests.
- A seeded in-memory principal directory.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from catalog_guard.directory.memory import InMemoryPrincipalDirectory


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass(slots=True)
class Seeded:
    directory: InMemoryPrincipalDirectory
    alice: str
    bob: str
    admins: str
    editors: str


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def seeded() -> Seeded:
    directory = InMemoryPrincipalDirectory()
    return Seeded(
        directory=directory,
        alice=directory.add_user("alice", email="alice@126.com", user_id="u-alice"),
        bob=directory.add_user("bob", email="bob@example.org", user_id="u-bob"),
        admins=directory.seed_role("Administrators", role_id="r-admins"),
        editors=directory.seed_role("Editors", role_id="r-editors"),
    )
