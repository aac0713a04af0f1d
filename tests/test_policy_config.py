"""
tests.test_policy_config

Start-up validation of policies and the JSON policy document.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from catalog_guard.auth.config import AuthorizationConfigBuilder, build_default_config
from catalog_guard.auth.handlers import RoleHandler
from catalog_guard.auth.policy_file import load_policy_file, parse_policy_document
from catalog_guard.auth.requirements import (
    AssertionRequirement,
    ClaimRequirement,
    DomainRequirement,
    RoleRequirement,
)
from catalog_guard.errors import PolicyConfigurationError


def test_empty_policy_is_rejected() -> None:
    with pytest.raises(PolicyConfigurationError):
        AuthorizationConfigBuilder().add_policy("Nothing", [])


def test_duplicate_policy_name_is_rejected() -> None:
    builder = AuthorizationConfigBuilder().add_policy("P", [RoleRequirement("Administrators")])
    with pytest.raises(PolicyConfigurationError):
        builder.add_policy("P", [ClaimRequirement("EditAlbums")])


def test_built_config_is_read_only() -> None:
    config = (
        AuthorizationConfigBuilder()
        .add_handler(RoleHandler())
        .add_policy("P", [RoleRequirement("Administrators")])
        .build()
    )
    with pytest.raises(TypeError):
        config.policies["Q"] = config.policies["P"]  # type: ignore[index]


def test_unsatisfiable_requirements_are_listed() -> None:
    config = AuthorizationConfigBuilder().add_policy("P", [DomainRequirement("@126.com")]).build()
    assert config.unsatisfiable() == [("P", "DomainRequirement:@126.com")]


def test_default_config_has_back_office_policies() -> None:
    config = build_default_config()
    assert set(config.policies) >= {
        "AdministratorsOnly",
        "EditAlbums",
        "EditAlbumsAssertion",
        "QualifiedUser",
    }
    assert config.unsatisfiable() == []
    # Two independent grounds for the same assertion tag.
    names = [h.name for h in config.handlers_for("AssertionRequirement")]
    assert "CanEditAlbumHandler" in names and "AdministratorsHandler" in names


def test_policy_document_parses_every_kind() -> None:
    policies = parse_policy_document(
        """
        {"policies": {
            "Editors126": [
                {"kind": "role", "role_name": "Editors"},
                {"kind": "claim", "claim_type": "EditAlbums", "value": "pop"},
                {"kind": "domain", "suffix": "@126.com"},
                {"kind": "assertion", "predicate_tag": "qualified_user"}
            ]
        }}
        """
    )
    assert policies == {
        "Editors126": [
            RoleRequirement("Editors"),
            ClaimRequirement("EditAlbums", "pop"),
            DomainRequirement("@126.com"),
            AssertionRequirement("qualified_user"),
        ]
    }


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"policies": {"P": [{"kind": "unknown"}]}}',
        '{"policies": {"P": [{"kind": "role"}]}}',
    ],
)
def test_bad_policy_document_is_a_configuration_error(raw: str) -> None:
    with pytest.raises(PolicyConfigurationError):
        parse_policy_document(raw)


def test_file_policy_with_no_requirements_fails_at_build(tmp_path: Path) -> None:
    path = tmp_path / "policies.json"
    path.write_text('{"policies": {"Empty": []}}', encoding="utf-8")
    with pytest.raises(PolicyConfigurationError):
        build_default_config(load_policy_file(path))


def test_file_policy_overrides_default(tmp_path: Path) -> None:
    path = tmp_path / "policies.json"
    path.write_text(
        '{"policies": {"EditAlbums": [{"kind": "claim", "claim_type": "EditAlbums", "value": "yes"}]}}',
        encoding="utf-8",
    )
    config = build_default_config(load_policy_file(path))
    policy = config.policy("EditAlbums")
    assert policy is not None
    assert policy.requirements == (ClaimRequirement("EditAlbums", "yes"),)
