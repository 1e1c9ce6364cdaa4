"""Tests for the session and settings models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from compli.models import (
    AutomateInfo,
    AutomateSession,
    AutomateTokenType,
    ComplianceSession,
    SessionAdapter,
    _version_tuple,
)


def _automate_record() -> dict:
    return {
        "server_type": "automate",
        "server": "https://automate.example.com/compliance/profiles",
        "user": "admin",
        "token": "dc",
        "automate": {"ent": "acme", "token_type": "dctoken"},
    }


class TestVersionTuple:
    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("0.16.19", (0, 16, 19)),
            ("1.6.0-rc1", (1, 6, 0)),
            ("2", (2,)),
            ("latest", ()),
        ],
    )
    def test_parse(self, version: str, expected: tuple[int, ...]) -> None:
        assert _version_tuple(version) == expected


class TestSupports:
    @pytest.mark.parametrize(
        ("version", "expected"),
        [("0.16.18", False), ("0.16.19", True), ("0.17.0", True), ("1.0.0", True)],
    )
    def test_oidc_threshold(self, version: str, expected: bool) -> None:
        session = ComplianceSession(server="s", version={"version": version})
        assert session.supports("oidc") is expected

    def test_unknown_version(self) -> None:
        assert ComplianceSession(server="s").supports("oidc") is False
        assert ComplianceSession(server="s", version={"api": "x"}).supports("oidc") is False

    def test_unversioned_feature(self) -> None:
        session = ComplianceSession(server="s", version={"version": "0.1.0"})
        assert session.supports("profiles") is True

    def test_automate_supports_nothing(self) -> None:
        session = AutomateSession.model_validate(_automate_record())
        assert session.supports("oidc") is False


class TestSessionAdapter:
    def test_discriminates_automate(self) -> None:
        session = SessionAdapter.validate_python(_automate_record())
        assert isinstance(session, AutomateSession)
        assert session.automate == AutomateInfo(ent="acme", token_type=AutomateTokenType.DCTOKEN)

    def test_discriminates_compliance(self) -> None:
        session = SessionAdapter.validate_python(
            {"server_type": "compliance", "server": "s", "token": "t"}
        )
        assert isinstance(session, ComplianceSession)

    def test_automate_cannot_carry_refresh_token(self) -> None:
        record = _automate_record()
        record["refresh_token"] = "rt"
        with pytest.raises(ValidationError):
            SessionAdapter.validate_python(record)

    def test_compliance_cannot_carry_automate_metadata(self) -> None:
        with pytest.raises(ValidationError):
            SessionAdapter.validate_python(
                {"server_type": "compliance", "server": "s", "automate": {"ent": "e", "token_type": "dctoken"}}
            )

    def test_unknown_server_type(self) -> None:
        with pytest.raises(ValidationError):
            SessionAdapter.validate_python({"server_type": "chef", "server": "s"})
