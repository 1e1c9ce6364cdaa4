"""Tests for ``compli login``, ``compli login_automate`` and ``compli logout``."""

from __future__ import annotations

from typing import Any

from compli.app import app
from compli.auth.base import ExchangeResult
from compli.auth.store import SessionStore
from compli.models import AutomateSession, ComplianceSession
from conftest import FakeExchanger

SERVER = "https://compliance.example.com"


def _invoke(cli_runner: Any, app_obj: dict, *args: str) -> Any:
    return cli_runner.invoke(app, ["--no-color", *args], obj=app_obj)


class TestLoginCommand:
    def test_password_login(
        self, cli_runner: Any, app_obj: dict, store: SessionStore, exchanger: FakeExchanger
    ) -> None:
        result = _invoke(cli_runner, app_obj, "login", SERVER, "--user", "admin", "--password", "pw")

        assert result.exit_code == 0, result.output
        assert "Successfully fetched API access token" in result.output
        saved = store.load()
        assert isinstance(saved, ComplianceSession)
        assert saved.server == SERVER + "/api"
        assert saved.token == "access-from-password"

    def test_token_login(self, cli_runner: Any, app_obj: dict, store: SessionStore) -> None:
        result = _invoke(cli_runner, app_obj, "login", SERVER, "--user", "admin", "--token", "tok")

        assert result.exit_code == 0, result.output
        assert "API access token stored" in result.output
        saved = store.load()
        assert saved is not None
        assert saved.token == "tok"

    def test_refresh_token_underscore_alias(
        self, cli_runner: Any, app_obj: dict, store: SessionStore
    ) -> None:
        result = _invoke(
            cli_runner, app_obj, "login", SERVER, "--user", "admin", "--refresh_token", "rt"
        )
        assert result.exit_code == 0, result.output
        assert "API refresh token stored" in result.output

    def test_bare_refresh_token(
        self, cli_runner: Any, app_obj: dict, exchanger: FakeExchanger
    ) -> None:
        result = _invoke(cli_runner, app_obj, "login", SERVER, "--refresh-token", "rt")
        assert result.exit_code == 0, result.output
        assert "API access token verified and stored" in result.output
        assert exchanger.names()[0] == "exchange_refresh_token"

    def test_insecure_and_apipath(
        self, cli_runner: Any, app_obj: dict, store: SessionStore, exchanger: FakeExchanger
    ) -> None:
        result = _invoke(
            cli_runner, app_obj,
            "login", SERVER, "-k", "--apipath", "/v2", "--user", "a", "--password", "p",
        )
        assert result.exit_code == 0, result.output
        assert exchanger.calls[0] == ("exchange_password", SERVER + "/v2", "a", "p", True)
        saved = store.load()
        assert saved is not None
        assert saved.insecure is True

    def test_missing_credentials(
        self, cli_runner: Any, app_obj: dict, store: SessionStore, exchanger: FakeExchanger
    ) -> None:
        result = _invoke(cli_runner, app_obj, "login", SERVER, "--user", "admin")

        assert result.exit_code == 1
        assert "Missing credential for user 'admin'" in result.output
        assert "Usage: compli login" in result.output
        assert exchanger.calls == []
        assert store.load() is None

    def test_rejected_password(
        self, cli_runner: Any, app_obj: dict, store: SessionStore, exchanger: FakeExchanger
    ) -> None:
        exchanger.password_result = ExchangeResult(False, "Failed to authenticate to the server")
        result = _invoke(cli_runner, app_obj, "login", SERVER, "--user", "a", "--password", "bad")

        assert result.exit_code == 1
        assert "Failed to authenticate" in result.output
        assert "Usage:" not in result.output
        assert store.load() is None


class TestLoginAutomateCommand:
    def test_dctoken(self, cli_runner: Any, app_obj: dict, store: SessionStore) -> None:
        result = _invoke(
            cli_runner, app_obj,
            "login_automate", "https://automate.example.com",
            "--user", "admin", "--ent", "acme", "--dctoken", "dc",
        )

        assert result.exit_code == 0, result.output
        assert "Stored configuration for Automate" in result.output
        saved = store.load()
        assert isinstance(saved, AutomateSession)
        assert saved.server == "https://automate.example.com/compliance/profiles"

    def test_both_tokens(self, cli_runner: Any, app_obj: dict, store: SessionStore) -> None:
        result = _invoke(
            cli_runner, app_obj,
            "login_automate", "https://automate.example.com",
            "--user", "admin", "--ent", "acme", "--dctoken", "dc", "--usertoken", "ut",
        )
        assert result.exit_code == 1
        assert "Supply only one of --dctoken or --usertoken" in result.output
        assert store.load() is None

    def test_missing_ent(self, cli_runner: Any, app_obj: dict) -> None:
        result = _invoke(
            cli_runner, app_obj,
            "login_automate", "https://automate.example.com", "--user", "admin", "--dctoken", "dc",
        )
        assert result.exit_code == 1
        assert "Missing --ent" in result.output


class TestLogoutCommand:
    def test_logout_after_login(
        self, cli_runner: Any, app_obj: dict, store: SessionStore, exchanger: FakeExchanger
    ) -> None:
        exchanger.version = {"version": "0.16.0"}
        _invoke(cli_runner, app_obj, "login", SERVER, "--user", "admin", "--token", "tok")

        result = _invoke(cli_runner, app_obj, "logout")

        assert result.exit_code == 0, result.output
        assert "Successfully logged out" in result.output
        assert exchanger.names()[-1] == "revoke"
        assert store.load() is None

    def test_logout_without_session(self, cli_runner: Any, app_obj: dict) -> None:
        result = _invoke(cli_runner, app_obj, "logout")
        assert result.exit_code == 0
        assert "Successfully logged out" in result.output
