"""Shared test fixtures for compli.

Provides reusable fixtures for isolated config environments, a session
store in a temporary directory, a recording token exchanger, output
state management and a CLI runner. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from compli.auth.base import ExchangeResult, TokenExchanger
from compli.auth.store import SessionStore
from compli.context import CONTEXT_KEY, AppContext
from compli.models import GlobalConfig
from compli.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Recording exchanger
# ---------------------------------------------------------------------------


class FakeExchanger(TokenExchanger):
    """In-memory :class:`TokenExchanger` that records every call.

    Args:
        password_result: Returned by :meth:`exchange_password`.
        refresh_result: Returned by :meth:`exchange_refresh_token`.
        version: Returned by :meth:`fetch_version`.
        version_error: Raised by :meth:`fetch_version` instead, if set.
        revoke_error: Raised by :meth:`revoke`, if set.
    """

    def __init__(
        self,
        password_result: Optional[ExchangeResult] = None,
        refresh_result: Optional[ExchangeResult] = None,
        version: Optional[dict[str, Any]] = None,
        version_error: Optional[Exception] = None,
        revoke_error: Optional[Exception] = None,
    ) -> None:
        self.password_result = password_result or ExchangeResult(
            True, "Successfully fetched API access token", "access-from-password"
        )
        self.refresh_result = refresh_result or ExchangeResult(
            True, "Successfully fetched API access token", "access-from-refresh"
        )
        self.version = version
        self.version_error = version_error
        self.revoke_error = revoke_error
        self.calls: list[tuple[Any, ...]] = []

    def exchange_password(
        self, url: str, user: str, password: str, insecure: bool
    ) -> ExchangeResult:
        self.calls.append(("exchange_password", url, user, password, insecure))
        return self.password_result

    def exchange_refresh_token(
        self, url: str, refresh_token: str, insecure: bool
    ) -> ExchangeResult:
        self.calls.append(("exchange_refresh_token", url, refresh_token, insecure))
        return self.refresh_result

    def fetch_version(self, url: str, insecure: bool) -> Optional[dict[str, Any]]:
        self.calls.append(("fetch_version", url, insecure))
        if self.version_error is not None:
            raise self.version_error
        return self.version

    def revoke(self, url: str, token: str, insecure: bool, basic_auth: bool) -> None:
        self.calls.append(("revoke", url, token, insecure, basic_auth))
        if self.revoke_error is not None:
            raise self.revoke_error

    def names(self) -> list[str]:
        """Return just the method names, in call order."""
        return [call[0] for call in self.calls]


@pytest.fixture
def exchanger() -> FakeExchanger:
    return FakeExchanger()


# ---------------------------------------------------------------------------
# Config isolation and session store
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, forces the XDG layout,
    clears all COMPLI_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("compli.config._is_xdg_platform", lambda: True)

    for var in ["COMPLI_TIMEOUT", "COMPLI_API_PATH"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    """A SessionStore writing to a disposable file."""
    return SessionStore(tmp_path / "session" / "session.json")


@pytest.fixture
def app_obj(store: SessionStore, exchanger: FakeExchanger) -> dict[str, AppContext]:
    """Typer ``obj`` carrying an AppContext wired to the fake exchanger."""
    return {CONTEXT_KEY: AppContext(store=store, exchanger=exchanger, config=GlobalConfig())}


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
