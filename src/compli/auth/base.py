"""Abstract token-exchange boundary.

This module defines the two foundational types of the auth subsystem:

- :class:`ExchangeResult` -- the ``(ok, message, token)`` outcome of a
  credential exchange.
- :class:`TokenExchanger` -- the abstract base class for whatever talks to
  the remote service on behalf of the login and logout orchestrators.

The production implementation is
:class:`~compli.client.exchanger.HttpTokenExchanger`; tests substitute a
recording fake. Exchange methods report rejection through
:class:`ExchangeResult` rather than raising, :meth:`TokenExchanger.fetch_version`
returns ``None`` when the version cannot be determined, and
:meth:`TokenExchanger.revoke` is fire-and-forget.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class ExchangeResult:
    """Outcome of trading a primary credential for an access token.

    Args:
        ok: Whether the remote service accepted the credential.
        message: Human-readable result, surfaced verbatim to the user.
        token: The access token on success, otherwise ``None``.

    Example::

        result = ExchangeResult(True, "Successfully fetched API access token", "tok")
        assert result.ok and result.token == "tok"
    """

    def __init__(self, ok: bool, message: str, token: Optional[str] = None):
        self.ok = ok
        self.message = message
        self.token = token

    def __repr__(self) -> str:
        return f"ExchangeResult(ok={self.ok!r}, message={self.message!r})"


class TokenExchanger(ABC):
    """Remote operations needed to establish and tear down a session."""

    @abstractmethod
    def exchange_password(
        self, url: str, user: str, password: str, insecure: bool
    ) -> ExchangeResult:
        """Trade a username and password for an access token.

        Args:
            url: Server URL including the API path.
            user: Username.
            password: Password.
            insecure: Disable TLS certificate verification.
        """
        ...

    @abstractmethod
    def exchange_refresh_token(
        self, url: str, refresh_token: str, insecure: bool
    ) -> ExchangeResult:
        """Trade a refresh token for an access token.

        Args:
            url: Server URL including the API path.
            refresh_token: The long-lived refresh token.
            insecure: Disable TLS certificate verification.
        """
        ...

    @abstractmethod
    def fetch_version(self, url: str, insecure: bool) -> Optional[dict[str, Any]]:
        """Return the server's version payload, or ``None`` if unavailable."""
        ...

    @abstractmethod
    def revoke(self, url: str, token: str, insecure: bool, basic_auth: bool) -> None:
        """Ask the server to invalidate *token*.

        Args:
            url: The logout endpoint.
            token: Token to revoke.
            insecure: Disable TLS certificate verification.
            basic_auth: Send the token as a basic-auth username instead of
                a bearer token.
        """
        ...
