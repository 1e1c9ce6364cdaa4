"""HTTP implementation of :class:`~compli.auth.base.TokenExchanger`.

Each call opens a short-lived :class:`~compli.client.api.ComplianceAPI`
configured with the call's ``insecure`` flag, so TLS verification always
matches the server being logged in to.
The exchange methods never raise for network or HTTP failures; those come
back as a rejected :class:`~compli.auth.base.ExchangeResult`.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from compli.auth.base import ExchangeResult, TokenExchanger
from compli.client.api import ComplianceAPI
from compli.exceptions import ConnectionError_


class HttpTokenExchanger(TokenExchanger):
    """Talks to the compliance API's ``/login``, ``/version`` and ``/logout``.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional httpx transport override, for tests.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _api(self, insecure: bool) -> ComplianceAPI:
        return ComplianceAPI(insecure=insecure, timeout=self._timeout, transport=self._transport)

    def exchange_password(
        self, url: str, user: str, password: str, insecure: bool
    ) -> ExchangeResult:
        try:
            with self._api(insecure) as api:
                return api.login_password(url, user, password)
        except (ConnectionError_, httpx.HTTPError) as exc:
            return ExchangeResult(False, str(exc))

    def exchange_refresh_token(
        self, url: str, refresh_token: str, insecure: bool
    ) -> ExchangeResult:
        try:
            with self._api(insecure) as api:
                return api.login_refresh_token(url, refresh_token)
        except (ConnectionError_, httpx.HTTPError) as exc:
            return ExchangeResult(False, str(exc))

    def fetch_version(self, url: str, insecure: bool) -> Optional[dict[str, Any]]:
        with self._api(insecure) as api:
            return api.version(url)

    def revoke(self, url: str, token: str, insecure: bool, basic_auth: bool) -> None:
        with self._api(insecure) as api:
            api.logout(url, token, basic_auth)
