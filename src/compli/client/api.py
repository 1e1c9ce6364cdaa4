"""Wire client for the compliance-reporting API.

:class:`ComplianceAPI` wraps :class:`httpx.Client` and knows the endpoint
shapes of both backend flavors:

- **Token exchange** -- ``POST <url>/login`` with a password or refresh
  token (compliance only).
- **Version** -- ``GET <url>/version``.
- **Revocation** -- ``POST <url>/logout``.
- **Profiles** -- listing, existence checks and archive upload, with
  bearer auth for compliance servers and ``chef-delivery-*`` headers for
  Automate servers.

Transport failures surface as :class:`~compli.exceptions.ConnectionError_`.
Status handling is per endpoint: the exchange and version calls interpret
status codes themselves, the profile calls raise
:class:`~compli.exceptions.APIError` for non-2xx responses.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import httpx

from compli.auth.base import ExchangeResult
from compli.auth.login import build_url
from compli.exceptions import APIError, ConnectionError_
from compli.models import AutomateSession, AutomateTokenType, Session

logger = logging.getLogger(__name__)

FETCHED_TOKEN_MESSAGE = "Successfully fetched API access token"

_ARCHIVE_CONTENT_TYPES = {".zip": "application/zip"}
_DEFAULT_ARCHIVE_CONTENT_TYPE = "application/x-gzip"


def archive_content_type(archive: Path) -> str:
    """Return the upload ``Content-Type`` for *archive*: zip or gzip tarball."""
    return _ARCHIVE_CONTENT_TYPES.get(archive.suffix.lower(), _DEFAULT_ARCHIVE_CONTENT_TYPE)


def session_headers(session: Session) -> dict[str, str]:
    """Return the auth headers for requests made on behalf of *session*."""
    if isinstance(session, AutomateSession):
        headers = {
            "chef-delivery-user": session.user,
            "chef-delivery-enterprise": session.automate.ent,
        }
        if session.automate.token_type == AutomateTokenType.DCTOKEN:
            headers["x-data-collector-token"] = session.token
        else:
            headers["chef-delivery-token"] = session.token
        return headers
    if session.token:
        return {"Authorization": f"Bearer {session.token}"}
    return {}


class ComplianceAPI:
    """HTTP client for one server.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        insecure: Disable TLS certificate verification.
        timeout: Request timeout in seconds.
        transport: Optional custom httpx transport (used by tests to
            install an :class:`httpx.MockTransport`).

    Example::

        with ComplianceAPI(insecure=True) as api:
            info = api.version("https://compliance.example.com/api")
    """

    def __init__(
        self,
        insecure: bool = False,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._insecure = insecure
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ComplianceAPI:
        self._client = httpx.Client(
            timeout=self._timeout,
            verify=not self._insecure,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Token exchange
    # ------------------------------------------------------------------ #

    def login_password(self, url: str, user: str, password: str) -> ExchangeResult:
        """Exchange a username and password; the 200 response body is the token.

        An empty body is a rejection.
        """
        response = self.request(
            "POST", build_url(url, "/login"), json_body={"userid": user, "password": password}
        )
        if response.status_code != 200:
            return ExchangeResult(False, _auth_failure_message(url, response))
        token = response.text.strip()
        if not token:
            return ExchangeResult(False, f"Token response from {url} is empty")
        return ExchangeResult(True, FETCHED_TOKEN_MESSAGE, token)

    def login_refresh_token(self, url: str, refresh_token: str) -> ExchangeResult:
        """Exchange a refresh token; the 200 response carries ``access_token``."""
        response = self.request(
            "POST", build_url(url, "/login"), json_body={"token": refresh_token}
        )
        if response.status_code != 200:
            return ExchangeResult(False, _auth_failure_message(url, response))
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            return ExchangeResult(False, f"Invalid token response from {url}: {exc}")
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            return ExchangeResult(False, f"Token response from {url} has no 'access_token'")
        return ExchangeResult(True, FETCHED_TOKEN_MESSAGE, access_token)

    # ------------------------------------------------------------------ #
    # Server info
    # ------------------------------------------------------------------ #

    def version(self, url: str) -> Optional[dict[str, Any]]:
        """Return the ``/version`` payload, or ``None`` if it has no usable version."""
        response = self.request("GET", build_url(url, "/version"))
        if response.status_code != 200 or not response.content:
            return None
        try:
            data = response.json()
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict) or not data.get("version"):
            return None
        return data

    def logout(self, url: str, token: str, basic_auth: bool) -> httpx.Response:
        """POST to the logout endpoint carrying *token*."""
        headers: dict[str, str] = {}
        auth: Optional[httpx.BasicAuth] = None
        if basic_auth:
            auth = httpx.BasicAuth(token, "")
        else:
            headers["Authorization"] = f"Bearer {token}"
        return self.request("POST", url, headers=headers, auth=auth)

    # ------------------------------------------------------------------ #
    # Profiles
    # ------------------------------------------------------------------ #

    def profiles(self, session: Session) -> list[dict[str, Any]]:
        """List the profiles visible to *session*.

        Every returned dict has at least ``org`` and ``name`` keys.

        Raises:
            APIError: If the server answers with a non-2xx status.
        """
        if isinstance(session, AutomateSession):
            url = session.server
        else:
            url = build_url(session.server, "/user/compliance")
        response = self.request("GET", url, headers=session_headers(session))
        _raise_for_status(response)
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise APIError(f"Invalid profile listing from {url}: {exc}") from exc
        return _normalise_profiles(data)

    def exists(self, session: Session, profile: str) -> bool:
        """Return whether ``owner/name`` *profile* is already on the server."""
        return any(f"{p['org']}/{p['name']}" == profile for p in self.profiles(session))

    def upload(self, session: Session, owner: str, name: str, archive: Path) -> None:
        """Upload a profile archive.

        Raises:
            APIError: If the server rejects the upload.
        """
        if isinstance(session, AutomateSession):
            url = build_url(session.server, quote(owner, safe=""))
        else:
            url = build_url(
                session.server,
                f"/owners/{quote(owner, safe='')}/compliance/{quote(name, safe='')}/tar",
            )
        headers = session_headers(session)
        headers["Content-Type"] = archive_content_type(archive)
        response = self.request("POST", url, headers=headers, content=archive.read_bytes())
        _raise_for_status(response)

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        content: Optional[bytes] = None,
        auth: Optional[httpx.Auth] = None,
    ) -> httpx.Response:
        """Send a request, mapping any failure to get a response to :class:`ConnectionError_`.

        That covers transport errors (refused, dropped or timed-out
        connections, proxy failures, a URL without a scheme) and redirect
        loops.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        kwargs: dict[str, Any] = {
            "headers": {"Accept": "application/json", **(headers or {})},
        }
        if json_body is not None:
            kwargs["json"] = json_body
        elif content is not None:
            kwargs["content"] = content
        if auth is not None:
            kwargs["auth"] = auth

        logger.debug("%s %s", method, url)
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise ConnectionError_(f"Connection to {url} failed: {exc}") from exc


def _auth_failure_message(url: str, response: httpx.Response) -> str:
    return (
        f"Failed to authenticate to {url}\n"
        f"Response code: {response.status_code}\n"
        f"Body: {response.text}"
    )


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except json.JSONDecodeError:
        msg = response.text[:200] if response.text else ""
    prefix = f"HTTP {status}"
    raise APIError(f"{prefix}: {msg}" if msg else prefix, status_code=status)


def _normalise_profiles(data: Any) -> list[dict[str, Any]]:
    """Flatten either listing shape into ``[{"org": ..., "name": ...}, ...]``.

    Compliance servers answer ``{owner: {name: profile}}``; Automate
    servers answer a list (or ``{"profiles": [...]}``) whose entries carry
    ``owner_id`` instead of ``org``.
    """
    profiles: list[dict[str, Any]] = []
    if isinstance(data, dict) and isinstance(data.get("profiles"), list):
        data = data["profiles"]

    if isinstance(data, list):
        for entry in data:
            if not isinstance(entry, dict):
                continue
            profile = dict(entry)
            profile.setdefault("org", entry.get("owner_id", ""))
            profile.setdefault("name", "")
            profiles.append(profile)
    elif isinstance(data, dict):
        for owner, owned in data.items():
            if not isinstance(owned, dict):
                continue
            for name, entry in owned.items():
                profile = dict(entry) if isinstance(entry, dict) else {}
                profile.setdefault("org", owner)
                profile.setdefault("name", name)
                profiles.append(profile)
    return profiles
