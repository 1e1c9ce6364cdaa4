"""Login orchestrator -- runs a selected flow and commits the session.

:class:`LoginOrchestrator` is the only writer of the session record. It
keeps a registry mapping each flow variant from :mod:`compli.auth.flows`
to a handler, dispatches the selected flow to it, and commits the
resulting record through :class:`~compli.auth.store.SessionStore` only
when the whole flow succeeded.

Expected failures (bad input, rejected credential, unwritable session
file) are returned as :class:`LoginOutcome` values carrying a
:class:`LoginError`; they are never raised to the caller.

See Also:
    :func:`~compli.auth.flows.select_flow` -- produces the flow variant.
    :class:`~compli.auth.base.TokenExchanger` -- the remote boundary.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Optional

import httpx

from compli.auth.base import TokenExchanger
from compli.auth.flows import (
    AccessTokenFlow,
    AutomateFlow,
    Flow,
    InputError,
    PasswordFlow,
    RefreshTokenUnverified,
    RefreshTokenVerified,
)
from compli.auth.store import SessionStore
from compli.exceptions import CompliError, PersistenceError
from compli.models import AutomateInfo, AutomateSession, AutomateTokenType, ComplianceSession, Session

logger = logging.getLogger(__name__)

AUTOMATE_PROFILES_PATH = "/compliance/profiles"

_TOKEN_DESCRIPTIONS = {
    AutomateTokenType.DCTOKEN: "data collector token",
    AutomateTokenType.USERTOKEN: "automate user token",
}


class LoginErrorReason(str, enum.Enum):
    INPUT = "input"
    EXCHANGE_REJECTED = "exchange-rejected"
    PERSISTENCE = "persistence"


class LoginError:
    """Why a login attempt failed.

    Args:
        reason: Failure category.
        message: Human-readable detail, shown to the user verbatim.
    """

    def __init__(self, reason: LoginErrorReason, message: str):
        self.reason = reason
        self.message = message

    def __repr__(self) -> str:
        return f"LoginError(reason={self.reason.value!r}, message={self.message!r})"


class LoginOutcome:
    """Result of :meth:`LoginOrchestrator.login`.

    Attributes:
        ok: ``True`` when a session was committed.
        message: Confirmation on success, error detail on failure.
        session: The committed record on success.
        error: The failure on error, otherwise ``None``.
    """

    def __init__(
        self,
        ok: bool,
        message: str,
        session: Optional[Session] = None,
        error: Optional[LoginError] = None,
    ):
        self.ok = ok
        self.message = message
        self.session = session
        self.error = error

    @classmethod
    def failed(cls, reason: LoginErrorReason, message: str) -> LoginOutcome:
        return cls(False, message, error=LoginError(reason, message))


def build_url(server: str, path: str) -> str:
    """Join a server base URL and an API path without doubling slashes."""
    if not path:
        return server.rstrip("/")
    return server.rstrip("/") + "/" + path.lstrip("/")


class LoginOrchestrator:
    """Runs login flows against a :class:`TokenExchanger` and a :class:`SessionStore`.

    Args:
        store: Where the committed session is written.
        exchanger: Performs password/refresh-token exchange and the
            version query.

    Example::

        orchestrator = LoginOrchestrator(SessionStore(), HttpTokenExchanger())
        flow = select_flow(LoginCredentials(user="admin", password="pw"))
        outcome = orchestrator.login("https://compliance.example.com", flow)
        if not outcome.ok:
            print(outcome.error.message)
    """

    def __init__(self, store: SessionStore, exchanger: TokenExchanger) -> None:
        self._store = store
        self._exchanger = exchanger
        self._handlers: dict[type, Callable[[Any, str, bool], LoginOutcome]] = {
            PasswordFlow: self._login_password,
            AccessTokenFlow: self._store_access_token,
            RefreshTokenUnverified: self._store_refresh_token,
            RefreshTokenVerified: self._login_refresh_token,
        }

    def login(
        self,
        server: str,
        flow: Flow,
        insecure: bool = False,
        api_path: str = "/api",
    ) -> LoginOutcome:
        """Log in to a compliance server.

        Args:
            server: Server base URL as typed by the user.
            flow: The flow chosen by :func:`~compli.auth.flows.select_flow`.
            insecure: Disable TLS certificate verification.
            api_path: Path appended to *server* to reach the API.

        Returns:
            A :class:`LoginOutcome`. On failure nothing has been persisted.
        """
        if isinstance(flow, InputError):
            return LoginOutcome.failed(LoginErrorReason.INPUT, flow.message)

        handler = self._handlers.get(type(flow))
        if handler is None:
            return LoginOutcome.failed(
                LoginErrorReason.INPUT,
                f"{type(flow).__name__} cannot be used to log in to a compliance server",
            )

        url = build_url(server, api_path)
        logger.debug("Running %s against %s", type(flow).__name__, url)
        return handler(flow, url, insecure)

    def login_automate(
        self, server: str, flow: Flow, insecure: bool = False
    ) -> LoginOutcome:
        """Store an Automate session. The exchanger is never contacted."""
        if isinstance(flow, InputError):
            return LoginOutcome.failed(LoginErrorReason.INPUT, flow.message)
        if not isinstance(flow, AutomateFlow):
            return LoginOutcome.failed(
                LoginErrorReason.INPUT,
                f"{type(flow).__name__} cannot be used to log in to an Automate server",
            )

        url = build_url(server, AUTOMATE_PROFILES_PATH)
        session = AutomateSession(
            server=url,
            user=flow.user,
            token=flow.token,
            insecure=insecure,
            automate=AutomateInfo(ent=flow.ent, token_type=flow.token_type),
        )
        message = (
            f"Stored configuration for Automate: '{url}' with user: '{flow.user}', "
            f"ent: '{flow.ent}' and your {_TOKEN_DESCRIPTIONS[flow.token_type]}"
        )
        return self._commit(session, message)

    # ------------------------------------------------------------------ #
    # Flow handlers
    # ------------------------------------------------------------------ #

    def _login_password(self, flow: PasswordFlow, url: str, insecure: bool) -> LoginOutcome:
        result = self._exchanger.exchange_password(url, flow.user, flow.password, insecure)
        if not result.ok:
            return LoginOutcome.failed(LoginErrorReason.EXCHANGE_REJECTED, result.message)
        session = ComplianceSession(
            server=url,
            user=flow.user,
            token=result.token,
            insecure=insecure,
            version=self._best_effort_version(url, insecure),
        )
        return self._commit(session, result.message)

    def _store_access_token(self, flow: AccessTokenFlow, url: str, insecure: bool) -> LoginOutcome:
        session = ComplianceSession(
            server=url,
            user=flow.user,
            token=flow.token,
            insecure=insecure,
            version=self._best_effort_version(url, insecure),
        )
        return self._commit(session, "API access token stored")

    def _store_refresh_token(
        self, flow: RefreshTokenUnverified, url: str, insecure: bool
    ) -> LoginOutcome:
        # Stored as given; no access token is minted until one is needed.
        session = ComplianceSession(
            server=url,
            user=flow.user,
            refresh_token=flow.refresh_token,
            insecure=insecure,
            version=self._best_effort_version(url, insecure),
        )
        return self._commit(session, "API refresh token stored")

    def _login_refresh_token(
        self, flow: RefreshTokenVerified, url: str, insecure: bool
    ) -> LoginOutcome:
        result = self._exchanger.exchange_refresh_token(url, flow.refresh_token, insecure)
        if not result.ok:
            return LoginOutcome.failed(LoginErrorReason.EXCHANGE_REJECTED, result.message)
        session = ComplianceSession(
            server=url,
            token=result.token,
            insecure=insecure,
            version=self._best_effort_version(url, insecure),
        )
        return self._commit(session, "API access token verified and stored")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _best_effort_version(self, url: str, insecure: bool) -> Optional[dict[str, Any]]:
        """Query the server version; any failure just leaves it unset."""
        try:
            return self._exchanger.fetch_version(url, insecure)
        except (httpx.HTTPError, CompliError) as exc:
            logger.debug("Version query against %s failed: %s", url, exc)
            return None

    def _commit(self, session: Session, message: str) -> LoginOutcome:
        try:
            self._store.save(session)
        except PersistenceError as exc:
            return LoginOutcome.failed(LoginErrorReason.PERSISTENCE, str(exc))
        return LoginOutcome(True, message, session=session)
