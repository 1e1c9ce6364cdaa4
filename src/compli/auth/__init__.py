"""Session authentication for compli.

This package owns the single persisted session and everything that
creates, checks or removes it:

- :func:`select_flow` / :func:`select_automate_flow` -- pick exactly one
  login flow from the supplied credential options.
- :class:`LoginOrchestrator` -- runs the flow and commits the session.
- :func:`require_session` -- precondition for session-dependent commands.
- :class:`LogoutOrchestrator` -- optional remote revocation, then local
  teardown.
- :class:`SessionStore` -- atomic read/write/destroy of the record.
- :class:`TokenExchanger` -- abstract boundary to the remote service.

Typical usage::

    from compli.auth import LoginCredentials, LoginOrchestrator, SessionStore, select_flow
    from compli.client import HttpTokenExchanger

    flow = select_flow(LoginCredentials(user="admin", token="abc"))
    outcome = LoginOrchestrator(SessionStore(), HttpTokenExchanger()).login(server, flow)
"""

from compli.auth.base import ExchangeResult, TokenExchanger
from compli.auth.flows import (
    AutomateCredentials,
    LoginCredentials,
    select_automate_flow,
    select_flow,
)
from compli.auth.guard import require_session
from compli.auth.login import LoginError, LoginOrchestrator, LoginOutcome
from compli.auth.logout import LogoutOrchestrator, LogoutOutcome
from compli.auth.store import SessionStore

__all__ = [
    "AutomateCredentials",
    "ExchangeResult",
    "LoginCredentials",
    "LoginError",
    "LoginOrchestrator",
    "LoginOutcome",
    "LogoutOrchestrator",
    "LogoutOutcome",
    "SessionStore",
    "TokenExchanger",
    "require_session",
    "select_automate_flow",
    "select_flow",
]
