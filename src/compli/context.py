"""Runtime collaborators shared by every command.

:func:`~compli.app.main_callback` builds one :class:`AppContext` per
invocation and stores it on the Typer context object. Commands fetch it
with :func:`get_context` instead of constructing stores or clients
themselves, which is also how tests substitute a temporary store, a fake
exchanger or an :class:`httpx.MockTransport`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
import typer

from compli.auth.base import TokenExchanger
from compli.auth.login import LoginOrchestrator
from compli.auth.logout import LogoutOrchestrator
from compli.auth.store import SessionStore
from compli.client.api import ComplianceAPI
from compli.models import GlobalConfig

CONTEXT_KEY = "app"


@dataclass
class AppContext:
    """Everything a command needs to talk to the session and the server."""

    store: SessionStore
    exchanger: TokenExchanger
    config: GlobalConfig
    transport: Optional[httpx.BaseTransport] = None

    def login_orchestrator(self) -> LoginOrchestrator:
        return LoginOrchestrator(self.store, self.exchanger)

    def logout_orchestrator(self) -> LogoutOrchestrator:
        return LogoutOrchestrator(self.store, self.exchanger)

    def api(self, insecure: bool) -> ComplianceAPI:
        """Return an unopened :class:`ComplianceAPI` for the current server."""
        return ComplianceAPI(
            insecure=insecure,
            timeout=self.config.request.timeout,
            transport=self.transport,
        )


def get_context(ctx: typer.Context) -> AppContext:
    """Return the :class:`AppContext` installed by the root callback."""
    obj = ctx.find_root().obj
    if not isinstance(obj, dict) or CONTEXT_KEY not in obj:
        raise RuntimeError("compli context not initialised -- run through the compli app")
    return obj[CONTEXT_KEY]
