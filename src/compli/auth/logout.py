"""Logout orchestrator -- optional remote revocation, then local teardown.

Remote revocation is attempted only for compliance sessions that hold a
token and whose server predates OIDC support. Automate sessions are never
revoked remotely. Whatever the revocation does, the local session record
is destroyed afterwards, and success is reported from that destruction
alone.
"""

from __future__ import annotations

import logging

import httpx

from compli.auth.base import TokenExchanger
from compli.auth.login import build_url
from compli.auth.store import SessionStore
from compli.exceptions import CompliError
from compli.models import ServerType, Session

logger = logging.getLogger(__name__)


class LogoutOutcome:
    """Result of :meth:`LogoutOrchestrator.logout`.

    Attributes:
        ok: Whether the local session record is gone.
        message: ``Successfully logged out`` or ``Could not log out``.
        revoked: Whether a remote revocation request was sent.
    """

    def __init__(self, ok: bool, message: str, revoked: bool = False):
        self.ok = ok
        self.message = message
        self.revoked = revoked


def needs_revocation(session: Session) -> bool:
    """Return whether logging out of *session* requires a remote revoke call."""
    if session.server_type == ServerType.AUTOMATE:
        return False
    if not session.token:
        return False
    return not session.supports("oidc")


class LogoutOrchestrator:
    """Tears down the active session.

    Args:
        store: The session store to destroy.
        exchanger: Sends the revocation request when one is needed.
    """

    def __init__(self, store: SessionStore, exchanger: TokenExchanger) -> None:
        self._store = store
        self._exchanger = exchanger

    def logout(self) -> LogoutOutcome:
        """Revoke remotely if required, then destroy the local record.

        Returns:
            A :class:`LogoutOutcome` whose ``ok`` reflects only the local
            destruction.
        """
        revoked = False
        session = self._store.load()
        try:
            if session is not None and needs_revocation(session):
                revoked = True
                self._revoke(session)
        finally:
            destroyed = self._store.destroy()

        if destroyed:
            return LogoutOutcome(True, "Successfully logged out", revoked=revoked)
        return LogoutOutcome(False, "Could not log out", revoked=revoked)

    def _revoke(self, session: Session) -> None:
        url = build_url(session.server, "/logout")
        try:
            self._exchanger.revoke(
                url,
                session.token,  # type: ignore[arg-type]
                session.insecure,
                not session.supports("oidc"),
            )
        except (httpx.HTTPError, CompliError) as exc:
            logger.debug("Revoking token at %s failed: %s", url, exc)
