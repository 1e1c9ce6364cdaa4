"""Session precondition check for session-dependent commands."""

from __future__ import annotations

from compli.auth.store import SessionStore

NOT_LOGGED_IN_MESSAGE = (
    "You need to login first with `compli login` or `compli login_automate`"
)


def require_session(store: SessionStore) -> bool:
    """Return whether a server is configured in *store*.

    This is a cheap precondition, not an auth check: token freshness is
    only discovered when the remote service rejects a request.
    """
    session = store.load()
    return session is not None and bool(session.server)
