"""Persistent, singleton session store.

The active session lives in ``<config_dir>/session.json`` (typically
``~/.config/compli/session.json``). There is exactly one record at a time:
:meth:`SessionStore.save` fully replaces whatever was there, and
:meth:`SessionStore.destroy` removes the file entirely.

Writes go through :func:`~compli.config.atomic_write` with ``0o600``
permissions, so a failed write never leaves a torn or partially updated
record behind and tokens are never world-readable.

See Also:
    :class:`~compli.auth.login.LoginOrchestrator` -- the only writer.
    :class:`~compli.auth.logout.LogoutOrchestrator` -- the only destroyer.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from compli.config import atomic_write, get_config_dir
from compli.exceptions import PersistenceError
from compli.models import Session, SessionAdapter

logger = logging.getLogger(__name__)

_SESSION_FILENAME = "session.json"


class SessionStore:
    """Read/write/destroy the single persisted session record.

    Args:
        path: Location of the session file. Defaults to
            ``session.json`` under :func:`~compli.config.get_config_dir`.

    Example::

        store = SessionStore()
        store.save(ComplianceSession(server="https://c.example.com/api", token="t"))
        session = store.load()
        assert session.token == "t"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else get_config_dir() / _SESSION_FILENAME

    @property
    def path(self) -> Path:
        """The filesystem path to the session file."""
        return self._path

    def save(self, session: Session) -> None:
        """Persist *session* atomically with ``0o600`` permissions.

        Raises:
            PersistenceError: If the file cannot be written. The previous
                record, if any, is left unchanged.
        """
        data = SessionAdapter.dump_python(session, mode="json", exclude_none=True)
        text = json.dumps(data, indent=2) + "\n"
        try:
            atomic_write(self._path, text, mode=0o600)
        except OSError as exc:
            raise PersistenceError(f"Could not write session to {self._path}: {exc}") from exc
        logger.debug("Stored %s session for %s", session.server_type, session.server)

    def load(self) -> Optional[Session]:
        """Load the stored session.

        Returns:
            The validated session, or ``None`` if the file does not exist or
            cannot be parsed.
        """
        if not self._path.is_file():
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
            return SessionAdapter.validate_python(json.loads(text))
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            logger.debug("Ignoring unreadable session at %s: %s", self._path, exc)
            return None

    def destroy(self) -> bool:
        """Delete the session file.

        Returns:
            ``True`` if the record is gone afterwards (including when there
            was nothing to delete), ``False`` if the deletion failed.
        """
        try:
            self._path.unlink()
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.debug("Could not delete session at %s: %s", self._path, exc)
            return False
        return True
