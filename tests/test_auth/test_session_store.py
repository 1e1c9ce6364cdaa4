"""Tests for the session store."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from compli.auth.store import SessionStore
from compli.exceptions import PersistenceError
from compli.models import (
    AutomateInfo,
    AutomateSession,
    AutomateTokenType,
    ComplianceSession,
)


def _compliance(**kwargs: object) -> ComplianceSession:
    defaults: dict[str, object] = {
        "server": "https://compliance.example.com/api",
        "user": "admin",
        "token": "tok",
    }
    defaults.update(kwargs)
    return ComplianceSession(**defaults)  # type: ignore[arg-type]


def _automate() -> AutomateSession:
    return AutomateSession(
        server="https://automate.example.com/compliance/profiles",
        user="admin",
        token="dc",
        automate=AutomateInfo(ent="default", token_type=AutomateTokenType.DCTOKEN),
    )


class TestSessionStore:
    def test_default_path_under_config_dir(self, isolated_config: Path) -> None:
        store = SessionStore()
        assert store.path == isolated_config / "config" / "compli" / "session.json"

    def test_load_returns_none_when_no_file(self, store: SessionStore) -> None:
        assert store.load() is None

    def test_save_and_load_compliance(self, store: SessionStore) -> None:
        session = _compliance(version={"version": "1.6.0"})
        store.save(session)
        assert store.load() == session

    def test_save_and_load_automate(self, store: SessionStore) -> None:
        session = _automate()
        store.save(session)
        loaded = store.load()
        assert isinstance(loaded, AutomateSession)
        assert loaded.automate.ent == "default"

    def test_save_omits_unset_fields(self, store: SessionStore) -> None:
        store.save(_compliance())
        data = json.loads(store.path.read_text())
        assert data["server_type"] == "compliance"
        assert "refresh_token" not in data
        assert "version" not in data

    def test_save_replaces_previous_record(self, store: SessionStore) -> None:
        store.save(_automate())
        store.save(_compliance(token="second"))
        loaded = store.load()
        assert isinstance(loaded, ComplianceSession)
        assert loaded.token == "second"
        assert "automate" not in json.loads(store.path.read_text())

    def test_file_permissions(self, store: SessionStore) -> None:
        store.save(_compliance())
        mode = stat.S_IMODE(os.stat(store.path).st_mode)
        assert mode == 0o600

    def test_corrupt_file_loads_as_none(self, store: SessionStore) -> None:
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text("{not json")
        assert store.load() is None

    def test_invalid_record_loads_as_none(self, store: SessionStore) -> None:
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text(json.dumps({"server_type": "automate", "server": "x"}))
        assert store.load() is None

    def test_mixed_flavor_record_rejected(self, store: SessionStore) -> None:
        store.path.parent.mkdir(parents=True, exist_ok=True)
        record = _automate().model_dump(mode="json")
        record["refresh_token"] = "rt"
        store.path.write_text(json.dumps(record))
        assert store.load() is None

    def test_failed_write_keeps_previous_record(self, store: SessionStore) -> None:
        store.save(_compliance(token="original"))
        with patch("compli.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError):
                store.save(_compliance(token="replacement"))
        loaded = store.load()
        assert loaded is not None
        assert loaded.token == "original"
        leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    def test_destroy_removes_file(self, store: SessionStore) -> None:
        store.save(_compliance())
        assert store.destroy() is True
        assert not store.path.exists()
        assert store.load() is None

    def test_destroy_without_file(self, store: SessionStore) -> None:
        assert store.destroy() is True

    def test_destroy_failure(self, store: SessionStore) -> None:
        store.save(_compliance())
        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            assert store.destroy() is False
