"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for compli:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.compli/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~compli.models.GlobalConfig`
  JSON file storing request defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the global config file into the effective
  settings.

The session record itself is not handled here; it belongs to
:class:`~compli.auth.store.SessionStore`, which shares :func:`atomic_write`.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from compli.exceptions import ConfigError
from compli.models import GlobalConfig

_APP_NAME = "compli"
_CONFIG_FILENAME = "config.json"

ENV_TIMEOUT = "COMPLI_TIMEOUT"
ENV_API_PATH = "COMPLI_API_PATH"


# --- Directories ---


def _is_xdg_platform() -> bool:
    """Linux and the BSDs follow the XDG base-directory layout."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(env_var: str, home_segments: tuple[str, ...], fallback: tuple[str, ...]) -> Path:
    """Resolve and create one of compli's directories.

    On XDG platforms the directory is ``$<env_var>/compli``, or
    ``~/<home_segments>/compli`` when the variable is unset or empty.
    Elsewhere it is ``~/.compli/<fallback>``.
    """
    if _is_xdg_platform():
        base = os.environ.get(env_var) or str(Path.home().joinpath(*home_segments))
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``session.json`` and ``config.json``.

    ``$XDG_CONFIG_HOME/compli`` (default ``~/.config/compli``) on Linux and
    BSD, ``~/.compli`` on macOS and Windows.
    """
    return _app_dir("XDG_CONFIG_HOME", (".config",), ())


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``$XDG_DATA_HOME/compli`` (default ``~/.local/share/compli``) on Linux
    and BSD, ``~/.compli/logs`` on macOS and Windows.
    """
    return _app_dir("XDG_DATA_HOME", (".local", "share"), ("logs",))


# --- Atomic writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* in a single rename.

    The content goes to a sibling temp file first, is fsynced, and is then
    moved over *path* with :func:`os.replace`. *mode*, when given, is set on
    the temp file before anything is written to it. If any step fails the
    temp file is removed, *path* keeps its previous content, and the
    exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if mode is not None:
            os.fchmod(fd, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            fd = -1
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if fd != -1:
            os.close(fd)
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~compli.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_timeout: Optional[float] = None,
    cli_api_path: Optional[str] = None,
) -> GlobalConfig:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_timeout``, ``cli_api_path``)
        2. Environment variables (``COMPLI_TIMEOUT``, ``COMPLI_API_PATH``)
        3. User config (``~/.config/compli/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the config file is invalid or ``COMPLI_TIMEOUT``
            is not a number.
    """
    config = load_global_config()

    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            config.request.timeout = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_TIMEOUT} must be a number of seconds, got {env_timeout!r}"
            ) from exc

    env_api_path = os.environ.get(ENV_API_PATH)
    if env_api_path:
        config.default_api_path = env_api_path

    if cli_timeout is not None:
        config.request.timeout = cli_timeout
    if cli_api_path is not None:
        config.default_api_path = cli_api_path

    return config
