"""Profile commands -- list, upload, and query the server version.

Provides ``compli profiles``, ``compli upload`` and ``compli version``.
All three need an active session; they check it with
:func:`~compli.auth.guard.require_session` before touching the network.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import typer

from compli.auth.guard import NOT_LOGGED_IN_MESSAGE, require_session
from compli.context import AppContext, get_context
from compli.exceptions import CompliError
from compli.exit_codes import EXIT_GENERIC_FAILURE
from compli.models import ServerType, Session
from compli.output import error, get_output, info, print_table, success
from compli.profile import archive_profile, check_profile


def _active_session(app_ctx: AppContext) -> Session:
    """Return the stored session or exit with the not-logged-in message."""
    if not require_session(app_ctx.store):
        error(NOT_LOGGED_IN_MESSAGE)
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    session = app_ctx.store.load()
    assert session is not None  # require_session() guarantees this
    return session


def profiles_command(ctx: typer.Context) -> None:
    """List all profiles available on the server.

    Example::

        compli profiles
        compli --json profiles
    """
    app_ctx = get_context(ctx)
    session = _active_session(app_ctx)

    try:
        with app_ctx.api(session.insecure) as api:
            profiles = api.profiles(session)
    except CompliError as exc:
        error(str(exc))
        error("Could not find any profiles")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    if not profiles:
        error("Could not find any profiles")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    rows = [[f"{p['org']}/{p['name']}"] for p in profiles]
    print_table(["Profile"], rows, title="Available profiles")


def upload_command(
    ctx: typer.Context,
    path: Path = typer.Argument(help="Profile directory or archive to upload."),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Overwrite an existing profile on the server."
    ),
) -> None:
    """Upload a local profile to the server.

    The profile is checked first. Directories are packed into a temporary
    ``.tar.gz``; archives are sent as they are. An existing profile with
    the same owner and name is only replaced with ``--overwrite``.

    Raises:
        typer.Exit: With code 1 on any check, login or upload failure.

    Example::

        compli upload ./linux-baseline
        compli upload ./linux-baseline --overwrite
    """
    app_ctx = get_context(ctx)
    session = _active_session(app_ctx)

    if not path.exists():
        error(f"Directory {path} does not exist.")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    problems: list[str] = []

    result = check_profile(path)
    if result.valid:
        info("Profile is valid")
    else:
        problems.append("Profile check failed. Please fix the profile before upload.")
        problems.extend(result.errors)

    if not session.token or not session.user:
        problems.append("Please login via `compli login`")

    owner = session.user or ""
    name = result.name or ""

    if result.valid and session.token and session.user and not overwrite:
        try:
            with app_ctx.api(session.insecure) as api:
                if api.exists(session, f"{owner}/{name}"):
                    problems.append("Profile exists on the server, use --overwrite")
        except CompliError as exc:
            problems.append(f"Could not check for an existing profile: {exc}")

    if problems:
        for problem in problems:
            error(problem)
        error(f"Found {len(problems)} error(s)")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    with tempfile.TemporaryDirectory(prefix="compli-") as tmp:
        if path.is_dir():
            archive = archive_profile(path, Path(tmp) / f"{name}.tar.gz")
            info(f"Generate temporary profile archive at {archive}")
        else:
            archive = path

        info(f"Start upload to {owner}/{name}")
        if session.server_type == ServerType.AUTOMATE:
            info("Uploading to Automate")
        else:
            info("Uploading to Compliance")

        try:
            with app_ctx.api(session.insecure) as api:
                api.upload(session, owner, name, archive)
        except CompliError as exc:
            error(f"Error during profile upload:\n{exc}")
            raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    success("Successfully uploaded profile")


def version_command(ctx: typer.Context) -> None:
    """Display the version of the compliance server.

    Example::

        compli version
    """
    app_ctx = get_context(ctx)
    session = _active_session(app_ctx)

    if session.server_type == ServerType.AUTOMATE:
        info("Version not available when logged in with Automate.")
        return

    try:
        with app_ctx.api(session.insecure) as api:
            payload = api.version(session.server)
    except CompliError as exc:
        error(str(exc))
        payload = None

    if not payload:
        error("Could not determine server version.")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    get_output().print_data(f"Compliance version: {payload['version']}")
