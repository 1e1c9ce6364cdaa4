"""Session commands -- log in, log in to Automate, log out.

Provides the ``compli login``, ``compli login_automate`` and
``compli logout`` top-level commands. Each one turns its options into a
flow via :mod:`compli.auth.flows`, hands it to the matching orchestrator
and maps the outcome onto console messages and an exit code.

Typical workflow::

    compli login https://compliance.example.com --user admin --password s3cret
    compli login https://compliance.example.com --user admin --token "$TOKEN"
    compli login_automate https://automate.example.com --user admin --ent default --dctoken "$DC"
    compli logout
"""

from __future__ import annotations

from typing import Optional

import typer

from compli.auth.flows import (
    AutomateCredentials,
    LoginCredentials,
    select_automate_flow,
    select_flow,
)
from compli.auth.login import LoginErrorReason, LoginOutcome
from compli.context import get_context
from compli.exit_codes import EXIT_GENERIC_FAILURE
from compli.output import debug, error, success, suggest


def login_command(
    ctx: typer.Context,
    server: str = typer.Argument(help="Compliance server URL, e.g. https://compliance.example.com."),
    insecure: bool = typer.Option(
        False,
        "--insecure/--not-insecure",
        "-k",
        help="Allow insecure SSL connections (skip certificate verification).",
    ),
    user: Optional[str] = typer.Option(None, "--user", help="Compliance username."),
    password: Optional[str] = typer.Option(None, "--password", help="Compliance password."),
    token: Optional[str] = typer.Option(None, "--token", help="Compliance access token."),
    refresh_token: Optional[str] = typer.Option(
        None, "--refresh-token", "--refresh_token", help="Compliance refresh token."
    ),
    api_path: Optional[str] = typer.Option(
        None, "--apipath", help="Path to the API (defaults to /api)."
    ),
) -> None:
    """Log in to a compliance SERVER.

    Exactly one credential combination is used, in this order:
    ``--user`` + ``--password`` (exchanged for a token), ``--user`` +
    ``--token`` (stored as-is), ``--user`` + ``--refresh-token`` (stored
    as-is), or a bare ``--refresh-token`` (exchanged for a token).

    Raises:
        typer.Exit: With code 1 if the options are incomplete, the server
            rejects the credential, or the session cannot be saved.

    Example::

        compli login https://compliance.example.com --user admin --password s3cret
        compli login https://compliance.example.com --refresh-token "$REFRESH" -k
    """
    app_ctx = get_context(ctx)
    creds = LoginCredentials(
        user=user, password=password, token=token, refresh_token=refresh_token
    )
    flow = select_flow(creds)
    debug(f"Selected login flow: {type(flow).__name__}")

    outcome = app_ctx.login_orchestrator().login(
        server,
        flow,
        insecure=insecure,
        api_path=api_path if api_path is not None else app_ctx.config.default_api_path,
    )
    _report(
        outcome,
        usage="compli login SERVER --user USER (--password PASSWORD | --token TOKEN | --refresh-token TOKEN)",
    )


def login_automate_command(
    ctx: typer.Context,
    server: str = typer.Argument(help="Automate server URL, e.g. https://automate.example.com."),
    user: Optional[str] = typer.Option(None, "--user", help="Automate username."),
    ent: Optional[str] = typer.Option(None, "--ent", help="Enterprise for Automate reporting."),
    dctoken: Optional[str] = typer.Option(None, "--dctoken", help="Data collector token."),
    usertoken: Optional[str] = typer.Option(None, "--usertoken", help="Automate user token."),
    insecure: bool = typer.Option(
        False,
        "--insecure/--not-insecure",
        "-k",
        help="Allow insecure SSL connections (skip certificate verification).",
    ),
) -> None:
    """Log in to an Automate SERVER.

    Requires ``--user`` and ``--ent`` plus exactly one of ``--dctoken`` or
    ``--usertoken``. The token is stored verbatim; the server is not
    contacted.

    Example::

        compli login_automate https://automate.example.com --user admin --ent default --dctoken "$DC"
    """
    app_ctx = get_context(ctx)
    flow = select_automate_flow(
        AutomateCredentials(user=user, ent=ent, dctoken=dctoken, usertoken=usertoken)
    )
    outcome = app_ctx.login_orchestrator().login_automate(server, flow, insecure=insecure)
    _report(
        outcome,
        usage="compli login_automate SERVER --user USER --ent ENT (--dctoken TOKEN | --usertoken TOKEN)",
    )


def logout_command(ctx: typer.Context) -> None:
    """Log out and remove the stored session.

    Compliance servers without OIDC support are asked to revoke the token
    first; the local session is removed either way.

    Raises:
        typer.Exit: With code 1 if the session file could not be removed.
    """
    outcome = get_context(ctx).logout_orchestrator().logout()
    if outcome.revoked:
        debug("Sent token revocation request")
    if outcome.ok:
        success(outcome.message)
        return
    error(outcome.message)
    raise typer.Exit(code=EXIT_GENERIC_FAILURE)


def _report(outcome: LoginOutcome, usage: str) -> None:
    if outcome.ok:
        success(outcome.message)
        return
    error(outcome.message)
    if outcome.error is not None and outcome.error.reason == LoginErrorReason.INPUT:
        suggest(f"Usage: {usage}")
    raise typer.Exit(code=EXIT_GENERIC_FAILURE)
