"""Credential-flow selection.

The login command accepts several optional credential options that
overlap. :func:`select_flow` maps whichever combination the user supplied
onto exactly one flow, and :func:`select_automate_flow` does the same for
Automate servers.

Precedence is data: :data:`COMPLIANCE_RULES` is an ordered tuple of
``(predicate, factory)`` pairs and the first predicate that matches wins.

============================  =====================================
Inputs present                Flow
============================  =====================================
user + password               :class:`PasswordFlow`
user + token                  :class:`AccessTokenFlow`
user + refresh_token          :class:`RefreshTokenUnverified`
refresh_token                 :class:`RefreshTokenVerified`
anything else                 :class:`InputError`
============================  =====================================

Empty strings count as absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from compli.models import AutomateTokenType


@dataclass(frozen=True)
class LoginCredentials:
    """Credential options given to ``compli login``."""

    user: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class AutomateCredentials:
    """Credential options given to ``compli login_automate``."""

    user: Optional[str] = None
    ent: Optional[str] = None
    dctoken: Optional[str] = None
    usertoken: Optional[str] = None


# --- Flow variants ---


@dataclass(frozen=True)
class PasswordFlow:
    """Exchange username and password for an access token."""

    user: str
    password: str


@dataclass(frozen=True)
class AccessTokenFlow:
    """Store a user-supplied access token without verification."""

    user: str
    token: str


@dataclass(frozen=True)
class RefreshTokenUnverified:
    """Store a user-supplied refresh token as-is.

    The token is trusted and saved without a verification round trip;
    no access token is minted at login time.
    """

    user: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshTokenVerified:
    """Exchange a bare refresh token for an access token immediately."""

    refresh_token: str


@dataclass(frozen=True)
class AutomateFlow:
    """Store an Automate data-collector or user token verbatim."""

    user: str
    ent: str
    token: str
    token_type: AutomateTokenType


@dataclass(frozen=True)
class InputError:
    """The supplied options do not form a usable combination.

    Attributes:
        message: Tells the user which option(s) are missing.
    """

    message: str


Flow = Union[
    PasswordFlow,
    AccessTokenFlow,
    RefreshTokenUnverified,
    RefreshTokenVerified,
    AutomateFlow,
    InputError,
]


def _given(value: Optional[str]) -> bool:
    return bool(value)


Rule = tuple[Callable[[LoginCredentials], bool], Callable[[LoginCredentials], Flow]]

COMPLIANCE_RULES: tuple[Rule, ...] = (
    (
        lambda c: _given(c.user) and _given(c.password),
        lambda c: PasswordFlow(user=c.user, password=c.password),  # type: ignore[arg-type]
    ),
    (
        lambda c: _given(c.user) and _given(c.token),
        lambda c: AccessTokenFlow(user=c.user, token=c.token),  # type: ignore[arg-type]
    ),
    (
        lambda c: _given(c.refresh_token) and _given(c.user),
        lambda c: RefreshTokenUnverified(user=c.user, refresh_token=c.refresh_token),  # type: ignore[arg-type]
    ),
    (
        lambda c: _given(c.refresh_token),
        lambda c: RefreshTokenVerified(refresh_token=c.refresh_token),  # type: ignore[arg-type]
    ),
)
"""Ordered compliance rules; the first matching predicate selects the flow."""


def _missing_message(creds: LoginCredentials) -> str:
    if _given(creds.user):
        return (
            f"Missing credential for user '{creds.user}': "
            "supply one of --password, --token or --refresh-token"
        )
    if _given(creds.password) or _given(creds.token):
        return "Missing --user: --password and --token require --user"
    return (
        "Missing credentials: supply --user with --password or --token, "
        "or --refresh-token"
    )


def select_flow(creds: LoginCredentials) -> Flow:
    """Pick the compliance login flow for *creds*.

    Returns:
        The first flow whose rule in :data:`COMPLIANCE_RULES` matches, or
        an :class:`InputError` naming the missing option(s).
    """
    for predicate, factory in COMPLIANCE_RULES:
        if predicate(creds):
            return factory(creds)
    return InputError(_missing_message(creds))


def select_automate_flow(creds: AutomateCredentials) -> Flow:
    """Pick the Automate login flow for *creds*.

    ``user`` and ``ent`` are required, plus exactly one of ``dctoken`` or
    ``usertoken``.
    """
    missing = [
        flag
        for flag, value in (("--user", creds.user), ("--ent", creds.ent))
        if not _given(value)
    ]
    if missing:
        return InputError(
            f"Missing {' and '.join(missing)}: login_automate requires "
            "--user AUTOMATE_USER --ent AUTOMATE_ENT and --dctoken or --usertoken"
        )

    has_dc = _given(creds.dctoken)
    has_user_token = _given(creds.usertoken)
    if has_dc and has_user_token:
        return InputError("Supply only one of --dctoken or --usertoken")
    if not has_dc and not has_user_token:
        return InputError(
            "Missing token: specify --dctoken DATA_COLLECTOR_TOKEN or --usertoken AUTOMATE_TOKEN"
        )

    if has_dc:
        return AutomateFlow(
            user=creds.user,  # type: ignore[arg-type]
            ent=creds.ent,  # type: ignore[arg-type]
            token=creds.dctoken,  # type: ignore[arg-type]
            token_type=AutomateTokenType.DCTOKEN,
        )
    return AutomateFlow(
        user=creds.user,  # type: ignore[arg-type]
        ent=creds.ent,  # type: ignore[arg-type]
        token=creds.usertoken,  # type: ignore[arg-type]
        token_type=AutomateTokenType.USERTOKEN,
    )
