"""Canonical Pydantic models shared across all compli modules.

The models fall into two groups:

**Session models** -- the persisted session record, serialised as JSON by
:class:`~compli.auth.store.SessionStore`:
    :class:`ServerType`, :class:`AutomateTokenType`, :class:`AutomateInfo`,
    :class:`ComplianceSession`, :class:`AutomateSession`, and the
    discriminated union :data:`Session`.

**Settings models** -- user-wide configuration loaded by
:func:`~compli.config.load_global_config`:
    :class:`RequestConfig` and :class:`GlobalConfig`.

The two session variants are tagged by ``server_type`` and forbid extra
fields, so an Automate record cannot carry a ``refresh_token`` and a
compliance record cannot carry ``automate`` metadata.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# --- Session ---


class ServerType(str, enum.Enum):
    """Backend flavor a session targets."""

    COMPLIANCE = "compliance"
    AUTOMATE = "automate"


class AutomateTokenType(str, enum.Enum):
    """Which kind of Automate token the user supplied."""

    DCTOKEN = "dctoken"
    USERTOKEN = "usertoken"


FEATURE_MIN_VERSIONS: dict[str, str] = {"oidc": "0.16.19"}
"""Minimum compliance server version that provides each versioned feature."""


def _version_tuple(version: str) -> tuple[int, ...]:
    """Turn ``"1.2.3-rc1"`` into ``(1, 2, 3)``; non-numeric parts stop the parse."""
    parts: list[int] = []
    for piece in version.split("."):
        digits = ""
        for ch in piece:
            if not ch.isdigit():
                break
            digits += ch
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


class AutomateInfo(BaseModel):
    """Automate-only metadata: enterprise name and token kind."""

    model_config = ConfigDict(extra="forbid")

    ent: str = Field(description="Enterprise for Automate reporting")
    token_type: AutomateTokenType


class ComplianceSession(BaseModel):
    """Session against a compliance server.

    ``token`` is the access token used for requests. It is normally the
    result of an exchange; the stored-access-token flow saves the user's
    token unverified, and the stored-refresh-token flow leaves it unset and
    saves ``refresh_token`` instead.

    Example::

        ComplianceSession(
            server="https://compliance.example.com/api",
            user="admin",
            token="abc",
            version={"version": "1.6.0"},
        )
    """

    model_config = ConfigDict(extra="forbid")

    server_type: Literal["compliance"] = "compliance"
    server: str = Field(description="Base URL including the API path")
    user: Optional[str] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    insecure: bool = False
    version: Optional[dict[str, Any]] = Field(
        default=None, description="Server /version payload captured at login"
    )

    def supports(self, feature: str) -> bool:
        """Return whether the server version provides *feature*.

        Features absent from :data:`FEATURE_MIN_VERSIONS` are always
        supported. When the server version is unknown nothing versioned
        can be assumed, so the answer is ``False``.
        """
        current = (self.version or {}).get("version")
        if not current:
            return False
        minimum = FEATURE_MIN_VERSIONS.get(feature)
        if minimum is None:
            return True
        return _version_tuple(str(current)) >= _version_tuple(minimum)


class AutomateSession(BaseModel):
    """Session against an Automate server.

    The token is the raw data-collector or user token exactly as supplied;
    no exchange is ever performed for Automate.
    """

    model_config = ConfigDict(extra="forbid")

    server_type: Literal["automate"] = "automate"
    server: str = Field(description="Base URL including /compliance/profiles")
    user: str
    token: str
    insecure: bool = False
    automate: AutomateInfo

    def supports(self, feature: str) -> bool:
        return False


Session = Annotated[
    Union[ComplianceSession, AutomateSession],
    Field(discriminator="server_type"),
]
"""The persisted session record: one of the two flavors, tagged by ``server_type``."""

SessionAdapter: TypeAdapter[Session] = TypeAdapter(Session)
"""Validator/serialiser for :data:`Session` values."""


# --- Settings ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every call against the remote service."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/compli/config.json``.

    Loaded by :func:`~compli.config.load_global_config`; environment
    variables and CLI flags take precedence (see
    :func:`~compli.config.resolve_config`).
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    default_api_path: str = Field(
        default="/api", description="API path appended to compliance servers"
    )
