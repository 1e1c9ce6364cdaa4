"""compli -- log in to compliance-reporting servers and manage profiles.

This package keeps a single authenticated session against a remote
compliance-reporting service. Two backend flavors are supported: a
*compliance* server (token exchange via ``/login``) and an *automate*
server (data-collector or user tokens stored verbatim).

Typical workflow::

    compli login https://compliance.example.com --user admin --password s3cret
    compli profiles
    compli upload ./my-profile
    compli logout

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the session record and settings.
    config: XDG-aware directories, atomic writes, and global settings.
    auth: Credential-flow selection, login, guard, logout, session store.
    client: httpx-backed wire client for the remote API.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
