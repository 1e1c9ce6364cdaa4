"""HTTP client module for compli.

Provides the httpx-backed pieces that talk to the remote service:

Classes:
    :class:`ComplianceAPI` -- endpoint-aware wrapper around :class:`httpx.Client`.
    :class:`HttpTokenExchanger` -- the production
        :class:`~compli.auth.base.TokenExchanger`.

Example::

    from compli.client import ComplianceAPI

    with ComplianceAPI(insecure=session.insecure) as api:
        profiles = api.profiles(session)
"""

from compli.client.api import ComplianceAPI
from compli.client.exchanger import HttpTokenExchanger

__all__ = ["ComplianceAPI", "HttpTokenExchanger"]
