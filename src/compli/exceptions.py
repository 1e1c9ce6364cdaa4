"""Exception hierarchy for compli.

All exceptions inherit from :class:`CompliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`compli.exit_codes`.
The top-level error handler in :func:`compli.app.main` catches
``CompliError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Bad credential combinations and rejected exchanges are never exceptions:
they are :class:`~compli.auth.flows.InputError` flow values and rejected
:class:`~compli.auth.base.ExchangeResult` values. The login orchestrator
also converts :class:`PersistenceError` into a failed outcome, so the
command layer decides what to print.

Subclass hierarchy::

    CompliError (exit 1)
    +-- PersistenceError    (exit 1)
    +-- ConfigError         (exit 1)
    +-- APIError            (exit 1)
    +-- ConnectionError_    (exit 1)
"""

from compli.exit_codes import EXIT_GENERIC_FAILURE


class CompliError(Exception):
    """Base exception for all compli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class PersistenceError(CompliError):
    """Raised when the session record cannot be written or deleted."""


class ConfigError(CompliError):
    """Raised for invalid global configuration (bad JSON, failed validation)."""


class APIError(CompliError):
    """Raised when the remote API answers with an HTTP error status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code of the failing response.
    """

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ConnectionError_(CompliError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """
