"""Numeric process exit codes.

Every user-facing failure exits with :data:`EXIT_GENERIC_FAILURE` so that
shell wrappers only need to test for non-zero. Interrupts use the
conventional ``128 + SIGINT`` value.

Example::

    $ compli profiles
    You need to login first with `compli login` or `compli login_automate`
    $ echo $?
    1
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""Any user-facing failure: bad input, rejected credentials, no session, API error."""

EXIT_INTERRUPTED = 130
"""The command was cancelled with Ctrl-C."""
