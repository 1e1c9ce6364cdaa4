"""Built-in CLI commands for compli.

This package groups the Typer command callbacks registered on the root
application:

* :mod:`~compli.commands.session` -- ``login``, ``login_automate`` and
  ``logout``.
* :mod:`~compli.commands.profiles` -- ``profiles``, ``upload`` and
  ``version``.

Each module exports plain callback functions that
:mod:`compli.app` registers directly on the root app.
"""
