"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~rekku.exceptions.RekkuError` subclass.
Shell scripts wrapping ``rekku`` can inspect the exit code to tell a
rejected request apart from an unreachable host without parsing stderr.

Example::

    $ rekku request https://api.example.com/missing
    $ echo $?
    3   # EXIT_HTTP_ERROR -- the server answered with a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_HTTP_ERROR = 3
"""The remote server answered with a non-2xx status code."""

EXIT_CONNECTION_ERROR = 4
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 5
"""The OpenAPI document could not be loaded or parsed."""

EXIT_GENERATION_ERROR = 6
"""Generated code could not be written to the workspace."""
