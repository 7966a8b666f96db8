"""Exception hierarchy for rekku.

All exceptions inherit from :class:`RekkuError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`rekku.exit_codes`.
The top-level error handler in :func:`rekku.app.main` catches
``RekkuError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The schema compiler and template generator never raise; a schema they
cannot interpret degrades to an "accept anything" validator instead.

Subclass hierarchy::

    RekkuError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- HttpStatusError     (exit 3)
    +-- RequestFailedError  (exit 4)
    +-- SpecParseError      (exit 5)
    +-- GenerationError     (exit 6)
    +-- ConfigError         (exit 1)
"""

from rekku.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class RekkuError(Exception):
    """Base exception for all rekku errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`rekku.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RekkuError):
    """Raised for invalid CLI arguments (bad URL, unknown method, malformed header)."""

    exit_code = EXIT_INVALID_USAGE


class HttpStatusError(RekkuError):
    """Raised when the server answers a request with a non-2xx status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code returned by the server.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class RequestFailedError(RekkuError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(RekkuError):
    """Raised when the OpenAPI document cannot be fetched, parsed, or is not OpenAPI 3.x."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class GenerationError(RekkuError):
    """Raised when generated schemas or templates cannot be written to disk."""

    exit_code = EXIT_GENERATION_ERROR


class ConfigError(RekkuError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
