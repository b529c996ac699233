"""Exception hierarchy for cliweb.

All exceptions inherit from :class:`CliwebError`, which carries two codes:

* ``exit_code`` -- a constant from :mod:`cliweb.exit_codes`, used by the
  top-level error handler in :func:`cliweb.app.main`.
* ``status_code`` -- the HTTP status the web server answers with when the
  error escapes a request handler (see :func:`cliweb.server.app.create_app`).

Subclass hierarchy::

    CliwebError              (exit 1, HTTP 500)
    +-- InvalidArgumentError (exit 2, HTTP 500)
    +-- NotFoundError        (exit 4, HTTP 404)
    +-- ExecutionError       (exit 5, HTTP 500)
    +-- DefinitionError      (exit 7, HTTP 500)
    +-- UploadError          (exit 8, HTTP 500)
    +-- ConfigError          (exit 1, HTTP 500)

``InvalidArgumentError`` answers 500 rather than 400 so that existing
front-ends keep working; servers started with ``strict_status_codes``
answer 400 instead.
"""

from cliweb.exit_codes import (
    EXIT_DEFINITION_ERROR,
    EXIT_EXECUTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_UPLOAD_ERROR,
)

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_SERVER_ERROR = 500


class CliwebError(Exception):
    """Base exception for all cliweb errors.

    Args:
        message: Human-readable error description. It is written verbatim
            to stderr by the CLI and used as the HTTP response body by the
            server.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    status_code: int = HTTP_SERVER_ERROR

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(CliwebError):
    """Raised when a flag is unknown or its value does not parse as its declared type."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(CliwebError):
    """Raised when a command path segment or route does not exist."""

    exit_code = EXIT_NOT_FOUND
    status_code = HTTP_NOT_FOUND


class ExecutionError(CliwebError):
    """Raised when a command's runner fails or the node has nothing to run."""

    exit_code = EXIT_EXECUTION_ERROR


class DefinitionError(CliwebError):
    """Raised when a command tree definition cannot be loaded, imported, or validated."""

    exit_code = EXIT_DEFINITION_ERROR


class UploadError(CliwebError):
    """Raised when an uploaded file cannot be read or persisted."""

    exit_code = EXIT_UPLOAD_ERROR


class ConfigError(CliwebError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
