"""Exception hierarchy for designcli.

All exceptions inherit from :class:`DesignCLIError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`designcli.exit_codes`.
The top-level error handler in :func:`designcli.app.main` (and the ``main``
of every generated client) catches ``DesignCLIError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log.

Subclass hierarchy::

    DesignCLIError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- SpecParseError      (exit 7)
    +-- DefinitionError     (exit 7)
    +-- EmitError           (exit 8)
    +-- DownloadError       (exit 9)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from designcli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DEFINITION_ERROR,
    EXIT_DOWNLOAD_ERROR,
    EXIT_EMIT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class DesignCLIError(Exception):
    """Base exception for all designcli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`designcli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(DesignCLIError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(DesignCLIError):
    """Raised when the API rejects the request credentials (HTTP 401/403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(DesignCLIError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(DesignCLIError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(DesignCLIError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(DesignCLIError):
    """Raised when a definition document cannot be read or parsed as JSON/YAML."""

    exit_code = EXIT_DEFINITION_ERROR


class DefinitionError(DesignCLIError):
    """Raised for structural faults in the API definition.

    Missing routes, duplicate wildcards and colliding parameter names all
    land here. The offending resource and action names are kept on the
    exception and prefixed to the message so the faulty input can be
    located.

    Args:
        message: Description of the fault.
        resource: Name of the resource holding the faulty declaration.
        action: Name of the faulty action, if the fault is action-level.
    """

    exit_code = EXIT_DEFINITION_ERROR

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        action: Optional[str] = None,
    ):
        self.resource = resource
        self.action = action
        location = ""
        if resource and action:
            location = f"action '{action}' of resource '{resource}': "
        elif resource:
            location = f"resource '{resource}': "
        super().__init__(f"{location}{message}")


class EmitError(DesignCLIError):
    """Raised when the generated client cannot be rendered or written."""

    exit_code = EXIT_EMIT_ERROR


class DownloadError(DesignCLIError):
    """Raised by generated ``download`` commands when no file server matches."""

    exit_code = EXIT_DOWNLOAD_ERROR


class ConfigError(DesignCLIError):
    """Raised for configuration problems (invalid JSON, bad config values)."""

    exit_code = EXIT_GENERIC_FAILURE
