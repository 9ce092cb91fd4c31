"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~designcli.exceptions.DesignCLIError` subclass.
Generated clients reuse the same table, so shell wrappers can tell a
definition fault from a failed download without parsing stderr.

Example::

    $ designcli generate broken.yaml
    $ echo $?
    7   # EXIT_DEFINITION_ERROR -- the definition has a structural fault
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DEFINITION_ERROR = 7
"""The API definition could not be loaded or has a structural fault."""

EXIT_EMIT_ERROR = 8
"""Rendering or writing the generated client failed."""

EXIT_DOWNLOAD_ERROR = 9
"""A download request matched no file server."""

EXIT_INTERRUPTED = 130
"""The run was cancelled with Ctrl-C (128 + SIGINT)."""
