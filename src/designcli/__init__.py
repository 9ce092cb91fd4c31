"""designcli -- Generate command line clients from API definitions.

This package turns a declarative API definition (resources, actions,
routes, parameters, file servers and security schemes) into a Python
package exposing a Typer CLI with one command per action.

Typical workflow::

    designcli inspect commands shelf.yaml   # preview the command tree
    designcli generate shelf.yaml --out .   # write ./shelf_cli/
    python -m shelf_cli list book --limit 5

Generated clients import :mod:`designcli.runtime` for transport, signing,
downloads and response rendering.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for definitions and configuration.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
