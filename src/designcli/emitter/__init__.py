"""Artifact emitter -- render a command tree into an installable client package.

Typical usage::

    from designcli.emitter import generate_client

    path = generate_client(tree, "./build", package="shelf_cli")

A generated package holds ``__init__.py``, ``client.py`` (one request
function per action), ``commands.py`` (one command per action plus the
Typer registration) and ``__main__.py`` (root options, signers, ``main``).
"""

from designcli.emitter.renderer import generate_client, render_client, write_client

__all__ = ["generate_client", "render_client", "write_client"]
