"""Generate command -- write a client package for a definition.

``designcli generate`` runs the whole pipeline: load the definition, build
the command tree, render every file in memory, then write the package in
one step. Settings not given on the command line come from the
environment and the config files (see
:func:`~designcli.config.resolve_generate_config`).
"""

from __future__ import annotations

from typing import Optional

import typer

from designcli.output import debug, success, suggest


def generate_command(
    definition: str = typer.Argument(help="Definition file, URL, or '-' for stdin."),
    out: Optional[str] = typer.Option(
        None, "--out", "-o", help="Directory the package is written into."
    ),
    package: Optional[str] = typer.Option(
        None, "--package", help="Python package name of the client."
    ),
    cli_name: Optional[str] = typer.Option(
        None, "--cli-name", help="Console name of the client."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing package."
    ),
) -> None:
    """Generate a CLI client package from an API definition.

    Example::

        designcli generate shelf.yaml
        designcli generate shelf.yaml --out clients --package shelf --force
    """
    from designcli.commands.inspect import load_api
    from designcli.config import resolve_generate_config
    from designcli.emitter import render_client, write_client
    from designcli.emitter.renderer import default_package_name
    from designcli.generator import build_command_tree

    settings = resolve_generate_config(
        cli_output_dir=out, cli_package=package, cli_cli_name=cli_name
    )
    debug(f"Generate settings: {settings.model_dump()}")

    tree = build_command_tree(load_api(definition), cli_name=settings.cli_name)
    package_name = settings.package or default_package_name(tree)
    files = render_client(tree, package_name, timeout=settings.timeout)
    target = write_client(files, settings.output_dir, package_name, force=force)

    count = len(tree.subcommands())
    success(f"Generated {tree.cli_name} ({count} command(s)) in {target}")
    suggest(f"Run: python -m {package_name} --help")
