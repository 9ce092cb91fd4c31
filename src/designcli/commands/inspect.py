"""Inspect commands -- preview what a definition generates.

Provides the ``designcli inspect`` sub-command group. Every sub-command
loads a definition, builds its command tree exactly as ``generate`` would,
and prints one aspect of it as a table. Nothing is written to disk.
"""

from __future__ import annotations

import typer

from designcli.output import debug, get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


def load_api(source: str):  # noqa: ANN201
    """Load and validate the definition at *source*.

    Errors propagate as :class:`~designcli.exceptions.DesignCLIError`
    subclasses, which :func:`designcli.app.main` maps to exit codes.
    """
    from designcli.parser import extract_definition, load_definition

    debug(f"Loading definition from {source}")
    return extract_definition(load_definition(source))


@inspect_app.command("commands")
def inspect_commands(
    definition: str = typer.Argument(help="Definition file, URL, or '-' for stdin."),
) -> None:
    """List the commands a generated client would expose.

    Example::

        designcli inspect commands shelf.yaml
    """
    from designcli.generator import build_command_tree

    tree = build_command_tree(load_api(definition))

    headers = ["Command", "Method", "Route", "Flags", "Signer"]
    rows: list[list[str]] = []
    for group in tree.groups:
        for cmd in group.commands:
            rows.append([
                f"{group.name} {cmd.name}",
                "WS" if cmd.websocket else cmd.verb,
                cmd.route_summary,
                " ".join(flag.flag for flag in cmd.flags) or "-",
                cmd.signer or "-",
            ])
    if tree.download is not None:
        rows.append(["download", "GET", "PATH", "--out", "-"])

    get_output().print_table(
        headers, rows, title=f"{tree.cli_name} -- Commands ({len(rows)})"
    )


@inspect_app.command("auth")
def inspect_auth(
    definition: str = typer.Argument(help="Definition file, URL, or '-' for stdin."),
) -> None:
    """Show security schemes and whether the client can sign with them.

    Example::

        designcli inspect auth shelf.yaml
    """
    from designcli.generator.signers import resolve_signer

    api = load_api(definition)
    if not api.security_schemes:
        info("No security schemes defined.")
        return

    headers = ["Name", "Type", "Signer", "Flags", "Description"]
    rows: list[list[str]] = []
    for scheme in api.security_schemes:
        spec = resolve_signer(scheme)
        rows.append([
            scheme.name,
            scheme.type,
            spec.signer_class if spec else "unsupported",
            " ".join(f.flag for f in spec.flags) if spec else "-",
            (scheme.description or "-")[:60],
        ])

    get_output().print_table(headers, rows, title="Security Schemes")


@inspect_app.command("downloads")
def inspect_downloads(
    definition: str = typer.Argument(help="Definition file, URL, or '-' for stdin."),
) -> None:
    """Show the file servers reachable through ``download``.

    Entries are listed in match order: files first, then directories, each
    in declaration order.

    Example::

        designcli inspect downloads shelf.yaml
    """
    from designcli.generator import build_dispatch_table

    table = build_dispatch_table(load_api(definition))
    if table is None:
        info("No file servers defined.")
        return

    headers = ["Request path", "Kind", "Match", "Default output"]
    rows: list[list[str]] = []
    for entry in [*table.files, *table.directories]:
        if entry.is_dir:
            rows.append([entry.request_path, "directory", f"{entry.request_dir}*", "<base name>"])
        else:
            rows.append([entry.request_path, "file", entry.request_path, entry.file_name])

    get_output().print_table(headers, rows, title="Downloads")
