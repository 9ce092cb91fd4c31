"""Render a command tree into a Python client package and write it to disk.

The emitter works in two strictly separated phases:

1. :func:`render_client` renders every template into memory and compiles
   each result. Any template or syntax error raises
   :class:`~designcli.exceptions.EmitError` before a single byte is
   written.
2. :func:`write_client` writes the rendered files into a temporary
   directory next to the target, then swaps it into place. An existing
   package is only replaced when ``force`` is set.

Rendering is a pure function of the command tree: the same tree always
produces byte-identical sources.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from designcli import __version__
from designcli.exceptions import EmitError
from designcli.generator.command_tree import CommandTree
from designcli.generator.param_mapper import sanitize_param_name

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Directory holding the ``*.py.j2`` templates."""

OUTPUT_FILES = ("__init__.py", "client.py", "commands.py", "__main__.py")
"""Files of a generated package, in render order."""


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for client templates.

    Output is Python source, so autoescaping is off. Every value that ends
    up inside a string literal goes through the ``pyrepr`` or ``docstring``
    filter instead.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["docstring"] = _docstring
    env.filters["ident"] = sanitize_param_name
    return env


def _docstring(value: Optional[str]) -> str:
    """Make *value* safe inside a triple-quoted docstring."""
    return (value or "").strip().replace("\\", "\\\\").replace('"', '\\"')


def default_package_name(tree: CommandTree) -> str:
    """``"shelf"`` -> ``"shelf_cli"``."""
    return f"{sanitize_param_name(tree.api_name)}_cli"


def render_client(
    tree: CommandTree,
    package: Optional[str] = None,
    timeout: float = 20.0,
) -> dict[str, str]:
    """Render the client package of *tree* in memory.

    Args:
        tree: The command tree to render.
        package: Python package name; defaults to ``<api>_cli``.
        timeout: Default ``--timeout`` of the generated client.

    Returns:
        A mapping of file name to source text, in :data:`OUTPUT_FILES` order.

    Raises:
        EmitError: If a template fails to render or produces invalid Python.
    """
    package = package or default_package_name(tree)
    if not package.isidentifier():
        raise EmitError(f"invalid package name '{package}'")

    env = _create_jinja_env()
    context = _build_context(tree, package, timeout)

    files: dict[str, str] = {}
    for name in OUTPUT_FILES:
        try:
            source = env.get_template(f"{name}.j2").render(**context)
        except TemplateError as exc:
            raise EmitError(f"failed to render {name}: {exc}") from exc
        try:
            compile(source, f"{package}/{name}", "exec")
        except SyntaxError as exc:
            raise EmitError(
                f"generated {name} is not valid Python (line {exc.lineno}): {exc.msg}"
            ) from exc
        files[name] = source
        logger.debug("Rendered %s/%s (%d bytes)", package, name, len(source))
    return files


def _build_context(tree: CommandTree, package: str, timeout: float) -> dict[str, Any]:
    subcommands = tree.subcommands()
    signer_classes = sorted({spec.signer_class for spec in tree.signers.signers})
    runtime_imports = ["APIClient", *signer_classes]
    if tree.signers.has_token:
        runtime_imports += ["StaticToken", "StaticTokenSource", "TokenSource"]
    return {
        "tree": tree,
        "package": package,
        "timeout": float(timeout),
        "subcommands": subcommands,
        "generator_version": __version__,
        "runtime_imports": runtime_imports,
        "needs_json": any(cmd.has_payload for cmd in subcommands),
        "needs_enum": any(flag.choice_class for cmd in subcommands for flag in cmd.flags),
        "needs_invalid_usage": any(
            cmd.has_payload and not cmd.payload_is_string for cmd in subcommands
        ),
    }


def write_client(files: dict[str, str], output_dir: str | Path, package: str, force: bool = False) -> Path:
    """Write rendered *files* as ``<output_dir>/<package>/``.

    The files land in a temporary sibling directory first. The finished
    directory then replaces the target, so a failed write leaves no partial
    package behind.

    Args:
        files: Output of :func:`render_client`.
        output_dir: Directory that will contain the package.
        package: Package directory name.
        force: Replace an existing package directory.

    Returns:
        Path of the written package directory.

    Raises:
        EmitError: If the target exists without ``force``, or on I/O errors.
    """
    out = Path(output_dir)
    target = out / package
    if target.exists() and not force:
        raise EmitError(f"{target} already exists (use --force to overwrite)")

    try:
        out.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{package}-", dir=str(out)))
    except OSError as exc:
        raise EmitError(f"cannot create output directory {out}: {exc}") from exc

    try:
        for name, source in files.items():
            (staging / name).write_text(source, encoding="utf-8")
        if target.exists():
            backup = Path(tempfile.mkdtemp(prefix=f".{package}-old-", dir=str(out)))
            os.replace(target, backup / package)
            os.replace(staging, target)
            shutil.rmtree(backup, ignore_errors=True)
        else:
            os.replace(staging, target)
    except OSError as exc:
        shutil.rmtree(staging, ignore_errors=True)
        raise EmitError(f"failed to write {target}: {exc}") from exc

    logger.debug("Wrote %d file(s) to %s", len(files), target)
    return target


def generate_client(
    tree: CommandTree,
    output_dir: str | Path,
    package: Optional[str] = None,
    force: bool = False,
    timeout: float = 20.0,
) -> Path:
    """Render and write the client package of *tree* in one step."""
    package = package or default_package_name(tree)
    files = render_client(tree, package, timeout=timeout)
    return write_client(files, output_dir, package, force=force)
