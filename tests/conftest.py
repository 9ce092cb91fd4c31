"""Shared test fixtures for designcli.

Provides reusable fixtures for loading definition fixtures, creating
isolated config environments, managing output state, and generating
client packages that tests can import and drive with ``CliRunner``.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import functools
import importlib
import sys
import uuid
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

import httpx
import pytest

from designcli.generator import CommandTree, build_command_tree
from designcli.models import APIDefinition
from designcli.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SHELF_YAML = FIXTURES_DIR / "shelf.yaml"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Definition fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def shelf_raw() -> dict[str, Any]:
    """Load the raw shelf definition document."""
    from designcli.parser import load_definition

    return load_definition(str(SHELF_YAML))


@pytest.fixture
def shelf_api(shelf_raw: dict[str, Any]) -> APIDefinition:
    """Validated shelf definition."""
    from designcli.parser import extract_definition

    return extract_definition(shelf_raw)


@pytest.fixture
def shelf_tree(shelf_api: APIDefinition) -> CommandTree:
    """Command tree of the shelf definition."""
    return build_command_tree(shelf_api)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all DESIGNCLI_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("designcli.config._is_xdg_platform", lambda: True)

    for var in ["DESIGNCLI_OUTPUT_DIR", "DESIGNCLI_PACKAGE", "DESIGNCLI_CLI_NAME"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Generated client fixtures
# ---------------------------------------------------------------------------


class GeneratedClient:
    """An imported client package plus the requests it has sent.

    ``requests`` collects every request that reached the mock transport;
    ``responder`` decides what to answer and may be swapped per test.
    """

    def __init__(self, package: str, module: ModuleType) -> None:
        self.package = package
        self.main = module
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, json={"ok": True})
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def generate_and_import(
    tree: CommandTree,
    out_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> GeneratedClient:
    """Render *tree* into *out_dir*, import its ``__main__`` and mock its transport."""
    from designcli.emitter import render_client, write_client
    from designcli.runtime import APIClient

    package = f"gen_{uuid.uuid4().hex[:10]}"
    write_client(render_client(tree, package), out_dir, package)
    monkeypatch.syspath_prepend(str(out_dir))
    module = importlib.import_module(f"{package}.__main__")

    client = GeneratedClient(package, module)
    transport = httpx.MockTransport(client.handle)
    monkeypatch.setattr(module, "APIClient", functools.partial(APIClient, transport=transport))
    return client


@pytest.fixture
def shelf_client(
    shelf_tree: CommandTree, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> GeneratedClient:
    """The generated shelf client, importable and wired to a mock transport."""
    client = generate_and_import(shelf_tree, tmp_path / "generated", monkeypatch)
    yield client
    for name in list(sys.modules):
        if name == client.package or name.startswith(f"{client.package}."):
            del sys.modules[name]
