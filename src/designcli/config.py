"""Where designcli keeps its files, and how ``generate`` settings are resolved.

Directories follow the XDG Base Directory layout on Linux and BSD
(``$XDG_CONFIG_HOME/designcli``, ``$XDG_DATA_HOME/designcli``) and live
under ``~/.designcli`` elsewhere. Two JSON files hold settings:

* the global config, ``<config dir>/config.json``, a
  :class:`~designcli.models.GlobalConfig`;
* the optional project config, ``./designcli.json``, holding overrides of
  the ``generate`` section for one repository.

:func:`resolve_generate_config` layers both with the environment and the
command line. Files are replaced atomically so an interrupted write never
leaves a truncated config behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from designcli.exceptions import ConfigError
from designcli.models import GenerateConfig, GlobalConfig

_APP_NAME = "designcli"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "designcli.json"

ENV_PACKAGE = "DESIGNCLI_PACKAGE"
ENV_OUTPUT_DIR = "DESIGNCLI_OUTPUT_DIR"
ENV_CLI_NAME = "DESIGNCLI_CLI_NAME"

_ENV_FIELDS = {
    ENV_OUTPUT_DIR: "output_dir",
    ENV_PACKAGE: "package",
    ENV_CLI_NAME: "cli_name",
}

# kind -> (XDG variable, default below $HOME, sub-directory of ~/.designcli)
_DIRS = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("logs",)),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or str(Path.home().joinpath(*xdg_default))
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the directory of the global config file, creating it if needed."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Return the directory crash logs are written below, creating it if needed."""
    return _app_dir("data")


# --- Files ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* through a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global config, or the defaults when the file does not exist.

    Raises:
        ConfigError: The file is not JSON or does not validate.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(get_config_dir() / _CONFIG_FILENAME, text)


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./designcli.json``, e.g. ``{"package": "shelf_cli", "output_dir": "clients"}``.

    Returns ``None`` when the file does not exist.

    Raises:
        ConfigError: The file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence ---


def resolve_generate_config(
    cli_output_dir: Optional[str] = None,
    cli_package: Optional[str] = None,
    cli_cli_name: Optional[str] = None,
) -> GenerateConfig:
    """Merge every settings layer into the effective :class:`GenerateConfig`.

    Later layers win:

    1. model defaults and the ``generate`` section of the global config;
    2. ``./designcli.json`` (unknown keys are ignored);
    3. non-empty ``DESIGNCLI_OUTPUT_DIR``, ``DESIGNCLI_PACKAGE`` and
       ``DESIGNCLI_CLI_NAME``;
    4. command line flags that were given.

    Raises:
        ConfigError: Any layer holds an invalid value.
    """
    values: dict[str, Any] = load_global_config().generate.model_dump()

    project = load_project_config() or {}
    values.update({k: v for k, v in project.items() if k in GenerateConfig.model_fields})

    for var, field in _ENV_FIELDS.items():
        if os.environ.get(var):
            values[field] = os.environ[var]

    flags = {"output_dir": cli_output_dir, "package": cli_package, "cli_name": cli_cli_name}
    values.update({k: v for k, v in flags.items() if v is not None})

    try:
        return GenerateConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generate settings: {exc}") from exc
