"""Config commands -- read and edit the global configuration file.

Keys use dot notation, ``<section>.<field>``, over the sections of
:class:`~designcli.models.GlobalConfig`: ``output.format`` and the
``generate.*`` defaults (``output_dir``, ``package``, ``cli_name``,
``timeout``). Values are validated by the config models before anything is
written, so an invalid ``set`` leaves the file untouched.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from designcli.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


def _split_key(key: str) -> tuple[str, str]:
    """Validate *key* against the config models and return ``(section, field)``."""
    from designcli.models import GlobalConfig

    section, _, field = key.partition(".")
    section_type = GlobalConfig.model_fields.get(section)
    model = section_type.annotation if section_type is not None else None
    if (
        not field
        or not isinstance(model, type)
        or not issubclass(model, BaseModel)
        or field not in model.model_fields
    ):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)
    return section, field


def _save_with(section: str, field: str, value: Any) -> None:
    from designcli.config import load_global_config, save_global_config
    from designcli.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")
    if value is None:
        data[section].pop(field, None)
    else:
        data[section][field] = value
    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        problem = exc.errors()[0]["msg"]
        error(f"Invalid value for {section}.{field}: {problem}")
        raise typer.Exit(code=2) from None
    save_global_config(config)


@config_app.command("show")
def config_show() -> None:
    """Print the global configuration as JSON.

    Example::

        designcli config show
    """
    from designcli.config import get_config_dir, load_global_config

    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"), pretty=True)


@config_app.command("get")
def config_get(
    key: str = typer.Argument(help="Config key, e.g. 'generate.package'."),
) -> None:
    """Print one configuration value."""
    from designcli.config import load_global_config

    section, field = _split_key(key)
    value = getattr(getattr(load_global_config(), section), field)
    format_response(value if value is not None else "")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'generate.package'."),
    value: str = typer.Argument(help="New value, converted to the key's type."),
) -> None:
    """Set one configuration value.

    Example::

        designcli config set generate.output_dir clients
        designcli config set generate.timeout 60
        designcli config set output.format plain
    """
    section, field = _split_key(key)
    _save_with(section, field, value)
    success(f"Set {key} = {value}")


@config_app.command("unset")
def config_unset(
    key: str = typer.Argument(help="Config key, e.g. 'generate.package'."),
) -> None:
    """Restore one configuration value to its default."""
    section, field = _split_key(key)
    _save_with(section, field, None)
    success(f"Unset {key}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Restore every configuration value to its default."""
    from designcli.config import save_global_config
    from designcli.models import GlobalConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
