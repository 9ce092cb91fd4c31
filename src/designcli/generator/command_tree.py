"""Assemble the command tree of a generated client.

The generated CLI is always exactly two levels deep::

    <cli> <action-name> <resource> [PATH] [--flags]

**Algorithm summary**

1. Walk every action of every resource, in declaration order.
2. Group the actions by action name. Actions named ``list`` on two
   resources become two sub-commands of one ``list`` group.
3. Build one :class:`SubCommand` per action instance, wired to the
   route resolver (default path template and route summary), the
   parameter classifier (call arguments and flags), and the signer
   registry (signer used by the action).
4. Sort groups by name so repeated runs produce the same tree.
5. Attach the download dispatch table when any resource serves files.

Grouping by verb rather than by resource is intentional: it makes
operations discoverable as ``<cli> list --help``, whatever the upstream
resource layout.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from designcli.exceptions import DefinitionError
from designcli.generator.downloads import build_dispatch_table
from designcli.generator.param_mapper import (
    FieldRef,
    FlagSpec,
    build_flag,
    build_payload_flags,
    check_collisions,
    join_parameter_list,
    sanitize_param_name,
)
from designcli.generator.routes import (
    canonical_route,
    default_route_params,
    default_route_template,
    route_arguments,
    path_param_names,
    query_params,
    route_summary,
)
from designcli.generator.signers import SignerSummary, summarize_signers
from designcli.models import (
    ActionDefinition,
    APIDefinition,
    DataKind,
    ResourceDefinition,
)
from designcli.runtime.dispatch import DispatchTable

logger = logging.getLogger(__name__)


class SubCommand(BaseModel):
    """A resource-specific instance of an action command.

    Attributes:
        name: Sub-command name (the parent resource's name).
        action: Action name (also the parent group's name).
        route_summary: All routes of the action, for help text.
        help: Short help (the resource description).
        class_name: Name of the generated command dataclass.
        function_name: Name of the generated client function.
        verb: HTTP verb of the canonical route.
        route_template: Positional format string of the canonical route.
        route_args: Fields filling ``route_template``, in order.
        call_args: Query and header fields, in call order.
        flags: Every ``--option`` of the sub-command.
        has_payload: Whether the action takes a request body.
        payload_is_string: Whether an undecodable ``--payload`` is sent raw.
        websocket: Whether the action is a websocket endpoint.
        signer: Security scheme used to sign requests, if supported.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    action: str
    route_summary: str
    help: str = ""
    class_name: str
    function_name: str
    verb: str
    route_template: str
    route_args: list[FieldRef] = Field(default_factory=list)
    call_args: list[FieldRef] = Field(default_factory=list)
    flags: list[FlagSpec] = Field(default_factory=list)
    has_payload: bool = False
    payload_is_string: bool = False
    websocket: bool = False
    signer: Optional[str] = None


class CommandGroup(BaseModel):
    """A top-level command named after an action."""

    model_config = ConfigDict(frozen=True)

    name: str
    help: str
    commands: list[SubCommand] = Field(default_factory=list)


class CommandTree(BaseModel):
    """Everything the emitter needs to render a client."""

    model_config = ConfigDict(frozen=True)

    api_name: str
    cli_name: str
    description: str
    host: str
    scheme: str
    version: str
    groups: list[CommandGroup] = Field(default_factory=list)
    download: Optional[DispatchTable] = None
    signers: SignerSummary = Field(default_factory=SignerSummary)

    @property
    def user_agent(self) -> str:
        return f"{self.cli_name}/{self.version}"

    def group(self, name: str) -> Optional[CommandGroup]:
        for grp in self.groups:
            if grp.name == name:
                return grp
        return None

    def subcommands(self) -> list[SubCommand]:
        return [cmd for grp in self.groups for cmd in grp.commands]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def build_command_tree(api: APIDefinition, cli_name: Optional[str] = None) -> CommandTree:
    """Build the :class:`CommandTree` of *api*.

    Args:
        api: The definition to generate a client for.
        cli_name: Console name of the client; defaults to ``<api>-cli``.

    Returns:
        The command tree, groups sorted by action name.

    Raises:
        DefinitionError: On the first structural fault found; nothing is
            returned for a partially valid definition.
    """
    signers = summarize_signers(api.security_schemes)
    groups = group_actions(api)

    command_groups: list[CommandGroup] = []
    owners: dict[str, str] = {}
    for name in sorted(groups):
        actions = groups[name]
        commands: list[SubCommand] = []
        for resource, action in actions:
            sub = _build_subcommand(api, resource, action, signers)
            choice_classes = [f.choice_class for f in sub.flags if f.choice_class]
            for generated in (sub.class_name, sub.function_name, *choice_classes):
                owner = owners.get(generated)
                if owner is not None:
                    raise DefinitionError(
                        f"generated name '{generated}' clashes with {owner}",
                        resource=resource.name,
                        action=action.name,
                    )
                owners[generated] = f"action '{action.name}' of resource '{resource.name}'"
            commands.append(sub)
        command_groups.append(
            CommandGroup(name=name, help=_group_help(name, actions), commands=commands)
        )
        logger.debug("Command group %r: %d sub-command(s)", name, len(commands))

    download = build_dispatch_table(api)
    if download is not None:
        if "download" in groups:
            raise DefinitionError(
                "action name 'download' clashes with the file download command",
                resource=groups["download"][0][0].name,
                action="download",
            )
        logger.debug("Download command: %d file server(s)", len(download.entries))

    resolved_name = cli_name or f"{_slug(api.name)}-cli"
    return CommandTree(
        api_name=api.name,
        cli_name=resolved_name,
        description=api.description or api.title or f"CLI client for the {api.name} service",
        host=api.host,
        scheme=api.scheme,
        version=api.version or "0",
        groups=command_groups,
        download=download,
        signers=signers,
    )


def group_actions(
    api: APIDefinition,
) -> dict[str, list[tuple[ResourceDefinition, ActionDefinition]]]:
    """Group every action of *api* by action name, keeping declaration order."""
    groups: dict[str, list[tuple[ResourceDefinition, ActionDefinition]]] = {}
    for resource, action in api.iter_actions():
        groups.setdefault(action.name, []).append((resource, action))
    return groups


# ---------------------------------------------------------------------------
# Sub-command construction
# ---------------------------------------------------------------------------


def _build_subcommand(
    api: APIDefinition,
    resource: ResourceDefinition,
    action: ActionDefinition,
    signers: SignerSummary,
) -> SubCommand:
    """Wire one action to the route, parameter and signer outputs."""
    route = canonical_route(action)
    check_collisions(action, path_param_names(api, action))

    route_params = default_route_params(api, action)
    route_args = route_arguments(api, action)
    call_args = join_parameter_list(
        query_params(api, action), action.headers, locations=("query", "header")
    )

    flags: list[FlagSpec] = []
    if action.payload is not None:
        flags.extend(build_payload_flags())
    for ref in route_args:
        flags.append(
            build_flag(ref.name, route_params.attributes[ref.name], location="path")
        )
    for ref in call_args:
        source = action.params if ref.location == "query" else action.headers
        flags.append(
            build_flag(
                ref.name,
                source.attributes[ref.name],
                required=ref.required,
                nullable=ref.nullable,
                location=ref.location,
            )
        )

    prefix = f"{action.name}_{resource.name}"
    flags = [_with_choice_class(flag, prefix) for flag in flags]

    summary = route_summary(api, action)
    return SubCommand(
        name=resource.name,
        action=action.name,
        route_summary=summary,
        help=resource.description or "",
        class_name=_camelize(f"{action.name}_{resource.name}_command"),
        function_name=sanitize_param_name(f"{action.name}_{resource.name}"),
        verb=route.verb,
        route_template=default_route_template(api, action),
        route_args=route_args,
        call_args=call_args,
        flags=flags,
        has_payload=action.payload is not None,
        payload_is_string=(
            action.payload is not None and action.payload.type == DataKind.STRING
        ),
        websocket=action.websocket,
        signer=_action_signer(api, resource, action, signers),
    )


def _with_choice_class(flag: FlagSpec, prefix: str) -> FlagSpec:
    """Name the enum class a choice flag is annotated with, e.g. ``ListBookSortChoice``."""
    if not flag.choices:
        return flag
    return flag.model_copy(update={"choice_class": _camelize(f"{prefix}_{flag.attr}_choice")})


def _action_signer(
    api: APIDefinition,
    resource: ResourceDefinition,
    action: ActionDefinition,
    signers: SignerSummary,
) -> Optional[str]:
    """Return the scheme signing *action*'s requests, or ``None``.

    Action security overrides resource security, which overrides the API
    default. A scheme that exists but has no signer support leaves the
    action unsigned.
    """
    scheme_name = action.security or resource.security or api.security
    if scheme_name is None:
        return None
    if api.security_scheme(scheme_name) is None:
        raise DefinitionError(
            f"unknown security scheme '{scheme_name}'",
            resource=resource.name,
            action=action.name,
        )
    spec = signers.get(scheme_name)
    return spec.scheme_name if spec else None


# ---------------------------------------------------------------------------
# Help / naming helpers
# ---------------------------------------------------------------------------


def _group_help(
    name: str, actions: list[tuple[ResourceDefinition, ActionDefinition]]
) -> str:
    """Use the action description for single-action groups, else ``"<name> action"``."""
    if len(actions) == 1:
        return actions[0][1].description or ""
    return f"{name} action"


def _camelize(value: str) -> str:
    """``"list_widget_command"`` -> ``"ListWidgetCommand"``."""
    words = re.split(r"[^a-zA-Z0-9]+", value)
    result = "".join(w[:1].upper() + w[1:] for w in words if w)
    if result[:1].isdigit():
        result = f"_{result}"
    return result


def _slug(value: str) -> str:
    result = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return result or "api"
