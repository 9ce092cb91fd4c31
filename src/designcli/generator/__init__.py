"""CLI generator -- turn a parsed API definition into a command tree.

This sub-package sits between the parser and the emitter: it takes an
:class:`~designcli.models.APIDefinition` and derives everything a generated
client needs, as plain data the templates can render.

Typical usage::

    from designcli.generator import build_command_tree

    tree = build_command_tree(api)
    for group in tree.groups:
        print(group.name, [cmd.name for cmd in group.commands])

Sub-modules:

* :mod:`~designcli.generator.routes` -- Canonical route, path template,
  route arguments and route summaries.
* :mod:`~designcli.generator.param_mapper` -- Deterministic ordering of
  query and header parameters, and their mapping to ``--option`` flags.
* :mod:`~designcli.generator.signers` -- Security schemes resolved into
  signer factories and global credential flags.
* :mod:`~designcli.generator.downloads` -- File servers resolved into the
  ``download`` dispatch table.
* :mod:`~designcli.generator.command_tree` -- Groups actions by name and
  assembles the final :class:`~designcli.generator.command_tree.CommandTree`.
"""

from designcli.generator.command_tree import CommandTree, build_command_tree
from designcli.generator.downloads import build_dispatch_table
from designcli.generator.param_mapper import join_parameter_list
from designcli.generator.routes import default_route_template, route_summary
from designcli.generator.signers import summarize_signers

__all__ = [
    "CommandTree",
    "build_command_tree",
    "build_dispatch_table",
    "join_parameter_list",
    "default_route_template",
    "route_summary",
    "summarize_signers",
]
