"""Built-in CLI sub-commands for designcli.

* :mod:`~designcli.commands.generate` -- write a client package.
* :mod:`~designcli.commands.inspect` -- preview commands, auth and
  downloads of a definition.
* :mod:`~designcli.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain function registered on the root app.
"""
