"""Built-in CLI sub-commands for sdkwrap.

* :mod:`~sdkwrap.commands.generate` -- generate wrapper functions from a
  manifest or module.
* :mod:`~sdkwrap.commands.inspect` -- list the endpoints and types the
  generator would see.
* :mod:`~sdkwrap.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application;
``generate`` is a plain callback registered directly on the root app.
"""
