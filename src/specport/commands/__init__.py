"""Built-in CLI sub-commands for specport.

* :mod:`~specport.commands.convert` -- convert a description into collection JSON.
* :mod:`~specport.commands.inspect` -- show the item tree a conversion produces.
* :mod:`~specport.commands.config` -- view and modify global settings.

Single commands export a plain callback registered directly on the root app;
multi-command groups export a :class:`typer.Typer` sub-application.
"""
