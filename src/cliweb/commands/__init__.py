"""Built-in CLI sub-commands for cliweb.

* :mod:`~cliweb.commands.serve` -- serve a command tree over HTTP.
* :mod:`~cliweb.commands.render` -- write the generated page to a file.
* :mod:`~cliweb.commands.tree` -- print a command tree.
* :mod:`~cliweb.commands.config` -- view and modify global settings.

Single commands export a plain callback registered on the root app; the
``config`` group exports a :class:`typer.Typer` sub-application.
"""
