"""Config commands -- view and modify global configuration.

Provides the ``cliweb config`` sub-command group for reading and updating
the user's global configuration file (:class:`~cliweb.models.GlobalConfig`).
"""

from __future__ import annotations

import typer

from cliweb.commands.common import exit_on_error
from cliweb.output import info, print_data, print_json, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the result of the full precedence chain (environment, project
    file, global file, defaults) as JSON.

    Example::

        cliweb config show
    """
    from cliweb.config import global_config_path, resolve_config

    with exit_on_error():
        config = resolve_config()
    info(f"Config file: {global_config_path()}")
    print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g., 'server.port')."),
    value: str = typer.Argument(help="Value to set (JSON literals are parsed)."),
) -> None:
    """Set a value in the global configuration file.

    Example::

        cliweb config set definition examples/calc.yaml
        cliweb config set server.port 9000
        cliweb config set server.uploadable_flags '["config"]'
    """
    from cliweb.config import load_global_config, save_global_config, set_config_value

    with exit_on_error():
        config = set_config_value(load_global_config(), key, value)
        save_global_config(config)
    success(f"Set {key} = {value}")


@config_app.command("path")
def config_path() -> None:
    """Print the path of the global configuration file."""
    from cliweb.config import global_config_path

    print_data(str(global_config_path()))
