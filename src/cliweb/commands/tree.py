"""Tree command -- show the command tree cliweb would serve."""

from __future__ import annotations

from typing import Optional

import typer

from cliweb.commands.common import exit_on_error, load_root
from cliweb.output import print_json, print_tree


def tree_command(
    source: Optional[str] = typer.Argument(
        None, help="Definition file, URL, '-' for stdin, or module:attribute."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the tree as JSON."),
) -> None:
    """Print the commands and flags of a command tree.

    Example::

        cliweb tree examples/calc.yaml
        cliweb tree examples.dummy:app --json
    """
    from cliweb.config import resolve_config

    with exit_on_error():
        config = resolve_config(cli_definition=source)
        root = load_root(config.definition, config.server.uploadable_flags)
        if json_output:
            print_json(root.model_dump(mode="json"))
        else:
            print_tree(root)
