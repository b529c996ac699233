"""Render command -- write the generated page without starting a server."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from cliweb.commands.common import exit_on_error, load_root
from cliweb.exceptions import CliwebError
from cliweb.output import print_data, success


def render_command(
    source: Optional[str] = typer.Argument(
        None, help="Definition file, URL, '-' for stdin, or module:attribute."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
    page: Optional[Path] = typer.Option(
        None, "--page", help="Jinja2 host page template."
    ),
    fragment: bool = typer.Option(
        False, "--fragment", help="Write only the embeddable fragment."
    ),
    api_base: Optional[str] = typer.Option(
        None, "--api-base", help="host:port the page sends requests to."
    ),
    upload: Optional[list[str]] = typer.Option(
        None, "--upload", "-u", help="Flag name that accepts file uploads (repeatable)."
    ),
) -> None:
    """Render the HTML page for a command tree.

    The page talks to the server given by ``--api-base`` (or the configured
    one), so it can be hosted anywhere.

    Example::

        cliweb render examples/calc.yaml -o calc.html
        cliweb render examples.dummy:app --fragment --api-base localhost:8080
    """
    from cliweb.config import resolve_config
    from cliweb.render import render_page, render_tree

    with exit_on_error():
        config = resolve_config(cli_definition=source, cli_server={"api_base": api_base})
        root = load_root(config.definition, [*config.server.uploadable_flags, *(upload or [])])
        if fragment:
            html = render_tree(root, config.server)
        else:
            html = render_page(root, config.server, template=page)

        if output is None:
            print_data(html)
            return
        try:
            output.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise CliwebError(f"Cannot write {output}: {exc}") from exc
        success(f"Wrote {output}")
