"""Serve command -- run the web front-end for a command tree.

Resolves the effective configuration (CLI flags over environment over
config files), loads the command tree, and hands both to uvicorn through
:func:`cliweb.server.run`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from cliweb.commands.common import exit_on_error, load_root
from cliweb.output import configure_logging, info, success


def serve_command(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(
        None, help="Definition file, URL, '-' for stdin, or module:attribute."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind."),
    api_base: Optional[str] = typer.Option(
        None, "--api-base", help="host:port the page sends requests to."
    ),
    cors: Optional[bool] = typer.Option(
        None, "--cors/--no-cors", help="Allow cross-origin requests."
    ),
    upload: Optional[list[str]] = typer.Option(
        None, "--upload", "-u", help="Flag name that accepts file uploads (repeatable)."
    ),
    page: Optional[Path] = typer.Option(
        None, "--page", help="Jinja2 host page template for the generated fragment."
    ),
    no_page: bool = typer.Option(False, "--no-page", help="Do not serve the page at /."),
    no_live: bool = typer.Option(False, "--no-live", help="Disable live output at /ws."),
    strict_status: bool = typer.Option(
        False, "--strict-status", help="Answer invalid arguments with 400 instead of 500."
    ),
) -> None:
    """Serve a browser front-end for a command tree.

    Example::

        cliweb serve examples/calc.yaml
        cliweb serve examples.dummy:app --port 9000 --cors -u config
    """
    from cliweb.config import resolve_config
    from cliweb.server import run

    verbose = ctx.obj.get("verbose", False) if ctx.obj else False
    configure_logging(verbose)

    with exit_on_error():
        cli_server: dict = {
            "host": host,
            "port": port,
            "api_base": api_base,
            "allow_cors": cors,
            "page_template": str(page) if page else None,
            "serve_page": False if no_page else None,
            "live_output": False if no_live else None,
            "strict_status_codes": True if strict_status else None,
        }
        config = resolve_config(cli_definition=source, cli_server=cli_server)
        server = config.server
        if upload:
            server.uploadable_flags = [*server.uploadable_flags, *upload]

        root = load_root(config.definition)
        info(f"Loaded command tree '{root.name}' from {config.definition}")
        success(f"Serving on http://{server.host}:{server.port}/")
        run(root, server, log_level="debug" if verbose else "info")
