"""cliweb -- serve a browser front-end for a tree-structured command-line program.

cliweb takes a command tree -- from a JSON/YAML definition, a live click
command or Typer app, or a hand-built :class:`~cliweb.models.CommandNode` --
renders it as an HTML page with one panel per sub-command, and executes the
commands the page submits, answering with (and streaming) their output.

Typical workflow::

    cliweb tree examples/calc.yaml           # check what was loaded
    cliweb serve examples.dummy:app --cors   # open http://127.0.0.1:8080/

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code and HTTP status mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    definition: Building command trees from their sources.
    tree: Flag parsing, path resolution, and runners.
    render: HTML rendering and the page's interaction model.
    server: Dispatcher, uploads, live output, and the FastAPI app.
"""

__version__ = "0.1.0"
