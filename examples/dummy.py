"""A dummy Typer program that does nothing but print.

Serve it with::

    cliweb serve examples.dummy:app --upload config
"""

import typer

app = typer.Typer(name="dummy", add_completion=False)
run_app = typer.Typer()
app.add_typer(run_app, name="run")


@app.callback()
def main(
    config: str = typer.Option(
        "./conf.toml", "--config", help="configuration file location"
    ),
) -> None:
    """A dummy program.

    This is a longer description for a dummy program, which does not do
    anything and only exists for the purpose of being an example.
    """
    print("I'm ran.")


@app.command()
def version() -> None:
    """Print the version number."""
    print("Version 1")


@run_app.callback()
def run(
    in_background: bool = typer.Option(
        False, "--inBackground", "-s", help="Program will run in background if sent true"
    ),
) -> None:
    """Run the program."""
    if in_background:
        print("Running in background")


@run_app.command()
def steady(
    layers: list[int] = typer.Option([0, 2, 4, 6], "--layers", help="Dummy slice of ints"),
    begin: int = typer.Option(0, "--begin", help="Beginning row index."),
) -> None:
    """Run dummy in steady-state mode."""
    print("Yeah, I'm running steady")
    print(f"layers from {begin}: {layers[begin:]}")


if __name__ == "__main__":
    app()
