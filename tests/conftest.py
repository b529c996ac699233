"""Shared test fixtures for cliweb.

Provides a small hand-built command tree with function runners, a click
group exercising the click conversion, isolated config environments, and a
CLI runner. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import pytest

from cliweb.models import CommandNode, Flag, FlagType
from cliweb.output import reset_output
from cliweb.tree.runners import FunctionRunner


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Hand-built command tree
# ---------------------------------------------------------------------------


def _add(bindings: Any, out: Any) -> int:
    return bindings["num1"] + bindings["num2"]


def _echo(bindings: Any, out: Any) -> None:
    print(" ".join(bindings["words"]))
    if bindings["verbose"]:
        print("(verbose)")


def _fail(bindings: Any, out: Any) -> None:
    raise RuntimeError("boom")


def _cat(bindings: Any, out: Any) -> None:
    for path in [bindings["file"], *bindings["extra"]]:
        if path:
            out.write(Path(path).read_text(encoding="utf-8"))


@pytest.fixture
def calc_root() -> CommandNode:
    """A tree rooted at ``root``::

        root [--verbose (persistent bool)]
        +-- add    --num1 int=0 --num2 int=0     returns num1 + num2
        +-- echo   --words stringSlice           prints the words
        +-- fail                                 raises RuntimeError
        +-- help                                 never offered in the page
        +-- group  (no runner)
            +-- leaf --file string (uploadable) --extra stringSlice (uploadable)
    """
    return CommandNode(
        name="root",
        short="Root command",
        long="The root of the test tree.",
        flags=[
            Flag(
                name="verbose",
                usage="Talk more",
                value_type=FlagType.BOOL,
                value="false",
                persistent=True,
            ),
            Flag(name="secret", value="s3cr3t", hidden=True),
        ],
        children=[
            CommandNode(
                name="add",
                short="Add two integers",
                flags=[
                    Flag(name="num1", usage="First operand", value_type=FlagType.INT, value="0"),
                    Flag(name="num2", usage="Second operand", value_type=FlagType.INT, value="0"),
                ],
                runner=FunctionRunner(_add),
            ),
            CommandNode(
                name="echo",
                short="Print words",
                flags=[Flag(name="words", value_type=FlagType.STRING_SLICE, value="hello")],
                runner=FunctionRunner(_echo),
            ),
            CommandNode(name="fail", short="Always fails", runner=FunctionRunner(_fail)),
            CommandNode(name="help", short="Help about any command", runner=FunctionRunner(_add)),
            CommandNode(
                name="group",
                short="A pure group",
                children=[
                    CommandNode(
                        name="leaf",
                        short="Print uploaded files",
                        flags=[
                            Flag(name="file", value_type=FlagType.STRING, uploadable=True),
                            Flag(
                                name="extra",
                                value_type=FlagType.STRING_SLICE,
                                uploadable=True,
                            ),
                        ],
                        runner=FunctionRunner(_cat),
                    )
                ],
            ),
        ],
    )


# ---------------------------------------------------------------------------
# click group
# ---------------------------------------------------------------------------


@pytest.fixture
def click_cli() -> click.Group:
    """A click group covering the parameter kinds the converter maps."""

    @click.group(help="Manage greetings.\n\nLonger text about greetings.")
    @click.option("--config", default="./conf.toml", help="Config file")
    def cli(config: str) -> None:
        click.echo(f"config={config}")

    @cli.command(help="Greet someone.")
    @click.option("--num", type=int, default=1, help="Repetitions")
    @click.option("--tag", multiple=True, help="Tags")
    @click.option("--force/--no-force", default=False)
    @click.option("--ratio", type=click.FloatRange(0, 1), default=0.5)
    @click.option("--token", hidden=True)
    @click.option("--input", "input_path", type=click.Path(), help="Input file")
    @click.argument("name", required=False)
    def greet(
        num: int,
        tag: tuple[str, ...],
        force: bool,
        ratio: float,
        token: str,
        input_path: str,
        name: str,
    ) -> None:
        for _ in range(num):
            click.echo(f"hello {name or 'world'} tags={','.join(tag)} force={force}")

    @cli.command()
    @click.option("--code", type=int, default=0)
    def quit(code: int) -> None:
        """Exit with a status."""
        raise click.exceptions.Exit(code)

    @cli.command(hidden=True)
    def internal() -> None:
        click.echo("internal")

    return cli


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all CLIWEB_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("cliweb.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "CLIWEB_DEFINITION",
        "CLIWEB_HOST",
        "CLIWEB_PORT",
        "CLIWEB_ALLOW_CORS",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def calc_definition(isolated_config: Path) -> Path:
    """Copy the calculator definition into the isolated working directory."""
    target = isolated_config / "calc.yaml"
    target.write_text((FIXTURES_DIR / "calc.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
