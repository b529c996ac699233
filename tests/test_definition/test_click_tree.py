"""Tests for cliweb.definition.click_tree -- mirroring click and Typer CLIs."""

from __future__ import annotations

import click
import pytest
import typer

from cliweb.definition.click_tree import from_click, to_click_command
from cliweb.exceptions import DefinitionError
from cliweb.models import FlagType
from cliweb.server.dispatcher import Dispatcher
from cliweb.tree.runners import ClickRunner


# ---------------------------------------------------------------------------
# click group
# ---------------------------------------------------------------------------


class TestFromClick:
    def test_root(self, click_cli: click.Group) -> None:
        root = from_click(click_cli)
        assert root.name == "cli"
        assert root.short == "Manage greetings."
        assert "Longer text" in root.long
        assert root.runner is None

    def test_children_skip_hidden(self, click_cli: click.Group) -> None:
        root = from_click(click_cli)
        assert [c.name for c in root.children] == ["greet", "quit"]

    def test_group_options_are_persistent(self, click_cli: click.Group) -> None:
        config = from_click(click_cli).flag("config")
        assert config.persistent
        assert config.value == "./conf.toml"
        assert config.usage == "Config file"

    def test_command_options_are_local(self, click_cli: click.Group) -> None:
        greet = from_click(click_cli).child("greet")
        assert not any(flag.persistent for flag in greet.flags)

    def test_flag_names_and_order(self, click_cli: click.Group) -> None:
        greet = from_click(click_cli).child("greet")
        assert [f.name for f in greet.flags] == ["num", "tag", "force", "ratio", "input", "name"]

    def test_flag_types(self, click_cli: click.Group) -> None:
        greet = from_click(click_cli).child("greet")
        assert greet.flag("num").value_type == FlagType.INT
        assert greet.flag("num").value == "1"
        assert greet.flag("tag").value_type == FlagType.STRING_SLICE
        assert greet.flag("tag").value == ""
        assert greet.flag("force").value_type == FlagType.BOOL
        assert greet.flag("force").value == "false"
        assert greet.flag("ratio").value_type == FlagType.FLOAT
        assert greet.flag("name").value_type == FlagType.STRING

    def test_path_is_uploadable(self, click_cli: click.Group) -> None:
        greet = from_click(click_cli).child("greet")
        assert greet.flag("input").uploadable
        assert not greet.flag("num").uploadable

    def test_argument_usage(self, click_cli: click.Group) -> None:
        name = from_click(click_cli).child("greet").flag("name")
        assert "argument" in name.usage

    def test_shared_runner(self, click_cli: click.Group) -> None:
        root = from_click(click_cli)
        greet, quit_ = root.child("greet"), root.child("quit")
        assert isinstance(greet.runner, ClickRunner)
        assert greet.runner is quit_.runner

    def test_single_command(self) -> None:
        @click.command()
        @click.option("--count", type=int, default=1)
        def hello(count: int) -> None:
            click.echo("hi " * count)

        root = from_click(hello)
        assert root.name == "hello"
        assert root.children == []
        assert isinstance(root.runner, ClickRunner)

    def test_not_a_command(self) -> None:
        with pytest.raises(DefinitionError, match="not a click command"):
            to_click_command(object())


# ---------------------------------------------------------------------------
# Typer application
# ---------------------------------------------------------------------------


class TestFromTyper:
    @pytest.fixture
    def dummy(self):
        from examples.dummy import app

        return from_click(app, name="dummy")

    def test_structure(self, dummy) -> None:
        assert dummy.name == "dummy"
        assert sorted(c.name for c in dummy.children) == ["run", "version"]
        assert [c.name for c in dummy.child("run").children] == ["steady"]

    def test_root_option(self, dummy) -> None:
        config = dummy.flag("config")
        assert config.persistent
        assert config.value == "./conf.toml"

    def test_group_option(self, dummy) -> None:
        background = dummy.child("run").flag("inBackground")
        assert background.value_type == FlagType.BOOL
        assert background.persistent

    def test_list_option(self, dummy) -> None:
        steady = dummy.child("run").child("steady")
        assert steady.flag("layers").value_type == FlagType.INT_SLICE
        assert steady.flag("layers").value == "0,2,4,6"
        assert steady.flag("begin").value_type == FlagType.INT
        assert steady.flag("begin").value == "0"

    def test_dispatch_runs_callbacks(self, dummy) -> None:
        result = Dispatcher(dummy).dispatch(
            "/dummy/run/steady", [("begin", "1"), ("layers", "1,2,3")]
        )
        assert result.output == "I'm ran.\nYeah, I'm running steady\nlayers from 1: [2, 3]\n"

    def test_dispatch_defaults(self, dummy) -> None:
        result = Dispatcher(dummy).dispatch("/dummy/run/steady")
        assert result.output.endswith("layers from 0: [0, 2, 4, 6]\n")

    def test_installed_typer_builds_click_groups(self) -> None:
        from examples.dummy import app

        command = to_click_command(app)
        assert isinstance(command, click.Group)
        assert isinstance(command.get_command(click.Context(command), "run"), click.Group)

    def test_non_click_typer_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from examples.dummy import app

        monkeypatch.setattr(typer.main, "get_command", lambda typer_app: object())
        with pytest.raises(DefinitionError, match="does not build click commands"):
            from_click(app)
