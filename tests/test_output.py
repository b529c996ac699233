"""Tests for the output formatting system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON and command tree output in plain mode
- Logging routed through Rich
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from cliweb import output as output_module
from cliweb.models import CommandNode
from cliweb.output import (
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("cliweb.output._is_tty", lambda: False)


@pytest.fixture()
def cliweb_logger():
    """The ``cliweb`` logger, restored after the test."""
    logger = logging.getLogger("cliweb")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ------------------------------------------------------------------ #
# Colour
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager().print_data("payload")
        captured = capfd.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    def test_print_data_keeps_existing_newline(self, capfd, non_tty):
        OutputManager().print_data("line\n")
        assert capfd.readouterr().out == "line\n"

    def test_info_goes_to_stderr(self, capfd, non_tty):
        OutputManager().info("status")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "status" in captured.err

    def test_error_prefix_without_color(self, capfd, non_tty):
        OutputManager(no_color=True).error("bad thing")
        assert capfd.readouterr().err == "Error: bad thing\n"

    def test_suggest_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("try this")
        assert capfd.readouterr().err == "→ try this\n"


class TestQuietMode:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        out = OutputManager(quiet=True)
        out.info("info")
        out.success("done")
        assert capfd.readouterr().err == ""

    def test_quiet_does_not_suppress_error(self, capfd, non_tty):
        OutputManager(quiet=True, no_color=True).error("fatal")
        assert "fatal" in capfd.readouterr().err

    def test_quiet_does_not_suppress_warning(self, capfd, non_tty):
        OutputManager(quiet=True, no_color=True).warning("careful")
        assert capfd.readouterr().err == "Warning: careful\n"


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager().debug("details")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        out = OutputManager(verbose=True, no_color=True)
        out.debug("details")
        assert capfd.readouterr().err == "[debug] details\n"
        assert out.is_verbose


# ------------------------------------------------------------------ #
# Structured output
# ------------------------------------------------------------------ #


class TestStructuredOutput:
    def test_json_is_plain_when_not_tty(self, capfd, non_tty):
        OutputManager().print_json({"name": "calc", "port": 8080})
        assert json.loads(capfd.readouterr().out) == {"name": "calc", "port": 8080}

    def test_plain_tree(self, capfd, non_tty, calc_root: CommandNode):
        OutputManager().print_tree(calc_root)
        lines = capfd.readouterr().out.splitlines()
        assert lines[0] == "root\tRoot command"
        assert "  --verbose (bool) = false [persistent]" in lines
        assert "  --secret (string) = s3cr3t [hidden]" in lines
        assert "  add\tAdd two integers" in lines
        assert "    --num1 (int) = 0" in lines
        assert "      --file (string) [uploadable]" in lines


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_installs_single_rich_handler(self, cliweb_logger):
        configure_logging()
        configure_logging()
        rich_handlers = [h for h in cliweb_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert cliweb_logger.level == logging.INFO

    def test_verbose_enables_debug(self, cliweb_logger):
        configure_logging(verbose=True)
        assert cliweb_logger.level == logging.DEBUG

    def test_records_reach_stderr(self, capfd, non_tty, cliweb_logger):
        set_output(OutputManager(no_color=True))
        configure_logging()
        logging.getLogger("cliweb.server.app").warning("client went away")
        captured = capfd.readouterr()
        assert "client went away" in captured.err
        assert captured.out == ""


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazily_created(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        manager = OutputManager(quiet=True)
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert output_module._output is None

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.warning("via module")
        output_module.print_data("data")
        captured = capfd.readouterr()
        assert captured.out == "data\n"
        assert captured.err == "Warning: via module\n"
