"""Executable behaviour bound to command nodes.

Every runnable :class:`~cliweb.models.CommandNode` carries a *runner*: any
object implementing the :class:`Runner` protocol, i.e. a single
``run(bindings, out)`` method. Failure is signalled by raising; the
dispatcher turns anything that is not already a
:class:`~cliweb.exceptions.CliwebError` into an
:class:`~cliweb.exceptions.ExecutionError`.

Two implementations cover the common cases:

* :class:`FunctionRunner` -- wraps a plain callable ``fn(bindings, out)``.
* :class:`ClickRunner` -- re-invokes a click (or Typer) command tree with an
  argument vector rebuilt from the bindings, so group callbacks and option
  callbacks run exactly as they do on the command line.

Both redirect ``sys.stdout``/``sys.stderr`` into *out* while the command
runs, so ``print()`` and ``click.echo()`` are captured as well. The
redirection is process-wide; callers serialise executions (see
:class:`cliweb.server.dispatcher.Dispatcher`).
"""

from __future__ import annotations

import contextlib
from typing import Any, Callable, Iterator, Optional, Protocol, TextIO, runtime_checkable

import click

from cliweb.exceptions import DefinitionError, ExecutionError
from cliweb.models import Flag
from cliweb.tree.flags import format_scalar
from cliweb.tree.resolve import FlagBindings


@runtime_checkable
class Runner(Protocol):
    """The single capability a command needs to be executable."""

    def run(self, bindings: FlagBindings, out: TextIO) -> None:
        """Execute the command with *bindings*, writing its output to *out*."""
        ...


@contextlib.contextmanager
def capture_stdio(out: TextIO) -> Iterator[TextIO]:
    """Redirect standard output and standard error into *out*."""
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(out):
        yield out


class FunctionRunner:
    """Adapt a callable ``fn(bindings, out)`` to the :class:`Runner` protocol.

    A non-``None`` return value is written to *out* after the call, followed
    by a newline if it does not already end with one.
    """

    def __init__(self, fn: Callable[[FlagBindings, TextIO], Any]) -> None:
        self.fn = fn

    def run(self, bindings: FlagBindings, out: TextIO) -> None:
        with capture_stdio(out):
            result = self.fn(bindings, out)
        if result is not None:
            text = str(result)
            out.write(text if text.endswith("\n") else text + "\n")

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"FunctionRunner({name})"


def as_runner(obj: Any) -> Runner:
    """Coerce *obj* into a :class:`Runner`.

    Objects that already implement ``run`` are returned unchanged; other
    callables are wrapped in :class:`FunctionRunner`.

    Raises:
        DefinitionError: If *obj* is neither.
    """
    if isinstance(obj, Runner):
        return obj
    if callable(obj):
        return FunctionRunner(obj)
    raise DefinitionError(f"{obj!r} is not a runner: expected run(bindings, out) or a callable")


# ---------------------------------------------------------------------------
# click / Typer
# ---------------------------------------------------------------------------


def click_flag_name(param: click.Parameter) -> str:
    """Name under which a click parameter appears as a flag.

    Options use their first long option without dashes (``--dry-run`` gives
    ``dry-run``), falling back to the first option string. Arguments use
    their parameter name.
    """
    if isinstance(param, click.Option):
        for opt in param.opts:
            if opt.startswith("--"):
                return opt[2:]
        return param.opts[0].lstrip("-")
    return param.name or ""


def _option_string(param: click.Option, flag: Flag) -> str:
    wanted = f"--{flag.name}"
    return wanted if wanted in param.opts else param.opts[0]


def _option_args(param: click.Option, flag: Flag, value: Any) -> list[str]:
    opt = _option_string(param, flag)
    if param.is_flag and not param.count:
        if value:
            return [opt]
        if param.secondary_opts:
            return [param.secondary_opts[0]]
        return []
    if flag.value_type.is_list:
        args: list[str] = []
        for item in value or []:
            args.extend([opt, format_scalar(item)])
        return args
    if value is None:
        return []
    return [opt, format_scalar(value)]


def _argument_args(flag: Flag, value: Any) -> list[str]:
    if value is None:
        return []
    if flag.value_type.is_list:
        return [format_scalar(item) for item in value]
    return [format_scalar(value)]


class ClickRunner:
    """Run a node of a click command tree through the real click parser.

    The argument vector is rebuilt from the bindings: each node's changed
    options follow its own command name, and arguments come after the
    options of the node that declares them. Options still at their
    declared default are left out so click applies its own defaults.

    Args:
        root: The root click command (``typer.main.get_command(app)`` for
            Typer apps).
        prog_name: Program name reported in click's error messages.
    """

    def __init__(self, root: click.Command, prog_name: Optional[str] = None) -> None:
        self.root = root
        self.prog_name = prog_name or root.name or "cli"

    def build_args(self, bindings: FlagBindings) -> list[str]:
        """The argument vector (excluding the program name) for *bindings*."""
        args: list[str] = []
        command = self.root
        for depth, node in enumerate(bindings.chain):
            if depth > 0:
                command = self._subcommand(command, node.name)
                args.append(node.name)
            params = {click_flag_name(p): p for p in command.params}
            positional: list[str] = []
            for flag, value in bindings.assigned(depth):
                if bindings.raw(flag.name) == flag.value:
                    continue
                param = params.get(flag.name)
                if isinstance(param, click.Option):
                    args.extend(_option_args(param, flag, value))
                elif isinstance(param, click.Argument):
                    positional.extend(_argument_args(flag, value))
            args.extend(positional)
        return args

    def run(self, bindings: FlagBindings, out: TextIO) -> None:
        args = self.build_args(bindings)
        with capture_stdio(out):
            try:
                with self.root.make_context(self.prog_name, args) as ctx:
                    self.root.invoke(ctx)
            except click.exceptions.Exit as exc:
                if exc.exit_code:
                    raise ExecutionError(
                        f"{' '.join(bindings.command_path)} exited with status {exc.exit_code}"
                    ) from exc
            except click.ClickException as exc:
                raise ExecutionError(exc.format_message()) from exc
            except click.Abort as exc:
                raise ExecutionError("Aborted!") from exc

    def _subcommand(self, group: click.Command, name: str) -> click.Command:
        if not isinstance(group, click.Group):
            raise ExecutionError(f"{group.name} has no sub-command {name!r}")
        with click.Context(group, info_name=group.name) as ctx:
            command = group.get_command(ctx, name)
        if command is None:
            raise ExecutionError(f"{group.name} has no sub-command {name!r}")
        return command

    def __repr__(self) -> str:
        return f"ClickRunner({self.prog_name})"
