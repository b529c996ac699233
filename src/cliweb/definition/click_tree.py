"""Generate a :class:`~cliweb.models.CommandNode` tree from a click or Typer CLI.

This mirrors an existing command-line program instead of describing it a
second time: every click command becomes a node, every parameter a flag,
and every runnable node gets a shared :class:`~cliweb.tree.runners.ClickRunner`
that re-enters the original CLI.

**Mapping rules:**

* ``click.INT`` / ``IntRange`` become ``int``, ``click.FLOAT`` /
  ``FloatRange`` become ``float64``, boolean options become ``bool``;
  everything else (``Choice``, ``Path``, ``DateTime`` ...) is a ``string``.
* ``multiple=True`` options and variadic arguments become the matching
  ``*Slice`` type.
* Options declared on a group are *persistent* -- in click they apply to
  the whole invocation below that group.
* ``click.Path`` and ``click.File`` parameters are uploadable.
* Hidden options, ``--help`` and Typer's completion options are skipped.
"""

from __future__ import annotations

from typing import Any, Optional

import click
import typer

from cliweb.exceptions import DefinitionError
from cliweb.models import CommandNode, Flag, FlagType
from cliweb.tree.flags import format_value
from cliweb.tree.runners import ClickRunner, click_flag_name

_SKIPPED_FLAGS = frozenset({"help", "install-completion", "show-completion"})

_LIST_TYPES = {
    FlagType.STRING: FlagType.STRING_SLICE,
    FlagType.INT: FlagType.INT_SLICE,
    FlagType.FLOAT: FlagType.FLOAT_SLICE,
}


def to_click_command(obj: Any) -> click.Command:
    """Return the click command behind *obj* (a click command or a Typer app).

    Raises:
        DefinitionError: If *obj* is neither, or if the installed Typer
            builds its commands on something other than click.
    """
    if isinstance(obj, click.Command):
        return obj
    if isinstance(obj, typer.Typer):
        command = typer.main.get_command(obj)
        if not isinstance(command, click.Command):
            raise DefinitionError(
                f"typer {typer.__version__} does not build click commands; "
                "install typer<0.20"
            )
        return command
    raise DefinitionError(f"{obj!r} is not a click command or Typer application")


def from_click(obj: Any, name: Optional[str] = None) -> CommandNode:
    """Build the command tree of a click command or Typer application.

    Args:
        obj: A :class:`click.Command` (usually a group) or a
            :class:`typer.Typer` app.
        name: Root name to use when the command has none (Typer apps
            created without ``name=``). Defaults to ``"cli"``.

    Returns:
        The root :class:`~cliweb.models.CommandNode`; every runnable node
        shares one :class:`~cliweb.tree.runners.ClickRunner`.
    """
    command = to_click_command(obj)
    root_name = command.name or name or "cli"
    runner = ClickRunner(command, prog_name=root_name)
    return _convert(command, root_name, runner)


def _convert(command: click.Command, name: str, runner: ClickRunner) -> CommandNode:
    is_group = isinstance(command, click.Group)
    flags = [
        _convert_param(param, persistent=is_group)
        for param in command.params
        if _is_exposed(param)
    ]

    children: list[CommandNode] = []
    if is_group:
        with click.Context(command, info_name=name) as ctx:
            for child_name in command.list_commands(ctx):
                child = command.get_command(ctx, child_name)
                if child is None or child.hidden:
                    continue
                children.append(_convert(child, child_name, runner))

    runnable = not is_group or command.invoke_without_command
    return CommandNode(
        name=name,
        short=command.get_short_help_str(limit=120),
        long=(command.help or "").strip(),
        flags=flags,
        children=children,
        runner=runner if runnable else None,
    )


def _is_exposed(param: click.Parameter) -> bool:
    if isinstance(param, click.Option) and param.hidden:
        return False
    return click_flag_name(param) not in _SKIPPED_FLAGS


def _convert_param(param: click.Parameter, persistent: bool) -> Flag:
    value_type = _flag_type(param)
    return Flag(
        name=click_flag_name(param),
        usage=_usage(param),
        value_type=value_type,
        value=format_value(value_type, _default(param)),
        persistent=persistent,
        uploadable=isinstance(param.type, (click.Path, click.File)),
    )


def _flag_type(param: click.Parameter) -> FlagType:
    if isinstance(param, click.Option) and param.is_flag and not param.count:
        return FlagType.BOOL
    if isinstance(param.type, (click.types.IntParamType, click.IntRange)):
        scalar = FlagType.INT
    elif isinstance(param.type, (click.types.FloatParamType, click.FloatRange)):
        scalar = FlagType.FLOAT
    elif isinstance(param.type, click.types.BoolParamType):
        scalar = FlagType.BOOL
    else:
        scalar = FlagType.STRING
    if param.multiple or param.nargs == -1:
        return _LIST_TYPES.get(scalar, FlagType.STRING_SLICE)
    return scalar


def _usage(param: click.Parameter) -> str:
    text = getattr(param, "help", None) or ""
    if isinstance(param, click.Argument):
        return text or f"{param.human_readable_name} (argument)"
    return text


def _default(param: click.Parameter) -> Any:
    default = param.default
    if isinstance(param, click.Option) and param.is_flag and not param.count:
        return default is True
    # Newer click releases use a sentinel object for "no default".
    if callable(default) or not isinstance(default, (str, int, float, list, tuple)):
        return None
    return default
