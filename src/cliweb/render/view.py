"""Serializable model of the page's interaction state.

The browser script embedded by :mod:`cliweb.render.renderer` never reads
flag values straight out of the live DOM while walking it. It first takes a
snapshot of every command container -- ``{name, visible, flags,
children}`` -- and then runs a pure recursive :func:`collect` over it. This
module is the Python side of the same model:

* :func:`build_view` produces the initial state the renderer draws (only
  the root visible, every flag at its declared value);
* :func:`select` and :func:`set_flag` apply the user actions the page
  supports;
* :func:`collect` yields the command path and flag assignments the page
  sends to the dispatcher, in document order.

Because the renderer draws from a :class:`ViewNode`, a view that has been
through :func:`select` renders with that selection already applied.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field

from cliweb.exceptions import NotFoundError
from cliweb.models import CommandNode, Flag, FlagType
from cliweb.tree.flags import entries

HELP_COMMAND = "help"


class ViewFlag(BaseModel):
    """One flag input as shown on the page."""

    name: str
    usage: str = ""
    value_type: FlagType = FlagType.STRING
    entries: list[str] = Field(default_factory=list)
    uploadable: bool = False
    optional: bool = Field(
        default=False, description="Non-string scalar declared without a default"
    )

    @property
    def is_list(self) -> bool:
        return self.value_type.is_list

    def values(self) -> list[str]:
        """The values this input contributes to a request.

        A scalar contributes exactly its (possibly empty) value, except an
        empty optional one, which is left unset. A list contributes each
        non-empty entry.
        """
        if self.is_list:
            return [entry for entry in self.entries if entry != ""]
        value = self.entries[0] if self.entries else ""
        if value == "" and self.optional:
            return []
        return [value]


class ViewNode(BaseModel):
    """One command container as shown on the page."""

    name: str
    short: str = ""
    long: str = ""
    visible: bool = False
    selected: Optional[str] = None
    flags: list[ViewFlag] = Field(default_factory=list)
    options: list[str] = Field(default_factory=list, description="Selector entries")
    children: list[ViewNode] = Field(default_factory=list)


ViewNode.model_rebuild()


def build_view(root: CommandNode) -> ViewNode:
    """Initial page state for *root*: only the root container is visible."""
    view = _build(root)
    view.visible = True
    return view


def _is_optional(flag: Flag) -> bool:
    value_type = flag.value_type
    return flag.value == "" and not value_type.is_list and value_type != FlagType.STRING


def _build(node: CommandNode) -> ViewNode:
    return ViewNode(
        name=node.name,
        short=node.short,
        long=node.long,
        flags=[
            ViewFlag(
                name=flag.name,
                usage=flag.usage,
                value_type=flag.value_type,
                entries=entries(flag),
                uploadable=flag.uploadable,
                optional=_is_optional(flag),
            )
            for flag in node.flags
            if not flag.hidden
        ],
        options=[c.name for c in node.children if c.name != HELP_COMMAND],
        children=[_build(child) for child in node.children],
    )


def find(view: ViewNode, path: Sequence[str]) -> ViewNode:
    """Return the container addressed by *path* (command names, root first).

    Raises:
        NotFoundError: If the path does not exist in the view.
    """
    if not path or path[0] != view.name:
        raise NotFoundError(f"no container {'/'.join(path)!r}")
    node = view
    for name in path[1:]:
        for child in node.children:
            if child.name == name:
                node = child
                break
        else:
            raise NotFoundError(f"no container {'/'.join(path)!r}")
    return node


def select(view: ViewNode, path: Sequence[str], child: str) -> ViewNode:
    """Choose *child* in the selector of the container at *path*.

    Shows exactly that child's container and hides its siblings. The
    siblings' own descendants keep their state but are no longer displayed,
    since a hidden container hides everything nested in it.

    Returns:
        The newly visible child container.

    Raises:
        NotFoundError: If *path* or *child* does not exist.
    """
    node = find(view, path)
    if child not in node.options:
        raise NotFoundError(f"{node.name} has no sub-command {child!r}")
    node.selected = child
    chosen = node
    for candidate in node.children:
        candidate.visible = candidate.name == child
        if candidate.visible:
            chosen = candidate
    return chosen


def set_flag(view: ViewNode, path: Sequence[str], name: str, *values: str) -> None:
    """Type *values* into the inputs of flag *name* of the container at *path*.

    Raises:
        NotFoundError: If the container or flag does not exist.
    """
    node = find(view, path)
    for flag in node.flags:
        if flag.name == name:
            flag.entries = list(values)
            return
    raise NotFoundError(f"{node.name} has no flag --{name}")


def is_displayed(view: ViewNode, path: Sequence[str]) -> bool:
    """Whether the container at *path* and all its ancestors are visible."""
    node = view
    if not node.visible:
        return False
    for name in path[1:]:
        node = next(c for c in node.children if c.name == name)
        if not node.visible:
            return False
    return True


def snapshot(view: ViewNode) -> dict[str, Any]:
    """The plain-data form of *view* that the page script walks.

    Only the keys the script reads are kept: ``name``, ``visible``,
    ``flags`` (``name``, ``value_type``, ``entries``) and ``children``.
    """
    return {
        "name": view.name,
        "visible": view.visible,
        "flags": [
            {
                "name": f.name,
                "value_type": f.value_type.value,
                "entries": list(f.entries),
                "optional": f.optional,
            }
            for f in view.flags
        ],
        "children": [snapshot(child) for child in view.children],
    }


def collect(
    view: Union[ViewNode, Mapping[str, Any]],
) -> tuple[list[str], list[tuple[str, str]]]:
    """Walk the visible containers and gather what Execute sends.

    *view* is a :class:`ViewNode` or a :func:`snapshot` of one.

    Returns:
        ``(commands, flags)``: the active command names root first, and the
        ``(name, value)`` assignments of every active container in document
        order.
    """
    if not isinstance(view, ViewNode):
        view = ViewNode.model_validate(view)
    commands: list[str] = []
    assignments: list[tuple[str, str]] = []
    if not view.visible:
        return commands, assignments
    commands.append(view.name)
    for flag in view.flags:
        assignments.extend((flag.name, value) for value in flag.values())
    for child in view.children:
        child_commands, child_flags = collect(child)
        commands.extend(child_commands)
        assignments.extend(child_flags)
    return commands, assignments


def active_path(view: ViewNode) -> list[str]:
    return collect(view)[0]


def format_command_line(commands: Sequence[str], flags: Sequence[tuple[str, str]]) -> str:
    """Render an invocation the way the page echoes it to its log.

    Example::

        >>> format_command_line(["calc", "add"], [("num1", "5")])
        'calc add --num1="5"'
    """
    parts = [" ".join(commands)]
    parts.extend(f"--{name}={json.dumps(value)}" for name, value in flags)
    return " ".join(parts)
