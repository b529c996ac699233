"""Resolve request paths to command nodes and bind request parameters to flags.

The dispatcher turns ``/dummy/run/steady?begin=3`` into a command chain
``[dummy, run, steady]`` with :func:`resolve_path`, then turns the query
pairs into a :class:`FlagBindings` with :func:`bind_flags`.

Bindings are request-scoped: the tree's :class:`~cliweb.models.Flag`
objects are never written to, so concurrent or successive requests cannot
observe each other's values.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Sequence

from cliweb.exceptions import InvalidArgumentError, NotFoundError
from cliweb.models import CommandNode, Flag
from cliweb.tree.flags import default_value, format_list, parse_list, parse_values


def split_path(path: str) -> list[str]:
    """Split a URL path into command names, ignoring empty segments."""
    return [segment for segment in path.split("/") if segment]


def resolve_path(root: CommandNode, names: Sequence[str]) -> list[CommandNode]:
    """Resolve command names to the chain of nodes from *root* to the target.

    Args:
        root: Root of the command tree.
        names: Command names, root first (``["dummy", "run", "steady"]``).

    Returns:
        The nodes visited, root first. Its last element is the target.

    Raises:
        NotFoundError: If *names* is empty, does not start with the root
            name, or any later name has no matching child.
    """
    if not names or names[0] != root.name:
        raise NotFoundError(f"unknown command {'/'.join(names)!r}")

    chain = [root]
    node = root
    for name in names[1:]:
        child = node.child(name)
        if child is None:
            raise NotFoundError(
                f'unknown command "{name}" for "{" ".join(n.name for n in chain)}"'
            )
        chain.append(child)
        node = child
    return chain


def visible_flags(chain: Sequence[CommandNode]) -> dict[str, tuple[int, Flag]]:
    """Map every flag name reachable from the chain to ``(depth, flag)``.

    Flags of deeper nodes shadow same-named flags of their ancestors.
    """
    found: dict[str, tuple[int, Flag]] = {}
    for depth, node in enumerate(chain):
        for flag in node.flags:
            if not flag.hidden:
                found[flag.name] = (depth, flag)
    return found


class FlagBindings(Mapping[str, Any]):
    """Typed flag values for one invocation of a command chain.

    Reading a flag that the request did not set yields its declared
    default. Iteration covers every flag reachable from the chain.

    Example::

        bindings = bind_flags(chain, [("num1", "5"), ("num2", "7")])
        bindings["num1"] + bindings["num2"]   # 12
        bindings.is_set("timeout")            # False
    """

    def __init__(
        self,
        chain: Sequence[CommandNode],
        raw: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self._chain = tuple(chain)
        self._flags = visible_flags(self._chain)
        self._raw: dict[str, list[str]] = {}
        self._values: dict[str, Any] = {}
        for name, values in (raw or {}).items():
            entry = self._flags.get(name)
            if entry is None:
                raise InvalidArgumentError(
                    f"unknown flag: --{name} for "
                    f'"{" ".join(node.name for node in self._chain)}"'
                )
            self._raw[name] = list(values)
            self._values[name] = parse_values(entry[1], values)

    @property
    def chain(self) -> tuple[CommandNode, ...]:
        return self._chain

    @property
    def node(self) -> CommandNode:
        """The command being invoked (last element of the chain)."""
        return self._chain[-1]

    @property
    def command_path(self) -> list[str]:
        return [node.name for node in self._chain]

    def __getitem__(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        entry = self._flags.get(name)
        if entry is None:
            raise KeyError(name)
        return default_value(entry[1])

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def is_set(self, name: str) -> bool:
        """Whether the request supplied a value for *name*."""
        return name in self._raw

    def raw(self, name: str) -> str:
        """The string form of the flag's current value (a CSV record for lists)."""
        if name in self._raw:
            flag = self._flags[name][1]
            if flag.value_type.is_list:
                return format_list(
                    entry for value in self._raw[name] for entry in parse_list(value)
                )
            return self._raw[name][0] if self._raw[name] else ""
        entry = self._flags.get(name)
        if entry is None:
            raise KeyError(name)
        return entry[1].value

    def flag(self, name: str) -> Flag:
        return self._flags[name][1]

    def assigned(self, depth: int) -> list[tuple[Flag, Any]]:
        """Flags set by the request that belong to the node at *depth*.

        Returned in the node's declaration order.
        """
        node = self._chain[depth]
        return [
            (flag, self._values[flag.name])
            for flag in node.flags
            if flag.name in self._values and self._flags[flag.name][0] == depth
        ]


def bind_flags(
    chain: Sequence[CommandNode], params: Iterable[tuple[str, str]]
) -> FlagBindings:
    """Group ``(name, value)`` pairs by name and bind them to the chain's flags.

    Pairs keep their arrival order, so repeated list values are concatenated
    in the order the client sent them.

    Raises:
        InvalidArgumentError: For an unknown flag name or an unparsable
            value.
    """
    grouped: dict[str, list[str]] = {}
    for name, value in params:
        grouped.setdefault(name, []).append(value)
    return FlagBindings(chain, grouped)
