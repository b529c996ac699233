"""Build a :class:`~cliweb.models.CommandNode` tree from a definition document.

A definition is a nested mapping, usually written in YAML::

    name: calc
    short: A tiny calculator
    flags:
      - name: timeout
        type: int
        default: 30
        persistent: true
    commands:
      - name: add
        runner: calc_app.runners:add
        flags:
          - {name: num1, type: int, default: 1}
          - {name: num2, type: int, default: 1}

Each ``runner`` is either a key of the *runners* mapping passed to
:func:`build_tree` or a ``module:attribute`` import string. The attribute
may be a :class:`~cliweb.tree.runners.Runner` or a plain callable
``fn(bindings, out)``.

:func:`validate_tree` enforces the structural rules every source of trees
must respect (non-empty names without ``/``, unique sibling names, unique
flag names per node); :func:`build_tree` calls it before returning.
"""

from __future__ import annotations

import importlib
from typing import Any, Mapping, Optional

from cliweb.exceptions import DefinitionError
from cliweb.models import CommandNode, Flag, FlagType
from cliweb.tree.flags import format_value
from cliweb.tree.runners import as_runner

_TYPE_ALIASES: dict[str, FlagType] = {
    "str": FlagType.STRING,
    "integer": FlagType.INT,
    "float": FlagType.FLOAT,
    "number": FlagType.FLOAT,
    "boolean": FlagType.BOOL,
    "string-list": FlagType.STRING_SLICE,
    "int-list": FlagType.INT_SLICE,
    "float-list": FlagType.FLOAT_SLICE,
}

_NODE_KEYS = frozenset({"name", "short", "long", "flags", "commands", "runner"})
_FLAG_KEYS = frozenset(
    {"name", "usage", "type", "default", "persistent", "uploadable", "hidden"}
)


def import_object(reference: str) -> Any:
    """Import the object named by a ``module:attribute`` reference.

    Dotted attribute paths (``pkg.cli:app.group``) are followed.

    Raises:
        DefinitionError: If the reference is malformed, the module cannot
            be imported, or the attribute does not exist.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise DefinitionError(
            f"Invalid reference {reference!r}: expected 'module:attribute'"
        )
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise DefinitionError(f"Cannot import module {module_name!r}: {exc}") from exc
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise DefinitionError(
                f"Module {module_name!r} has no attribute {attr_path!r}"
            ) from exc
    return obj


def parse_flag_type(name: str) -> FlagType:
    """Map a declared type name (canonical or alias) to a :class:`FlagType`.

    Raises:
        DefinitionError: For an unknown type name.
    """
    try:
        return FlagType(name)
    except ValueError:
        pass
    alias = _TYPE_ALIASES.get(name.lower())
    if alias is None:
        known = ", ".join(t.value for t in FlagType)
        raise DefinitionError(f"Unknown flag type {name!r} (expected one of: {known})")
    return alias


def build_tree(
    data: Mapping[str, Any],
    runners: Optional[Mapping[str, Any]] = None,
) -> CommandNode:
    """Build and validate a command tree from a definition mapping.

    Args:
        data: The root node mapping, as returned by
            :func:`~cliweb.definition.loader.load_definition`.
        runners: Optional registry consulted before import strings when a
            node names its runner.

    Returns:
        The root :class:`~cliweb.models.CommandNode`.

    Raises:
        DefinitionError: If the document is malformed, a runner cannot be
            resolved, or the tree violates :func:`validate_tree`.
    """
    root = _build_node(data, runners or {}, "")
    validate_tree(root)
    return root


def _build_node(data: Any, runners: Mapping[str, Any], parent: str) -> CommandNode:
    if not isinstance(data, Mapping):
        raise DefinitionError(f"Command under {parent or 'root'!r} must be a mapping")
    name = data.get("name")
    where = f"{parent} {name}".strip() if name else (parent or "root")
    if not isinstance(name, str):
        raise DefinitionError(f"Command under {where!r} is missing a 'name'")
    unknown = set(data) - _NODE_KEYS
    if unknown:
        raise DefinitionError(f"Command {where!r} has unknown keys: {sorted(unknown)}")

    flags = [_build_flag(f, where) for f in data.get("flags") or []]
    children = [_build_node(c, runners, where) for c in data.get("commands") or []]

    runner = None
    reference = data.get("runner")
    if reference is not None:
        runner = _resolve_runner(reference, runners, where)

    return CommandNode(
        name=name,
        short=str(data.get("short") or ""),
        long=str(data.get("long") or ""),
        flags=flags,
        children=children,
        runner=runner,
    )


def _build_flag(data: Any, where: str) -> Flag:
    if not isinstance(data, Mapping) or not isinstance(data.get("name"), str):
        raise DefinitionError(f"Flag of {where!r} must be a mapping with a 'name'")
    unknown = set(data) - _FLAG_KEYS
    if unknown:
        raise DefinitionError(
            f"Flag --{data['name']} of {where!r} has unknown keys: {sorted(unknown)}"
        )
    value_type = parse_flag_type(str(data.get("type", "string")))
    return Flag(
        name=data["name"],
        usage=str(data.get("usage") or ""),
        value_type=value_type,
        value=format_value(value_type, data.get("default")),
        persistent=bool(data.get("persistent", False)),
        uploadable=bool(data.get("uploadable", False)),
        hidden=bool(data.get("hidden", False)),
    )


def _resolve_runner(reference: Any, runners: Mapping[str, Any], where: str) -> Any:
    if not isinstance(reference, str):
        raise DefinitionError(f"Runner of {where!r} must be a string")
    target = runners[reference] if reference in runners else import_object(reference)
    try:
        return as_runner(target)
    except DefinitionError as exc:
        raise DefinitionError(f"Runner of {where!r}: {exc}") from exc


def validate_tree(root: CommandNode) -> None:
    """Check the structural rules of a command tree.

    Raises:
        DefinitionError: If a name is empty or contains ``/``, two siblings
            share a name, or a node declares the same flag twice.
    """
    _validate_node(root, root.name)


def _validate_node(node: CommandNode, where: str) -> None:
    if not node.name or "/" in node.name or node.name != node.name.strip():
        raise DefinitionError(f"Invalid command name {node.name!r} in {where!r}")
    seen_flags: set[str] = set()
    for flag in node.flags:
        if not flag.name:
            raise DefinitionError(f"Empty flag name in {where!r}")
        if flag.name in seen_flags:
            raise DefinitionError(f"Duplicate flag --{flag.name} in {where!r}")
        seen_flags.add(flag.name)
    seen_children: set[str] = set()
    for child in node.children:
        if child.name in seen_children:
            raise DefinitionError(f"Duplicate command {child.name!r} in {where!r}")
        seen_children.add(child.name)
        _validate_node(child, f"{where} {child.name}")


def mark_uploadable(root: CommandNode, names: list[str]) -> None:
    """Flag every non-hidden flag called one of *names* as uploadable.

    Runs once at startup, before the tree is shared with request handlers.
    """
    wanted = set(names)
    for node in root.walk():
        for flag in node.flags:
            if flag.name in wanted and not flag.hidden:
                flag.uploadable = True
