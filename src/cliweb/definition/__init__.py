"""Command tree sources -- definition files, click/Typer apps, and Python objects.

The tree is built once at startup and is read-only afterwards. The single
entry point, :func:`load_tree`, accepts:

* a definition file path (``.json``, ``.yaml``, ``.yml``), ``-`` for
  stdin, or an ``http(s)://`` URL -- see :mod:`~cliweb.definition.loader`
  and :mod:`~cliweb.definition.builder`;
* a ``module:attribute`` import string naming a click command, a Typer
  app, a ready-made :class:`~cliweb.models.CommandNode`, or a
  zero-argument factory returning one of those -- see
  :mod:`~cliweb.definition.click_tree`.

Typical usage::

    from cliweb.definition import load_tree

    root = load_tree("examples/calc.yaml")
    root = load_tree("examples.dummy:app")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import click
import typer

from cliweb.definition.builder import (
    build_tree,
    import_object,
    mark_uploadable,
    validate_tree,
)
from cliweb.definition.click_tree import from_click
from cliweb.definition.loader import load_definition
from cliweb.exceptions import DefinitionError
from cliweb.models import CommandNode


def _is_import_string(source: str) -> bool:
    if source == "-" or source.startswith(("http://", "https://")):
        return False
    if Path(source).exists():
        return False
    module, sep, attr = source.partition(":")
    return bool(sep and module and attr) and "/" not in module


def tree_from_object(obj: Any, name: Optional[str] = None) -> CommandNode:
    """Turn an imported object into a validated command tree.

    Raises:
        DefinitionError: If *obj* is not a supported kind of object.
    """
    if isinstance(obj, CommandNode):
        validate_tree(obj)
        return obj
    if isinstance(obj, (click.Command, typer.Typer)):
        root = from_click(obj, name=name)
        validate_tree(root)
        return root
    if callable(obj):
        produced = obj()
        if callable(produced) and not isinstance(
            produced, (CommandNode, click.Command, typer.Typer)
        ):
            raise DefinitionError(f"Factory {obj!r} returned another callable")
        return tree_from_object(produced, name=name)
    raise DefinitionError(
        f"Cannot build a command tree from {type(obj).__name__}: expected a "
        "CommandNode, click command, Typer app, or a factory returning one"
    )


def load_tree(
    source: str,
    runners: Optional[Mapping[str, Any]] = None,
    name: Optional[str] = None,
) -> CommandNode:
    """Load the command tree from *source*.

    Args:
        source: Definition file path, ``-``, URL, or ``module:attribute``.
        runners: Runner registry for definition documents (see
            :func:`~cliweb.definition.builder.build_tree`).
        name: Root name for click/Typer apps that do not declare one.

    Raises:
        DefinitionError: If the source cannot be loaded or the tree is
            invalid.
    """
    if _is_import_string(source):
        return tree_from_object(import_object(source), name=name)
    return build_tree(load_definition(source), runners=runners)


__all__ = [
    "build_tree",
    "from_click",
    "import_object",
    "load_definition",
    "load_tree",
    "mark_uploadable",
    "tree_from_object",
    "validate_tree",
]
