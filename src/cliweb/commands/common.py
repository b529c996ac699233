"""Helpers shared by the sub-commands that load a command tree."""

from __future__ import annotations

import contextlib
import os
import sys
from typing import Iterator, Optional

import typer

from cliweb.definition import load_tree, mark_uploadable
from cliweb.exceptions import CliwebError, ConfigError
from cliweb.models import CommandNode
from cliweb.output import debug, error, suggest


@contextlib.contextmanager
def exit_on_error() -> Iterator[None]:
    """Report a :class:`~cliweb.exceptions.CliwebError` and exit with its code."""
    try:
        yield
    except CliwebError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def load_root(source: Optional[str], uploadable: Optional[list[str]] = None) -> CommandNode:
    """Load the command tree from *source* and mark *uploadable* flags.

    Raises:
        ConfigError: If *source* is ``None`` (no argument and no configured
            ``definition``).
        DefinitionError: If the tree cannot be loaded.
    """
    if not source:
        suggest("Pass a definition file or module:attribute, or run 'cliweb config set definition ...'")
        raise ConfigError("No command tree source given")
    # Import strings resolve against the working directory.
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())
    debug(f"Loading command tree from {source}")
    root = load_tree(source)
    if uploadable:
        mark_uploadable(root, uploadable)
    return root
