"""Canonical Pydantic models shared across all cliweb modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Command tree models** -- built once at startup by
:mod:`cliweb.definition` and treated as read-only afterwards:
    :class:`FlagType`, :class:`Flag`, and :class:`CommandNode`.

**Configuration models** -- serialised as JSON in the user's config
directory or in a project-local ``cliweb.json``:
    :class:`ServerConfig` and :class:`GlobalConfig`.

:class:`ExecutionResult` is what the dispatcher hands back to the HTTP
layer after a successful run.
"""

from __future__ import annotations

import enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Command tree ---


class FlagType(str, enum.Enum):
    """Declared value type of a :class:`Flag`.

    Member values use the type names of the command-line flag libraries
    the browser protocol was first written for (``stringSlice`` rather
    than ``list[str]``), because they travel over the wire as the
    ``type`` field of upload requests and as ``data-type`` attributes in
    the rendered page.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float64"
    BOOL = "bool"
    STRING_SLICE = "stringSlice"
    INT_SLICE = "intSlice"
    FLOAT_SLICE = "float64Slice"

    @property
    def is_list(self) -> bool:
        """Whether values of this type hold several entries."""
        return self.value.endswith("Slice")

    @property
    def element_type(self) -> FlagType:
        """The scalar type of one entry (the type itself for scalars)."""
        return _ELEMENT_TYPES.get(self, self)


_ELEMENT_TYPES = {
    FlagType.STRING_SLICE: FlagType.STRING,
    FlagType.INT_SLICE: FlagType.INT,
    FlagType.FLOAT_SLICE: FlagType.FLOAT,
}


class Flag(BaseModel):
    """A named, typed parameter attached to a :class:`CommandNode`.

    ``value`` is always the string-serialised form: list values are one
    CSV record (see :func:`cliweb.tree.flags.format_list`). It holds the
    declared default; request values never overwrite it, they live in a
    request-scoped :class:`~cliweb.tree.resolve.FlagBindings` instead.
    """

    name: str
    usage: str = ""
    value_type: FlagType = FlagType.STRING
    value: str = ""
    persistent: bool = Field(
        default=False, description="Inherited by sub-commands when set on a group"
    )
    uploadable: bool = Field(
        default=False, description="Offer a file picker whose upload path becomes the value"
    )
    hidden: bool = False


class CommandNode(BaseModel):
    """One command or sub-command of the tree.

    ``runner`` is excluded from serialisation; it is any object with a
    ``run(bindings, out)`` method (see :class:`cliweb.tree.runners.Runner`).
    Nodes without a runner are pure groups and can only be used as a path
    prefix.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    short: str = ""
    long: str = ""
    flags: list[Flag] = Field(default_factory=list)
    children: list[CommandNode] = Field(default_factory=list)
    runner: Optional[Any] = Field(default=None, exclude=True, repr=False)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def child(self, name: str) -> Optional[CommandNode]:
        """Return the immediate child called *name*, or ``None``."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def flag(self, name: str) -> Optional[Flag]:
        """Return the flag declared on this node called *name*, or ``None``."""
        for flag in self.flags:
            if flag.name == name:
                return flag
        return None

    def walk(self) -> Iterator[CommandNode]:
        """Yield this node and every descendant, depth first in declaration order."""
        yield self
        for child in self.children:
            yield from child.walk()


CommandNode.model_rebuild()


class ExecutionResult(BaseModel):
    """Outcome of one successful dispatch."""

    command: list[str] = Field(description="Resolved command path, root first")
    output: str = ""


# --- Configuration ---


class ServerConfig(BaseModel):
    """Settings for the HTTP server started by ``cliweb serve``."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=8080, description="Port to bind")
    api_base: str = Field(
        default="",
        description="host:port the page talks to; empty means the serving origin",
    )
    allow_cors: bool = Field(
        default=False, description="Send Access-Control-Allow-Origin: * on responses"
    )
    live_output: bool = Field(
        default=True, description="Stream output to the page over a WebSocket at /ws"
    )
    serve_page: bool = Field(default=True, description="Serve the rendered page at /")
    page_template: Optional[str] = Field(
        default=None, description="Jinja2 host page; the fragment is passed as 'content'"
    )
    uploadable_flags: list[str] = Field(
        default_factory=list, description="Flag names that accept file uploads"
    )
    upload_dir: Optional[str] = Field(
        default=None, description="Where uploads are stored; default is a temp dir"
    )
    strict_status_codes: bool = Field(
        default=False, description="Answer invalid arguments with 400 instead of 500"
    )
    live_queue_size: int = Field(
        default=1000, description="Frames buffered per live-output client"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/cliweb/config.json``.

    Loaded and saved by :func:`~cliweb.config.load_global_config` and
    :func:`~cliweb.config.save_global_config`. See
    :func:`~cliweb.config.resolve_config` for the precedence chain.
    """

    definition: Optional[str] = Field(
        default=None,
        description="Default command tree source: file, URL, or module:attribute",
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
