"""Turn a command tree into the interactive HTML front-end.

:func:`render_tree` produces an embeddable fragment, :func:`render_page` a
complete document. :mod:`cliweb.render.view` models the page's interaction
state and the request the page builds from it.
"""

from cliweb.render.renderer import TEMPLATE_DIR, container_id, render_page, render_tree
from cliweb.render.view import (
    ViewFlag,
    ViewNode,
    active_path,
    build_view,
    collect,
    format_command_line,
    select,
    set_flag,
    snapshot,
)

__all__ = [
    "TEMPLATE_DIR",
    "ViewFlag",
    "ViewNode",
    "active_path",
    "build_view",
    "collect",
    "container_id",
    "format_command_line",
    "render_page",
    "render_tree",
    "select",
    "set_flag",
    "snapshot",
]
