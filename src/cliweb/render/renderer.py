"""Render a command tree as an interactive HTML fragment or a complete page.

The fragment is self-contained: the nested command containers, one Execute
button, a log area, and an inline script that drives them. It can be
embedded in any host page. :func:`render_page` wraps it in the bundled
``page.html.j2`` or in a user-supplied Jinja2 template, which receives the
fragment as ``content`` and the root node as ``root``.

Markup contract (relied on by the inline script and by tests):

* The outermost element has ``id="cliweb-<root name>"``.
* Each command is a ``div`` with ``data-cliweb-name``; all but the root
  start with ``style="display:none"``.
* Each visible flag is an ``li`` with ``data-name`` and ``data-type`` in the
  command's ``ul.flags``.
* A command with children has a ``select`` with ``data-cliweb-select``
  whose first option is a disabled ``Select`` placeholder. Children named
  ``help`` are not offered.

The environment follows the same setup as the other generators in this
project: a :class:`~jinja2.FileSystemLoader` over the ``templates/``
directory next to this module, autoescape for ``.html.j2`` templates only,
and block trimming for readable templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError,
    select_autoescape,
)
from markupsafe import Markup

from cliweb.exceptions import ConfigError
from cliweb.models import CommandNode, ServerConfig
from cliweb.render.view import ViewNode, build_view

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the bundled Jinja2 templates (``render/templates/``)."""


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the bundled templates.

    ``.html.j2`` templates are autoescaped; ``client.js.j2`` is not and
    embeds values through the ``tojson`` filter instead.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(
            enabled_extensions=("html.j2",), disabled_extensions=("js.j2",)
        ),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def container_id(root: CommandNode | ViewNode) -> str:
    return f"cliweb-{root.name}"


def _client_config(view: ViewNode, config: ServerConfig) -> dict:
    return {
        "containerId": container_id(view),
        "apiBase": config.api_base,
        "liveOutput": config.live_output,
    }


def render_tree(
    root: CommandNode,
    config: Optional[ServerConfig] = None,
    view: Optional[ViewNode] = None,
) -> str:
    """Render *root* as an embeddable HTML fragment.

    Args:
        root: Root of the command tree.
        config: Server settings the page needs (``api_base`` and
            ``live_output``). Defaults to :class:`ServerConfig` defaults.
        view: Interaction state to draw. Defaults to
            :func:`~cliweb.render.view.build_view` of *root*.

    Returns:
        The HTML fragment.
    """
    config = config or ServerConfig()
    view = view or build_view(root)
    env = _create_jinja_env()
    template = env.get_template("command_tree.html.j2")
    return template.render(
        view=view,
        container_id=container_id(view),
        client_config=_client_config(view, config),
    )


def render_page(
    root: CommandNode,
    config: Optional[ServerConfig] = None,
    template: Optional[str | Path] = None,
) -> str:
    """Render a complete HTML document embedding the tree fragment.

    Args:
        root: Root of the command tree.
        config: Server settings, as for :func:`render_tree`. Its
            ``page_template`` is used when *template* is not given.
        template: Path to a Jinja2 host page. It receives ``content`` (the
            fragment, already marked safe) and ``root``.

    Raises:
        ConfigError: If the host page template is missing or invalid.
    """
    config = config or ServerConfig()
    content = Markup(render_tree(root, config))
    template = template or config.page_template

    if template is None:
        env = _create_jinja_env()
        return env.get_template("page.html.j2").render(content=content, root=root)

    path = Path(template)
    if not path.is_file():
        raise ConfigError(f"Page template not found: {path}")
    host_env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        autoescape=select_autoescape(enabled_extensions=("html", "htm", "html.j2", "j2")),
    )
    try:
        return host_env.get_template(path.name).render(content=content, root=root)
    except TemplateError as exc:
        raise ConfigError(f"Invalid page template {path}: {exc}") from exc
