"""Command tree operations -- flag typing, path resolution, and runners.

Typical usage::

    from cliweb.tree import bind_flags, resolve_path

    chain = resolve_path(root, ["calc", "add"])
    bindings = bind_flags(chain, [("num1", "5"), ("num2", "7")])
    chain[-1].runner.run(bindings, out)

Sub-modules:

* :mod:`~cliweb.tree.flags` -- parse and serialise values per
  :class:`~cliweb.models.FlagType`.
* :mod:`~cliweb.tree.resolve` -- command path resolution and
  request-scoped :class:`~cliweb.tree.resolve.FlagBindings`.
* :mod:`~cliweb.tree.runners` -- the :class:`~cliweb.tree.runners.Runner`
  protocol and its function and click implementations.
"""

from cliweb.tree.resolve import FlagBindings, bind_flags, resolve_path, split_path
from cliweb.tree.runners import ClickRunner, FunctionRunner, Runner, as_runner

__all__ = [
    "ClickRunner",
    "FlagBindings",
    "FunctionRunner",
    "Runner",
    "as_runner",
    "bind_flags",
    "resolve_path",
    "split_path",
]
