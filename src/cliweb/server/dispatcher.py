"""Resolve a request to a command node, bind its flags, and run it.

One :class:`Dispatcher` serves one command tree. Executions are serialised
by a lock because runners have ``sys.stdout``/``sys.stderr`` redirected into
their output sink, which is process-wide. Flag values never touch the tree:
each dispatch binds them in its own
:class:`~cliweb.tree.resolve.FlagBindings`.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from cliweb.exceptions import CliwebError, ExecutionError
from cliweb.models import CommandNode, ExecutionResult
from cliweb.render.view import format_command_line
from cliweb.server.broadcast import Broadcaster
from cliweb.server.sink import OutputSink
from cliweb.tree.resolve import bind_flags, resolve_path, split_path

logger = logging.getLogger(__name__)


class Dispatcher:
    """Execute commands of *root* on behalf of HTTP requests.

    Args:
        root: Root of the command tree.
        broadcaster: Receives every write of every execution for the
            live-output clients. Optional.
    """

    def __init__(self, root: CommandNode, broadcaster: Optional[Broadcaster] = None) -> None:
        self.root = root
        self.broadcaster = broadcaster
        self._lock = threading.Lock()

    def dispatch(self, path: str, params: Iterable[tuple[str, str]] = ()) -> ExecutionResult:
        """Run the command addressed by *path* with the flag values in *params*.

        Args:
            path: ``/<root>/<child>/...``; empty segments are ignored.
            params: ``(name, value)`` pairs in the order the client sent
                them. List flags may appear several times.

        Returns:
            The resolved command path and everything the runner wrote.

        Raises:
            NotFoundError: If the path does not resolve.
            InvalidArgumentError: For unknown flags or unparsable values.
            ExecutionError: If the node is not runnable or the runner fails.
        """
        names = split_path(path)
        chain = resolve_path(self.root, names)
        params = list(params)
        bindings = bind_flags(chain, params)
        node = bindings.node
        if node.runner is None:
            raise ExecutionError(f"{node.name} is not runnable; choose a sub-command")

        logger.info("Executing %s", format_command_line(bindings.command_path, params))
        sink = OutputSink(self.broadcaster)
        with self._lock:
            try:
                node.runner.run(bindings, sink)
            except CliwebError:
                raise
            except Exception as exc:
                logger.debug("Runner of %s failed", node.name, exc_info=True)
                raise ExecutionError(str(exc) or type(exc).__name__) from exc
            finally:
                sink.flush()
        return ExecutionResult(command=bindings.command_path, output=sink.getvalue())
