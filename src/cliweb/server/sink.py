"""Text stream that captures command output and tees it to live clients."""

from __future__ import annotations

import io
from typing import Optional

from cliweb.server.broadcast import Broadcaster


class OutputSink(io.TextIOBase):
    """Writable text stream handed to runners as ``out``.

    Everything written is kept for the HTTP response and, when a
    :class:`~cliweb.server.broadcast.Broadcaster` is attached, published to
    the live-output clients one complete line (or run of lines) per frame.
    A trailing partial line is held back until a newline arrives or
    :meth:`flush` is called. The sink also stands in for
    ``sys.stdout``/``sys.stderr`` while a runner executes, so it only
    accepts ``str``.
    """

    def __init__(self, broadcaster: Optional[Broadcaster] = None) -> None:
        super().__init__()
        self._buffer = io.StringIO()
        self._broadcaster = broadcaster
        self._pending = ""

    @property
    def encoding(self) -> str:
        return "utf-8"

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return False

    def write(self, s: str) -> int:
        if not isinstance(s, str):
            raise TypeError(f"write() argument must be str, not {type(s).__name__}")
        self._buffer.write(s)
        if self._broadcaster is not None:
            self._pending += s
            end = self._pending.rfind("\n") + 1
            if end:
                frame, self._pending = self._pending[:end], self._pending[end:]
                self._broadcaster.publish(frame)
        return len(s)

    def flush(self) -> None:
        """Publish the held-back partial line, if any."""
        super().flush()
        if self._pending and self._broadcaster is not None:
            frame, self._pending = self._pending, ""
            self._broadcaster.publish(frame)

    def getvalue(self) -> str:
        """Everything written so far."""
        return self._buffer.getvalue()
