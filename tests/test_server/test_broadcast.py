"""Tests for cliweb.server.broadcast and cliweb.server.sink."""

from __future__ import annotations

import asyncio
import logging

import pytest

from cliweb.server.broadcast import Broadcaster
from cliweb.server.sink import OutputSink


# ---------------------------------------------------------------------------
# Broadcaster
# ---------------------------------------------------------------------------


class TestBroadcaster:
    def test_publish_without_clients_is_noop(self) -> None:
        Broadcaster().publish("nobody listens")

    def test_every_client_receives(self) -> None:
        async def scenario() -> list[str]:
            broadcaster = Broadcaster()
            first, second = broadcaster.subscribe(), broadcaster.subscribe()
            broadcaster.publish("hello")
            return [first.get_nowait(), second.get_nowait()]

        assert asyncio.run(scenario()) == ["hello", "hello"]

    def test_unsubscribe(self) -> None:
        async def scenario() -> tuple[int, bool]:
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            broadcaster.unsubscribe(queue)
            broadcaster.publish("gone")
            return broadcaster.client_count, queue.empty()

        assert asyncio.run(scenario()) == (0, True)

    def test_publish_from_worker_thread(self) -> None:
        async def scenario() -> str:
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            await asyncio.to_thread(broadcaster.publish, "from a thread")
            return await asyncio.wait_for(queue.get(), timeout=5)

        assert asyncio.run(scenario()) == "from a thread"

    def test_full_queue_drops_frame(self, caplog: pytest.LogCaptureFixture) -> None:
        async def scenario() -> tuple[list[str], list[str]]:
            broadcaster = Broadcaster(queue_size=1)
            slow, fast = broadcaster.subscribe(), broadcaster.subscribe()
            broadcaster.publish("one")
            fast.get_nowait()
            broadcaster.publish("two")
            return [slow.get_nowait()], [fast.get_nowait()]

        with caplog.at_level(logging.WARNING, logger="cliweb.server.broadcast"):
            slow, fast = asyncio.run(scenario())
        assert slow == ["one"]
        assert fast == ["two"]
        assert "dropped one output frame" in caplog.text

    def test_closed_loop_drops_silently(self) -> None:
        async def scenario() -> Broadcaster:
            broadcaster = Broadcaster()
            broadcaster.subscribe()
            return broadcaster

        broadcaster = asyncio.run(scenario())
        broadcaster.publish("late")


# ---------------------------------------------------------------------------
# OutputSink
# ---------------------------------------------------------------------------


class TestOutputSink:
    def test_buffers(self) -> None:
        sink = OutputSink()
        assert sink.write("a") == 1
        sink.write("bc\n")
        assert sink.getvalue() == "abc\n"

    def test_rejects_bytes(self) -> None:
        with pytest.raises(TypeError, match="must be str"):
            OutputSink().write(b"raw")

    def test_print_target(self) -> None:
        sink = OutputSink()
        print("hi", 3, file=sink)
        assert sink.getvalue() == "hi 3\n"
        assert sink.writable()
        assert not sink.isatty()
        assert sink.encoding == "utf-8"

    def test_tees_to_broadcaster(self) -> None:
        async def scenario() -> tuple[str, str]:
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            sink = OutputSink(broadcaster)
            sink.write("")
            sink.write("line\n")
            return queue.get_nowait(), sink.getvalue()

        assert asyncio.run(scenario()) == ("line\n", "line\n")

    def test_print_is_one_frame(self) -> None:
        async def scenario() -> list[str]:
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            print("live", file=OutputSink(broadcaster))
            return [queue.get_nowait() for _ in range(queue.qsize())]

        assert asyncio.run(scenario()) == ["live\n"]

    def test_partial_line_held_until_flush(self) -> None:
        async def scenario() -> tuple[list[str], list[str]]:
            broadcaster = Broadcaster()
            queue = broadcaster.subscribe()
            sink = OutputSink(broadcaster)
            sink.write("one\ntw")
            before = [queue.get_nowait() for _ in range(queue.qsize())]
            sink.write("o")
            sink.flush()
            sink.flush()
            after = [queue.get_nowait() for _ in range(queue.qsize())]
            return before, after

        assert asyncio.run(scenario()) == (["one\n"], ["two"])
