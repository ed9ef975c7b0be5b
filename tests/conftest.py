"""Shared fixtures for signald SDK tests."""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import anyio
import pytest

from signald_sdk import SignaldConnectionError, Transport


class FakeDaemonTransport(Transport):
    """In-memory transport standing in for the daemon socket.

    Lines passed to feed() are yielded by read_lines() in order; feed_eof()
    ends the stream. Every written frame is decoded into ``written`` and
    handed to ``on_write`` if set.
    """

    def __init__(self) -> None:
        self.written: list[dict[str, Any]] = []
        self.on_write: Callable[[dict[str, Any]], None] | None = None
        self.fail_writes = False
        self.closed = False
        self._ready = False
        self._inbound_send, self._inbound_receive = anyio.create_memory_object_stream[
            bytes
        ](max_buffer_size=100)

    async def connect(self) -> None:
        self._ready = True

    async def write(self, data: bytes) -> None:
        if not self._ready:
            raise SignaldConnectionError("Transport is not ready for writing")
        if self.fail_writes:
            raise SignaldConnectionError("Failed to write to signald socket: EPIPE")
        message = json.loads(data)
        self.written.append(message)
        if self.on_write:
            self.on_write(message)

    def feed(self, line: dict[str, Any] | str) -> None:
        if isinstance(line, dict):
            line = json.dumps(line)
        self._inbound_send.send_nowait(line.encode() + b"\n")

    def feed_eof(self) -> None:
        self._inbound_send.close()

    async def read_lines(self) -> AsyncIterator[bytes]:
        async for line in self._inbound_receive:
            yield line

    async def close(self) -> None:
        self._ready = False
        self.closed = True
        self._inbound_send.close()

    def is_ready(self) -> bool:
        return self._ready


def reply_with(
    transport: FakeDaemonTransport, data: Any
) -> Callable[[dict[str, Any]], None]:
    """Build an on_write hook answering every request with ``data``."""

    def _reply(message: dict[str, Any]) -> None:
        transport.feed({"id": message["id"], "type": message["type"], "data": data})

    return _reply


@pytest.fixture
def transport() -> FakeDaemonTransport:
    return FakeDaemonTransport()


@pytest.fixture
def make_reply() -> Callable[..., Callable[[dict[str, Any]], None]]:
    return reply_with
