"""Tests for signald SDK transport layer."""

import json
import logging
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import anyio
import pytest
from anyio.abc import ByteStream

from signald_sdk import (
    SignaldConnectionError,
    SocketNotFoundError,
    StreamTransport,
    UnixSocketTransport,
)
from signald_sdk._internal.connection import Connection


class MockByteStream(ByteStream):
    """Byte stream replaying fixed chunks, recording sent data."""

    def __init__(self, chunks: list[bytes], fail_send: bool = False) -> None:
        self.chunks = list(chunks)
        self.sent: list[bytes] = []
        self.fail_send = fail_send
        self.closed = False

    async def receive(self, max_bytes: int = 65536) -> bytes:
        if self.closed:
            raise anyio.ClosedResourceError
        if not self.chunks:
            raise anyio.EndOfStream
        return self.chunks.pop(0)

    async def send(self, item: bytes) -> None:
        if self.fail_send:
            raise anyio.BrokenResourceError
        self.sent.append(item)

    async def send_eof(self) -> None:
        pass

    async def aclose(self) -> None:
        self.closed = True


async def collect(lines: AsyncIterator[bytes]) -> list[bytes]:
    return [line async for line in lines]


class TestStreamTransport:
    """Test line framing over a byte stream."""

    def test_lines_split_across_chunks(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([b'{"id": "R', b'1"}\n{"type"', b': "x"}\n'])
            transport = StreamTransport(stream)
            await transport.connect()

            lines = await collect(transport.read_lines())

            assert lines == [b'{"id": "R1"}', b'{"type": "x"}']

        anyio.run(_test)

    def test_multiple_lines_in_one_chunk(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([b'{"a": 1}\n{"b": 2}\n{"c": 3}\n'])
            transport = StreamTransport(stream)
            await transport.connect()

            lines = await collect(transport.read_lines())

            assert len(lines) == 3

        anyio.run(_test)

    def test_blank_lines_skipped(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([b'\n\n{"a": 1}\n  \n'])
            transport = StreamTransport(stream)
            await transport.connect()

            assert await collect(transport.read_lines()) == [b'{"a": 1}']

        anyio.run(_test)

    def test_partial_line_at_eof(self) -> None:
        """A final line without newline is still delivered."""

        async def _test() -> None:
            stream = MockByteStream([b'{"a": 1}\n{"b": 2}'])
            transport = StreamTransport(stream)
            await transport.connect()

            lines = await collect(transport.read_lines())

            assert lines == [b'{"a": 1}', b'{"b": 2}']
            assert not transport.is_ready()

        anyio.run(_test)

    def test_oversized_line_split_across_chunks_is_skipped(self, caplog) -> None:
        """A long line arriving in pieces is dropped; reading continues."""

        async def _test() -> None:
            stream = MockByteStream(
                [
                    b'{"type": "event", "data": {"blob": "' + b"x" * 80,
                    b"x" * 120 + b'"}}\n{"id": "R1"}\n',
                    b'{"id": "R2"}\n',
                ]
            )
            transport = StreamTransport(stream, max_frame_size=100)
            await transport.connect()

            lines = await collect(transport.read_lines())

            assert lines == [b'{"id": "R1"}', b'{"id": "R2"}']

        with caplog.at_level(logging.WARNING, logger="signald_sdk"):
            anyio.run(_test)

        assert "Discarding frame larger than 100 bytes" in caplog.text

    def test_oversized_line_in_one_chunk_is_skipped(self) -> None:
        """The size limit holds however the bytes are chunked."""

        async def _test() -> None:
            stream = MockByteStream([b"x" * 150 + b'\n{"id": "R1"}\n'])
            transport = StreamTransport(stream, max_frame_size=100)
            await transport.connect()

            assert await collect(transport.read_lines()) == [b'{"id": "R1"}']

        anyio.run(_test)

    def test_oversized_line_at_eof(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([b'{"id": "R1"}\n', b"x" * 64, b"x" * 64])
            transport = StreamTransport(stream, max_frame_size=100)
            await transport.connect()

            assert await collect(transport.read_lines()) == [b'{"id": "R1"}']

        anyio.run(_test)

    def test_oversized_line_does_not_stop_responses(self) -> None:
        """A pending request is still answered after an oversized event."""

        class QueueByteStream(ByteStream):
            def __init__(self) -> None:
                self.sent: list[bytes] = []
                self.send_chunk, self._chunks = anyio.create_memory_object_stream[
                    bytes
                ](max_buffer_size=10)

            async def receive(self, max_bytes: int = 65536) -> bytes:
                return await self._chunks.receive()

            async def send(self, item: bytes) -> None:
                self.sent.append(item)

            async def send_eof(self) -> None:
                pass

            async def aclose(self) -> None:
                self.send_chunk.close()

        async def _test() -> None:
            stream = QueueByteStream()
            transport = StreamTransport(stream, max_frame_size=100)
            await transport.connect()
            connection = Connection(transport)
            await connection.start()
            results: dict[str, Any] = {}

            async def issue() -> None:
                results["ping"] = await connection.request({"type": "ping"})

            async with anyio.create_task_group() as tg:
                tg.start_soon(issue)
                with anyio.fail_after(1):
                    while not stream.sent:
                        await anyio.sleep(0.001)
                request_id = json.loads(stream.sent[0])["id"]

                stream.send_chunk.send_nowait(
                    b'{"type": "event", "data": {"blob": "' + b"x" * 100
                )
                stream.send_chunk.send_nowait(b"x" * 100 + b'"}}\n')
                reply = {"id": request_id, "data": {"ok": True}}
                stream.send_chunk.send_nowait(json.dumps(reply).encode() + b"\n")

                with anyio.fail_after(1):
                    while "ping" not in results:
                        await anyio.sleep(0.001)

            assert results["ping"]["data"] == {"ok": True}
            assert connection.is_open

            await connection.close()

        anyio.run(_test)

    def test_read_before_connect(self) -> None:
        async def _test() -> None:
            transport = StreamTransport(MockByteStream([]))

            with pytest.raises(SignaldConnectionError):
                await collect(transport.read_lines())

        anyio.run(_test)

    def test_write(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([])
            transport = StreamTransport(stream)
            await transport.connect()

            await transport.write(b'{"type":"version","id":"R1"}\n')

            assert stream.sent == [b'{"type":"version","id":"R1"}\n']

        anyio.run(_test)

    def test_write_before_connect(self) -> None:
        async def _test() -> None:
            transport = StreamTransport(MockByteStream([]))

            with pytest.raises(SignaldConnectionError, match="not ready"):
                await transport.write(b"{}\n")

        anyio.run(_test)

    def test_write_failure_is_terminal(self) -> None:
        """A failed write marks the transport unusable; there is no retry."""

        async def _test() -> None:
            stream = MockByteStream([], fail_send=True)
            transport = StreamTransport(stream)
            await transport.connect()

            with pytest.raises(SignaldConnectionError, match="Failed to write"):
                await transport.write(b"{}\n")

            assert not transport.is_ready()
            stream.fail_send = False
            with pytest.raises(SignaldConnectionError):
                await transport.write(b"{}\n")

        anyio.run(_test)

    def test_connect_without_stream(self) -> None:
        async def _test() -> None:
            with pytest.raises(SignaldConnectionError):
                await StreamTransport().connect()

        anyio.run(_test)

    def test_close(self) -> None:
        async def _test() -> None:
            stream = MockByteStream([])
            transport = StreamTransport(stream)
            await transport.connect()
            assert transport.is_ready()

            await transport.close()

            assert stream.closed
            assert not transport.is_ready()
            await transport.close()

        anyio.run(_test)


class TestUnixSocketTransport:
    """Test the Unix domain socket transport."""

    def test_socket_not_found(self) -> None:
        async def _test() -> None:
            missing = Path(tempfile.mkdtemp()) / "missing.sock"
            transport = UnixSocketTransport(missing)

            with pytest.raises(SocketNotFoundError) as exc_info:
                await transport.connect()

            assert exc_info.value.socket_path == str(missing)
            assert not transport.is_ready()

        anyio.run(_test)

    def test_accepts_pathlib_path(self) -> None:
        transport = UnixSocketTransport(Path("/var/run/signald/signald.sock"))

        assert transport.socket_path == "/var/run/signald/signald.sock"

    def test_round_trip(self) -> None:
        """Lines written by the peer are read back; writes reach the peer."""

        async def _test() -> None:
            socket_path = Path(tempfile.mkdtemp()) / "s.sock"
            received: list[bytes] = []

            async with await anyio.create_unix_listener(socket_path) as listener:

                async def serve_once() -> None:
                    async with await listener.accept() as peer:
                        await peer.send(b'{"type": "event", "data": {}}\n')
                        received.append(await peer.receive())

                async with anyio.create_task_group() as tg:
                    tg.start_soon(serve_once)

                    transport = UnixSocketTransport(socket_path)
                    await transport.connect()
                    await transport.write(b'{"type":"version","id":"R1"}\n')
                    lines = await collect(transport.read_lines())
                    await transport.close()

            assert lines == [b'{"type": "event", "data": {}}']
            assert received == [b'{"type":"version","id":"R1"}\n']

        anyio.run(_test)
