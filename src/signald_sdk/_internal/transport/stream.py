"""Transport over any anyio byte stream."""

import logging
from collections.abc import AsyncIterator
from contextlib import suppress

import anyio
from anyio.abc import ByteStream
from anyio.streams.buffered import BufferedByteReceiveStream

from ..._errors import SignaldConnectionError
from ...types import DEFAULT_MAX_FRAME_SIZE
from ..codec import DELIMITER
from . import Transport

logger = logging.getLogger(__name__)


class StreamTransport(Transport):
    """Newline-framed transport on top of a bidirectional anyio ByteStream."""

    def __init__(
        self,
        stream: ByteStream | None = None,
        max_frame_size: int = DEFAULT_MAX_FRAME_SIZE,
    ):
        self._stream = stream
        self._max_frame_size = max_frame_size
        self._receive_stream: BufferedByteReceiveStream | None = None
        self._ready = False
        self._exit_error: Exception | None = None

    async def _open_stream(self) -> ByteStream:
        """Open the stream when none was supplied."""
        raise SignaldConnectionError("No stream to connect to")

    async def connect(self) -> None:
        """Open the stream if needed and prepare line reading."""
        if self._ready:
            return

        if self._stream is None:
            self._stream = await self._open_stream()

        self._receive_stream = BufferedByteReceiveStream(self._stream)
        self._exit_error = None
        self._ready = True

    async def write(self, data: bytes) -> None:
        """Write raw bytes to the stream."""
        if not self._ready or not self._stream:
            raise SignaldConnectionError("Transport is not ready for writing")

        if self._exit_error:
            raise SignaldConnectionError(
                f"Cannot write to a connection that failed: {self._exit_error}"
            ) from self._exit_error

        try:
            await self._stream.send(data)
        except Exception as e:
            self._ready = False
            self._exit_error = SignaldConnectionError(
                f"Failed to write to signald socket: {e}"
            )
            raise self._exit_error from e

    def read_lines(self) -> AsyncIterator[bytes]:
        """Read newline-delimited lines from the stream."""
        return self._read_lines_impl()

    async def _read_lines_impl(self) -> AsyncIterator[bytes]:
        """Internal implementation of read_lines."""
        if not self._receive_stream:
            raise SignaldConnectionError("Not connected")

        receive_stream = self._receive_stream
        while True:
            try:
                line = await receive_stream.receive_until(
                    DELIMITER, self._max_frame_size
                )
            except anyio.IncompleteRead:
                # EOF in the middle of a line: hand over what arrived
                tail = receive_stream.buffer
                if tail.strip():
                    yield bytes(tail)
                break
            except anyio.DelimiterNotFound:
                logger.warning(
                    f"Discarding frame larger than {self._max_frame_size} bytes"
                )
                if not await self._skip_line(receive_stream):
                    break
                continue
            except (anyio.EndOfStream, anyio.ClosedResourceError):
                break
            except (anyio.BrokenResourceError, OSError) as e:
                self._exit_error = SignaldConnectionError(
                    f"Failed to read from signald socket: {e}"
                )
                raise self._exit_error from e

            if len(line) > self._max_frame_size:
                # receive_until returns long lines whose newline shared a chunk
                logger.warning(
                    f"Discarding frame larger than {self._max_frame_size} bytes"
                )
                continue
            if not line.strip():
                continue
            yield line

        logger.debug("Reached end of stream")
        self._ready = False

    async def _skip_line(self, receive_stream: BufferedByteReceiveStream) -> bool:
        """Drop bytes up to and including the next newline.

        Returns:
            False if the stream ended before a newline arrived
        """
        while True:
            await receive_stream.receive_exactly(len(receive_stream.buffer))
            try:
                await receive_stream.receive_until(DELIMITER, self._max_frame_size)
                return True
            except anyio.DelimiterNotFound:
                continue
            except (anyio.IncompleteRead, anyio.EndOfStream, anyio.ClosedResourceError):
                return False

    async def close(self) -> None:
        """Close the stream."""
        self._ready = False

        if self._stream:
            with suppress(Exception):
                await self._stream.aclose()

        self._stream = None
        self._receive_stream = None

    def is_ready(self) -> bool:
        """Check if transport is ready for communication."""
        return self._ready
