"""Unix domain socket transport to a local signald daemon."""

import logging
from pathlib import Path

import anyio
from anyio.abc import ByteStream

from ..._errors import SignaldConnectionError, SocketNotFoundError
from ...types import DEFAULT_MAX_FRAME_SIZE
from .stream import StreamTransport

logger = logging.getLogger(__name__)


class UnixSocketTransport(StreamTransport):
    """Transport connecting to signald over its Unix domain socket."""

    def __init__(
        self,
        socket_path: str | Path,
        max_frame_size: int = DEFAULT_MAX_FRAME_SIZE,
    ):
        super().__init__(max_frame_size=max_frame_size)
        self._socket_path = str(socket_path)

    @property
    def socket_path(self) -> str:
        return self._socket_path

    async def _open_stream(self) -> ByteStream:
        """Connect to the daemon socket."""
        try:
            stream = await anyio.connect_unix(self._socket_path)
        except FileNotFoundError as e:
            error = SocketNotFoundError(socket_path=self._socket_path)
            self._exit_error = error
            raise error from e
        except OSError as e:
            error = SignaldConnectionError(
                f"Failed to connect to signald at {self._socket_path}: {e}"
            )
            self._exit_error = error
            raise error from e

        logger.debug(f"Connected to signald at {self._socket_path}")
        return stream
